"""Constructor injection metadata.

Metadata lives in a side table keyed by the class that defines ``__init__``.
Entries are recorded either explicitly with ``define_dependency_metadata`` or
by scanning ``__init__`` annotations for ``Inject`` markers. Scanning happens
at class-definition time for classes decorated with ``injectable`` and lazily
on first read for everything else.
"""

from __future__ import annotations

import dataclasses
import inspect
import threading
import weakref
from dataclasses import dataclass, field
from typing import Any, TypeVar, get_type_hints

from keywire.exceptions import KeywireDependencyExtractionError
from keywire.markers import extract_inject_marker

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class DependencyMetadata:
    """A dependency key bound to one constructor parameter."""

    dependency_key: str
    parameter_index: int
    member_key: str | None = None


@dataclass(slots=True)
class _MetadataRecord:
    entries: list[DependencyMetadata] = field(default_factory=list)
    scanned: bool = False


_metadata_table: weakref.WeakKeyDictionary[type, _MetadataRecord] = weakref.WeakKeyDictionary()
_metadata_lock = threading.Lock()


def define_dependency_metadata(
    constructor: type,
    dependency_key: str,
    parameter_index: int,
    member_key: str | None = None,
) -> None:
    """Record that ``parameter_index`` of ``constructor`` receives ``dependency_key``.

    A later entry for the same parameter index replaces the earlier one.
    """
    owner = _get_init_owner(constructor)
    entry = DependencyMetadata(
        dependency_key=dependency_key,
        parameter_index=parameter_index,
        member_key=member_key,
    )
    with _metadata_lock:
        record = _metadata_table.setdefault(owner, _MetadataRecord())
        record.entries = [e for e in record.entries if e.parameter_index != parameter_index]
        record.entries.append(entry)


def get_dependency_metadata(constructor: type) -> list[DependencyMetadata]:
    """Return the injection metadata of ``constructor`` in ascending parameter order.

    An empty list means the constructor is called with no arguments.
    """
    owner = _get_init_owner(constructor)
    if owner is object:
        return []

    with _metadata_lock:
        record = _metadata_table.get(owner)
        needs_scan = record is None or not record.scanned

    if needs_scan:
        scanned = _scan_init_annotations(owner)
        with _metadata_lock:
            record = _metadata_table.setdefault(owner, _MetadataRecord())
            if not record.scanned:
                explicit = {e.parameter_index for e in record.entries}
                record.entries.extend(e for e in scanned if e.parameter_index not in explicit)
                record.scanned = True

    with _metadata_lock:
        entries = list(_metadata_table[owner].entries)

    return sorted(entries, key=lambda e: e.parameter_index)


def injectable(cls: type[T]) -> type[T]:
    """Read the ``Inject`` markers of ``cls`` once, when the class is defined.

    Unresolvable annotations fail here instead of at first resolution.
    """
    get_dependency_metadata(cls)
    return cls


def _get_init_owner(constructor: type) -> type:
    for klass in inspect.getmro(constructor):
        if "__init__" in klass.__dict__:
            return klass
    return object


def _scan_init_annotations(owner: type) -> list[DependencyMetadata]:
    init = owner.__dict__["__init__"]
    try:
        signature = inspect.signature(init)
    except (TypeError, ValueError):
        return []

    parameters = [
        p
        for p in list(signature.parameters.values())[1:]
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    if not any(p.annotation is not inspect.Parameter.empty for p in parameters):
        return []

    try:
        hints = _get_init_type_hints(owner, init)
    except (NameError, TypeError) as e:
        raise KeywireDependencyExtractionError(owner, e) from e

    entries: list[DependencyMetadata] = []
    for index, parameter in enumerate(parameters):
        marker = extract_inject_marker(hints.get(parameter.name))
        if marker is None:
            continue
        entries.append(
            DependencyMetadata(
                dependency_key=marker.dependency_key,
                parameter_index=index,
                member_key=parameter.name,
            ),
        )
    return entries


def _get_init_type_hints(owner: type, init: Any) -> dict[str, Any]:
    # Generated dataclass __init__ functions do not carry the module globals.
    if dataclasses.is_dataclass(owner):
        return get_type_hints(owner, include_extras=True)
    return get_type_hints(init, include_extras=True)
