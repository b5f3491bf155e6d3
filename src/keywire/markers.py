from typing import Annotated, Any, NamedTuple, get_args, get_origin

_ANNOTATED_MARKER_MIN_ARGS = 2


class Inject(NamedTuple):
    """Bind a constructor parameter to a dependency key.

    Attach ``Inject`` metadata to ``typing.Annotated`` on an ``__init__``
    parameter. The auto-wire factory resolves ``dependency_key`` from the
    container and passes the value at that parameter's position.

    Examples:
        .. code-block:: python

            from typing import Annotated


            class Service:
                def __init__(
                    self,
                    repository: Annotated[Repository, Inject("repository")],
                    policies: Annotated[list[Policy], Inject("policies")],
                ) -> None: ...

    """

    dependency_key: str


def extract_inject_marker(annotation: Any) -> Inject | None:
    """Return the last ``Inject`` marker of an ``Annotated[...]`` hint, if any."""
    if get_origin(annotation) is not Annotated:
        return None
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return None
    metadata = annotation_args[1:]
    return next(
        (item for item in reversed(metadata) if isinstance(item, Inject)),
        None,
    )
