"""Tests for Inject markers, the metadata reader and the auto-wire factory."""

from dataclasses import dataclass
from typing import Annotated

import pytest

from keywire.collection import ServiceCollection
from keywire.container import ServiceContainer
from keywire.dependencies import create_auto_wire_factory
from keywire.exceptions import KeywireDependencyExtractionError, KeywireInvalidRegistrationError
from keywire.markers import Inject, extract_inject_marker
from keywire.metadata import (
    DependencyMetadata,
    define_dependency_metadata,
    get_dependency_metadata,
    injectable,
)


class Dependency:
    def __init__(self) -> None:
        self.executed = False

    def execute(self) -> None:
        self.executed = True


class Service:
    def __init__(self, dependency: Annotated[Dependency, Inject("Hello")]) -> None:
        self.dependency = dependency

    def execute(self) -> None:
        self.dependency.execute()


class TwoDependencies:
    def __init__(
        self,
        first: Annotated[str, Inject("a")],
        second: Annotated[str, Inject("b")],
    ) -> None:
        self.args = (first, second)


class WithUnmarkedDefault:
    def __init__(
        self,
        first: Annotated[str, Inject("a")],
        unmarked: str = "default",
        third: Annotated[str, Inject("c")] = "unset",
    ) -> None:
        self.args = (first, unmarked, third)


class InheritsInit(TwoDependencies):
    pass


class OverridesInit(TwoDependencies):
    def __init__(self) -> None:
        super().__init__("x", "y")


@injectable
@dataclass
class Config:
    host: Annotated[str, Inject("host")]
    port: Annotated[int, Inject("port")]


class Leaf:
    pass


class Branch:
    def __init__(self, leaf: Annotated[Leaf, Inject("leaf")]) -> None:
        self.leaf = leaf


class Root:
    def __init__(
        self,
        branch: Annotated[Branch, Inject("branch")],
        leaf: Annotated[Leaf, Inject("leaf")],
    ) -> None:
        self.branch = branch
        self.leaf = leaf


class Chicken:
    def __init__(self, egg: Annotated[object, Inject("egg")]) -> None:
        self.egg = egg


class Egg:
    def __init__(self, chicken: Annotated[object, Inject("chicken")]) -> None:
        self.chicken = chicken


class TestMarkers:
    def test_extracts_marker_from_annotated(self) -> None:
        assert extract_inject_marker(Annotated[str, Inject("key")]) == Inject("key")

    def test_last_marker_wins(self) -> None:
        annotation = Annotated[str, Inject("first"), "other", Inject("second")]

        assert extract_inject_marker(annotation) == Inject("second")

    def test_plain_annotations_have_no_marker(self) -> None:
        assert extract_inject_marker(str) is None
        assert extract_inject_marker(Annotated[str, "metadata"]) is None


class TestMetadataReader:
    def test_reads_annotated_parameters_in_order(self) -> None:
        assert get_dependency_metadata(TwoDependencies) == [
            DependencyMetadata("a", 0, "first"),
            DependencyMetadata("b", 1, "second"),
        ]

    def test_class_without_markers_has_no_metadata(self) -> None:
        assert get_dependency_metadata(Leaf) == []
        assert get_dependency_metadata(Dependency) == []

    def test_explicit_entries_are_sorted_by_parameter_index(self) -> None:
        class Target:
            def __init__(self, first: object, second: object, third: object) -> None:
                self.args = (first, second, third)

        define_dependency_metadata(Target, "c", 2)
        define_dependency_metadata(Target, "b", 1)
        define_dependency_metadata(Target, "a", 0)

        assert [entry.dependency_key for entry in get_dependency_metadata(Target)] == [
            "a",
            "b",
            "c",
        ]

    def test_explicit_entry_replaces_same_index(self) -> None:
        class Target:
            def __init__(self, first: object) -> None:
                self.first = first

        define_dependency_metadata(Target, "old", 0)
        define_dependency_metadata(Target, "new", 0)

        assert [entry.dependency_key for entry in get_dependency_metadata(Target)] == ["new"]

    def test_explicit_entries_take_precedence_over_annotations(self) -> None:
        class Target:
            def __init__(
                self,
                first: Annotated[str, Inject("annotated-a")],
                second: Annotated[str, Inject("annotated-b")],
            ) -> None:
                self.args = (first, second)

        define_dependency_metadata(Target, "explicit", 1, "second")

        assert [entry.dependency_key for entry in get_dependency_metadata(Target)] == [
            "annotated-a",
            "explicit",
        ]

    def test_subclass_without_init_reads_base_metadata(self) -> None:
        assert get_dependency_metadata(InheritsInit) == get_dependency_metadata(TwoDependencies)

    def test_subclass_with_own_init_does_not_inherit(self) -> None:
        assert get_dependency_metadata(OverridesInit) == []

    def test_dataclass_fields_are_read(self) -> None:
        assert [entry.dependency_key for entry in get_dependency_metadata(Config)] == [
            "host",
            "port",
        ]

    def test_injectable_reports_unresolvable_annotations(self) -> None:
        with pytest.raises(KeywireDependencyExtractionError) as exc_info:

            @injectable
            class Broken:
                def __init__(self, dep: "Annotated[Undefined, Inject('x')]") -> None:  # type: ignore[name-defined]  # noqa: F821
                    self.dep = dep

        assert isinstance(exc_info.value.error, NameError)

    def test_injectable_returns_the_class(self) -> None:
        class Target:
            pass

        assert injectable(Target) is Target


class TestAutoWireFactory:
    def test_happy_path(self, services: ServiceCollection) -> None:
        dependency = Dependency()
        services.register("Hello", lambda _: dependency)
        services.use("Service", Service)

        service = services.build_container().get("Service")
        service.execute()

        assert dependency.executed

    def test_parameters_receive_keys_by_position(self, services: ServiceCollection) -> None:
        services.register("a", "value-a")
        services.register("b", "value-b")

        instance = services.build_container().resolve(TwoDependencies)

        assert instance.args == ("value-a", "value-b")

    def test_recording_order_does_not_change_arguments(self, services: ServiceCollection) -> None:
        class Target:
            def __init__(self, first: object, second: object) -> None:
                self.args = (first, second)

        define_dependency_metadata(Target, "b", 1, "second")
        define_dependency_metadata(Target, "a", 0, "first")
        services.register("a", "value-a")
        services.register("b", "value-b")

        assert services.build_container().resolve(Target).args == ("value-a", "value-b")

    def test_class_without_metadata_is_created_without_arguments(
        self,
        empty_container: ServiceContainer,
    ) -> None:
        assert isinstance(create_auto_wire_factory(Leaf)(empty_container), Leaf)

    def test_entries_after_a_gap_are_passed_by_keyword(self, services: ServiceCollection) -> None:
        services.register("a", "value-a")
        services.register("c", "value-c")

        instance = services.build_container().resolve(WithUnmarkedDefault)

        assert instance.args == ("value-a", "default", "value-c")

    def test_gap_without_member_key_is_rejected(self, services: ServiceCollection) -> None:
        class Target:
            def __init__(self, first: object = None, second: object = None) -> None:
                self.args = (first, second)

        define_dependency_metadata(Target, "b", 1)
        services.register("b", "value-b")

        with pytest.raises(KeywireInvalidRegistrationError):
            services.build_container().resolve(Target)

    def test_dataclass_is_auto_wired(self, services: ServiceCollection) -> None:
        services.register("host", "localhost")
        services.register("port", 5432)

        config = services.build_container().resolve(Config)

        assert config == Config("localhost", 5432)

    def test_resolves_nested_graph(self, services: ServiceCollection) -> None:
        services.use("leaf", Leaf)
        services.use("branch", Branch)
        services.use("root", Root)

        root = services.build_container().get("root")

        assert root.branch.leaf is root.leaf

    def test_missing_dependency_propagates(self, empty_container: ServiceContainer) -> None:
        with pytest.raises(KeyError):
            empty_container.resolve(Service)

    def test_constructor_cycle_recurses_without_detection(
        self,
        services: ServiceCollection,
    ) -> None:
        services.use("chicken", Chicken)
        services.use("egg", Egg)

        with pytest.raises(RecursionError):
            services.build_container().get("chicken")
