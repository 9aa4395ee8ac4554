"""Tests for dependency parsing and aggregation."""

from __future__ import annotations

from capsula.compilers.base.dependencies import (
    DependencyAggregator,
    aggregate,
    parse_dependency,
    resolve_collision,
)
from capsula.core import ir
from capsula.core.registry import CapsuleRegistry


def _capsule(capsule_id: str, deps: list[str], platforms: tuple[str, ...] = ("web",)):
    return ir.CapsuleDefinition.model_validate(
        {
            "id": capsule_id,
            "name": capsule_id.title(),
            "platforms": {p: {"framework": "x", "code": "", "dependencies": deps} for p in platforms},
        }
    )


def _instances(*capsule_ids: str) -> list[ir.CapsuleInstance]:
    return [
        ir.CapsuleInstance(instance_id=f"i{index}", capsule_id=capsule_id)
        for index, capsule_id in enumerate(capsule_ids)
    ]


class TestParseDependency:
    def test_name_at_version(self) -> None:
        entry = parse_dependency("lib@1.2.0")
        assert (entry.name, entry.version, entry.spec) == ("lib", "1.2.0", "lib@1.2.0")

    def test_scoped_npm_package(self) -> None:
        entry = parse_dependency("@tanstack/react-query@^5.0.0")
        assert entry.name == "@tanstack/react-query"
        assert entry.version == "^5.0.0"

    def test_scoped_without_version(self) -> None:
        entry = parse_dependency("@scope/pkg")
        assert entry.name == "@scope/pkg"
        assert entry.version is None

    def test_maven_coordinate(self) -> None:
        entry = parse_dependency("io.coil-kt:coil-compose:2.5.0")
        assert entry.name == "io.coil-kt:coil-compose"
        assert entry.version == "2.5.0"
        assert entry.spec == "io.coil-kt:coil-compose:2.5.0"

    def test_bare_name(self) -> None:
        entry = parse_dependency("react")
        assert entry.version is None
        assert entry.spec == "react"


class TestResolveCollision:
    def test_higher_version_wins(self) -> None:
        winner, conflict = resolve_collision(parse_dependency("lib@1.4.0"), parse_dependency("lib@1.2.0"))
        assert winner.version == "1.4.0"
        assert conflict is None

    def test_prerelease_sorts_below_release(self) -> None:
        winner, _ = resolve_collision(parse_dependency("lib@2.0.0-beta.1"), parse_dependency("lib@2.0.0"))
        assert winner.version == "2.0.0"

    def test_major_mismatch_warns(self) -> None:
        winner, conflict = resolve_collision(parse_dependency("lib@1.9.0"), parse_dependency("lib@2.0.0"))
        assert winner.version == "2.0.0"
        assert conflict is not None

    def test_unparsable_keeps_first(self) -> None:
        winner, conflict = resolve_collision(parse_dependency("lib@latest"), parse_dependency("lib@1.0.0"))
        assert winner.version == "latest"
        assert "Cannot compare" in conflict

    def test_versioned_beats_unversioned(self) -> None:
        winner, conflict = resolve_collision(parse_dependency("lib"), parse_dependency("lib@1.0.0"))
        assert winner.version == "1.0.0"
        assert conflict is None


class TestAggregate:
    def test_dedup_resolves_to_highest(self) -> None:
        registry = CapsuleRegistry([_capsule("a", ["lib@1.2.0"]), _capsule("b", ["lib@1.4.0"])])
        manifest = aggregate(_instances("a", "b"), ir.Platform.WEB, registry)
        assert manifest.specs == ["lib@1.4.0"]
        assert manifest.warnings == []

    def test_first_seen_order(self) -> None:
        registry = CapsuleRegistry(
            [_capsule("a", ["zeta@1.0.0", "alpha@1.0.0"]), _capsule("b", ["mid@1.0.0", "zeta@1.1.0"])]
        )
        manifest = aggregate(_instances("a", "b"), ir.Platform.WEB, registry)
        assert manifest.specs == ["zeta@1.1.0", "alpha@1.0.0", "mid@1.0.0"]

    def test_unsupported_and_unknown_instances_skipped(self) -> None:
        registry = CapsuleRegistry([_capsule("ios-only", ["Kingfisher@7.0.0"], ("ios",))])
        manifest = aggregate(_instances("ios-only", "ghost"), ir.Platform.WEB, registry)
        assert manifest.entries == []
        assert manifest.warnings == []

    def test_version_conflict_warning(self) -> None:
        registry = CapsuleRegistry([_capsule("a", ["lib@next"]), _capsule("b", ["lib@2.0.0"])])
        manifest = DependencyAggregator(ir.Platform.WEB).aggregate(_instances("a", "b"), registry)
        assert manifest.specs == ["lib@next"]
        (warning,) = manifest.warnings
        assert warning.code is ir.DiagnosticCode.VERSION_CONFLICT
        assert warning.instance_id == "i1"
        assert manifest.get("lib").version == "next"
