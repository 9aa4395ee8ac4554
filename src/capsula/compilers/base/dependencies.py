"""
Dependency aggregation.

Merges the third-party dependency declarations of every capsule instance
into a single manifest for one platform. Collisions resolve to the highest
version; anything that cannot be compared keeps the first-seen request and
is reported as a VersionConflict warning. The output keeps first-seen order
so generated manifests diff cleanly between runs.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from ...core import ir
from ...core.composition import CapsuleLookup
from ...core.versions import parse_version

logger = logging.getLogger(__name__)

# group:artifact:version (Gradle / Maven coordinates)
_MAVEN_COORDINATE = re.compile(r"^(?P<name>[\w.\-]+:[\w.\-]+):(?P<version>[^:@\s]+)$")


def parse_dependency(spec: str) -> ir.DependencyEntry:
    """
    Parse a dependency declaration.

    Supported notations:
        lib@1.2.0                 -> name "lib", version "1.2.0"
        @scope/pkg@^2.0.0         -> name "@scope/pkg", version "^2.0.0"
        group:artifact:1.2.0      -> name "group:artifact", version "1.2.0"
        lib                       -> name "lib", no version

    Examples:
        >>> parse_dependency("@tanstack/react-query@5.0.0").name
        '@tanstack/react-query'
        >>> parse_dependency("io.coil-kt:coil-compose:2.5.0").separator
        ':'
    """
    text = spec.strip()
    at = text.rfind("@")
    if at > 0:
        name, version = text[:at], text[at + 1 :]
        return ir.DependencyEntry(name=name, version=version or None, separator="@")

    match = _MAVEN_COORDINATE.match(text)
    if match:
        return ir.DependencyEntry(
            name=match.group("name"), version=match.group("version"), separator=":"
        )

    return ir.DependencyEntry(name=text)


@dataclass
class DependencyManifest:
    """Resolved dependencies for one platform plus resolution warnings."""

    platform: ir.Platform
    entries: list[ir.DependencyEntry] = field(default_factory=list)
    warnings: list[ir.Diagnostic] = field(default_factory=list)

    @property
    def specs(self) -> list[str]:
        return [e.spec for e in self.entries]

    def get(self, name: str) -> ir.DependencyEntry | None:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None


def resolve_collision(
    current: ir.DependencyEntry, requested: ir.DependencyEntry
) -> tuple[ir.DependencyEntry, str | None]:
    """
    Pick between two requests for the same dependency.

    Returns:
        (winning entry, conflict message or None)
    """
    if requested.version is None or requested.version == current.version:
        return current, None
    if current.version is None:
        return requested, None

    current_v = parse_version(current.version)
    requested_v = parse_version(requested.version)
    if current_v is None or requested_v is None:
        return current, (
            f"Cannot compare versions '{current.version}' and '{requested.version}' of "
            f"'{current.name}'; keeping '{current.version}'"
        )

    winner = requested if requested_v > current_v else current
    if current_v.major != requested_v.major:
        return winner, (
            f"Incompatible major versions '{current.version}' and '{requested.version}' of "
            f"'{current.name}'; using '{winner.version}'"
        )
    return winner, None


class DependencyAggregator:
    """Collects per-capsule dependencies for one platform."""

    def __init__(self, platform: ir.Platform):
        self.platform = platform

    def aggregate(
        self,
        instances: Iterable[ir.CapsuleInstance],
        capsules: CapsuleLookup,
    ) -> DependencyManifest:
        """
        Merge dependency declarations of ``instances`` in composition order.

        Instances whose capsule is unknown or does not support the platform
        are skipped; the platform compiler reports those.

        Args:
            instances: Instances in composition (depth-first) order
            capsules: Registry snapshot used to look up definitions

        Returns:
            DependencyManifest with entries in first-seen order
        """
        manifest = DependencyManifest(platform=self.platform)
        resolved: dict[str, ir.DependencyEntry] = {}

        for instance in instances:
            capsule = capsules.get(instance.capsule_id)
            implementation = capsule.implementation(self.platform) if capsule else None
            if implementation is None:
                continue

            for spec in implementation.dependencies:
                requested = parse_dependency(spec)
                current = resolved.get(requested.name)
                if current is None:
                    resolved[requested.name] = requested
                    continue

                winner, conflict = resolve_collision(current, requested)
                resolved[requested.name] = winner
                if conflict:
                    logger.info(f"[{self.platform.value}] {conflict}")
                    manifest.warnings.append(
                        ir.Diagnostic(
                            code=ir.DiagnosticCode.VERSION_CONFLICT,
                            message=conflict,
                            capsule_id=instance.capsule_id,
                            instance_id=instance.instance_id,
                            suggestion="Pin a single version in the capsule definitions",
                        )
                    )

        manifest.entries = list(resolved.values())
        return manifest


def aggregate(
    instances: Iterable[ir.CapsuleInstance],
    platform: ir.Platform,
    capsules: CapsuleLookup,
) -> DependencyManifest:
    """Functional form of DependencyAggregator.aggregate."""
    return DependencyAggregator(platform).aggregate(instances, capsules)


__all__ = [
    "DependencyAggregator",
    "DependencyManifest",
    "aggregate",
    "parse_dependency",
    "resolve_collision",
]
