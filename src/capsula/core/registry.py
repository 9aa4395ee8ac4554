"""
Capsule registry.

The registry is the only shared mutable state in the compiler. Reads go
against an immutable snapshot that writers swap atomically, so in-flight
compiles keep a consistent view while capsules are registered or removed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .errors import CapsuleNotFoundError, RegistryError
from .ir import CapsuleDefinition, Platform, parse_platform

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrySnapshot:
    """Read-only view of the registry at one version."""

    capsules: Mapping[str, CapsuleDefinition] = field(
        default_factory=lambda: MappingProxyType({})
    )
    version: int = 0

    def get(self, capsule_id: str) -> CapsuleDefinition | None:
        return self.capsules.get(capsule_id)

    def require(self, capsule_id: str) -> CapsuleDefinition:
        capsule = self.capsules.get(capsule_id)
        if capsule is None:
            raise CapsuleNotFoundError(capsule_id)
        return capsule

    def list(self) -> list[CapsuleDefinition]:
        return list(self.capsules.values())

    def list_by_category(self, category: str) -> list[CapsuleDefinition]:
        return [c for c in self.capsules.values() if c.category == category]

    def list_by_tag(self, tag: str) -> list[CapsuleDefinition]:
        return [c for c in self.capsules.values() if tag in c.tags]

    def list_by_platform(self, platform: Platform | str) -> list[CapsuleDefinition]:
        target = parse_platform(platform)
        if target is None:
            return []
        return [c for c in self.capsules.values() if c.supports(target)]

    def search(self, query: str) -> list[CapsuleDefinition]:
        """Case-insensitive match on id, name, description and tags."""
        needle = query.strip().lower()
        if not needle:
            return self.list()
        return [
            c
            for c in self.capsules.values()
            if needle in c.id.lower()
            or needle in c.name.lower()
            or needle in c.description.lower()
            or any(needle in tag.lower() for tag in c.tags)
        ]

    def supports_platform(self, capsule_id: str, platform: Platform | str) -> bool:
        capsule = self.capsules.get(capsule_id)
        target = parse_platform(platform)
        if capsule is None or target is None:
            return False
        return capsule.supports(target)

    def __contains__(self, capsule_id: object) -> bool:
        return capsule_id in self.capsules

    def __len__(self) -> int:
        return len(self.capsules)


class CapsuleRegistry:
    """
    Catalog of capsule definitions keyed by id.

    Supports:
    - Registration (insert or overwrite by id) and removal
    - Lookup and pure filters (category, tag, platform, free-text search)
    - Consistent snapshots for concurrent compiles

    Writers serialize on an internal lock and publish a new snapshot;
    readers never block.
    """

    def __init__(self, capsules: Iterable[CapsuleDefinition | Mapping[str, Any]] = ()) -> None:
        self._lock = threading.Lock()
        self._snapshot = RegistrySnapshot()
        for capsule in capsules:
            self.register(capsule)

    # -- mutation -----------------------------------------------------------

    def register(self, definition: CapsuleDefinition | Mapping[str, Any]) -> CapsuleDefinition:
        """
        Insert or overwrite a capsule definition.

        Code templates are treated as opaque text here; only the schema
        shape is checked.

        Args:
            definition: CapsuleDefinition or a mapping in the catalog format

        Returns:
            The registered definition

        Raises:
            RegistryError: If the definition shape is invalid
        """
        capsule = self._coerce(definition)
        with self._lock:
            current = self._snapshot
            replaced = capsule.id in current.capsules
            updated = dict(current.capsules)
            updated[capsule.id] = capsule
            self._snapshot = RegistrySnapshot(MappingProxyType(updated), current.version + 1)
        logger.debug(
            f"{'Replaced' if replaced else 'Registered'} capsule {capsule.id} v{capsule.version}"
        )
        return capsule

    def unregister(self, capsule_id: str) -> bool:
        """
        Remove a capsule.

        Returns:
            Whether an entry existed
        """
        with self._lock:
            current = self._snapshot
            if capsule_id not in current.capsules:
                return False
            updated = {k: v for k, v in current.capsules.items() if k != capsule_id}
            self._snapshot = RegistrySnapshot(MappingProxyType(updated), current.version + 1)
        logger.debug(f"Unregistered capsule {capsule_id}")
        return True

    def clear(self) -> None:
        with self._lock:
            self._snapshot = RegistrySnapshot(MappingProxyType({}), self._snapshot.version + 1)

    @staticmethod
    def _coerce(definition: CapsuleDefinition | Mapping[str, Any]) -> CapsuleDefinition:
        if isinstance(definition, CapsuleDefinition):
            return definition
        try:
            return CapsuleDefinition.model_validate(definition)
        except PydanticValidationError as e:
            capsule_id = definition.get("id", "<unknown>") if isinstance(definition, Mapping) else "<unknown>"
            raise RegistryError(f"Invalid capsule definition '{capsule_id}': {e}") from e

    # -- reads --------------------------------------------------------------

    def snapshot(self) -> RegistrySnapshot:
        """Current immutable view; stays valid while the registry changes."""
        return self._snapshot

    @property
    def version(self) -> int:
        """Monotonic counter bumped on every mutation."""
        return self._snapshot.version

    def get(self, capsule_id: str) -> CapsuleDefinition | None:
        return self._snapshot.get(capsule_id)

    def require(self, capsule_id: str) -> CapsuleDefinition:
        return self._snapshot.require(capsule_id)

    def list(self) -> list[CapsuleDefinition]:
        return self._snapshot.list()

    def list_by_category(self, category: str) -> list[CapsuleDefinition]:
        return self._snapshot.list_by_category(category)

    def list_by_tag(self, tag: str) -> list[CapsuleDefinition]:
        return self._snapshot.list_by_tag(tag)

    def list_by_platform(self, platform: Platform | str) -> list[CapsuleDefinition]:
        return self._snapshot.list_by_platform(platform)

    def search(self, query: str) -> list[CapsuleDefinition]:
        return self._snapshot.search(query)

    def supports_platform(self, capsule_id: str, platform: Platform | str) -> bool:
        return self._snapshot.supports_platform(capsule_id, platform)

    def __contains__(self, capsule_id: object) -> bool:
        return capsule_id in self._snapshot

    def __len__(self) -> int:
        return len(self._snapshot)


# Process-wide registry instance
_registry: CapsuleRegistry | None = None
_registry_lock = threading.Lock()


def get_registry() -> CapsuleRegistry:
    """
    Get the process-wide registry.

    Loads the built-in capsule catalog on first call.

    Returns:
        CapsuleRegistry singleton
    """
    global _registry
    with _registry_lock:
        if _registry is None:
            from .catalog import load_builtin_catalog

            registry = CapsuleRegistry()
            for capsule in load_builtin_catalog():
                registry.register(capsule)
            logger.info(f"Initialized capsule registry with {len(registry)} built-in capsules")
            _registry = registry
        return _registry


def reset_registry() -> None:
    """Drop the process-wide registry; the next get_registry() rebuilds it."""
    global _registry
    with _registry_lock:
        _registry = None


def register_capsule(definition: CapsuleDefinition | Mapping[str, Any]) -> CapsuleDefinition:
    """Register a capsule in the process-wide registry."""
    return get_registry().register(definition)


def unregister_capsule(capsule_id: str) -> bool:
    """Remove a capsule from the process-wide registry."""
    return get_registry().unregister(capsule_id)


__all__ = [
    "CapsuleRegistry",
    "RegistrySnapshot",
    "get_registry",
    "reset_registry",
    "register_capsule",
    "unregister_capsule",
]
