"""
Compilation result caching.

CompilationResults are pure values, so a result can be reused whenever the
same composition is compiled for the same platform against the same
registry version. Invalidation is implicit: any registry mutation bumps the
version and therefore the key.
"""

from __future__ import annotations

import hashlib
import json
import threading

from ..core import ir


class ResultCache:
    """In-memory cache of compilation results keyed by content hash."""

    def __init__(self, max_entries: int = 128):
        """
        Initialize result cache.

        Args:
            max_entries: Oldest entries are evicted beyond this size
        """
        self.max_entries = max_entries
        self._entries: dict[str, ir.CompilationResult] = {}
        self._lock = threading.Lock()

    def compute_key(
        self, composition: ir.AppComposition, platform: ir.Platform, registry_version: int
    ) -> str:
        """
        Compute hash for composition + platform + registry version.

        Returns:
            SHA-256 hash string
        """
        payload = {
            "composition": composition.model_dump(mode="json"),
            "platform": platform.value,
            "registry_version": registry_version,
        }
        json_str = json.dumps(payload, sort_keys=True, default=str)
        return hashlib.sha256(json_str.encode()).hexdigest()

    def get(self, key: str) -> ir.CompilationResult | None:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, result: ir.CompilationResult) -> None:
        with self._lock:
            self._entries[key] = result
            while len(self._entries) > self.max_entries:
                del self._entries[next(iter(self._entries))]

    def clear(self) -> None:
        """Drop every cached result."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["ResultCache"]
