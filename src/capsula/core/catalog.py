"""
Capsule catalog loading.

Capsule definitions are authored as YAML documents, either one capsule per
file or a ``capsules:`` list. The built-in catalog ships as package data in
``capsula/catalog/``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .errors import CatalogError
from .ir import CapsuleDefinition
from .registry import CapsuleRegistry

logger = logging.getLogger(__name__)

CATALOG_SUFFIXES = (".yaml", ".yml")


def parse_capsule_documents(data: Any, source: str) -> list[CapsuleDefinition]:
    """
    Build capsule definitions from one parsed YAML document.

    Args:
        data: Parsed YAML (a capsule mapping or ``{"capsules": [...]}``)
        source: File name used in error messages

    Raises:
        CatalogError: If the document is empty or does not match the schema
    """
    if not data:
        raise CatalogError(f"Empty or invalid capsule catalog: {source}")

    if isinstance(data, dict) and "capsules" in data:
        raw_items = data["capsules"]
    else:
        raw_items = [data]

    if not isinstance(raw_items, list):
        raise CatalogError(f"'capsules' must be a list in {source}")

    capsules: list[CapsuleDefinition] = []
    for raw in raw_items:
        try:
            capsules.append(CapsuleDefinition.model_validate(raw))
        except PydanticValidationError as e:
            capsule_id = raw.get("id", "<unknown>") if isinstance(raw, dict) else "<unknown>"
            raise CatalogError(f"Invalid capsule '{capsule_id}' in {source}: {e}") from e
    return capsules


def load_capsule_file(path: Path) -> list[CapsuleDefinition]:
    """
    Load capsule definitions from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        CatalogError: If YAML is invalid or doesn't match the schema
    """
    if not path.exists():
        raise FileNotFoundError(f"Capsule catalog not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogError(f"Malformed YAML in {path}: {e}") from e

    return parse_capsule_documents(data, str(path))


def load_catalog(paths: Iterable[Path]) -> list[CapsuleDefinition]:
    """
    Load capsules from files and directories.

    Directories are scanned (non-recursively) for ``*.yaml``/``*.yml`` files
    in sorted order so the resulting list is stable.
    """
    capsules: list[CapsuleDefinition] = []
    for path in paths:
        if path.is_dir():
            files = sorted(p for p in path.iterdir() if p.suffix in CATALOG_SUFFIXES)
        else:
            files = [path]
        for file in files:
            loaded = load_capsule_file(file)
            logger.debug(f"Loaded {len(loaded)} capsule(s) from {file}")
            capsules.extend(loaded)
    return capsules


def load_builtin_catalog() -> list[CapsuleDefinition]:
    """Load the capsule definitions bundled with the package."""
    capsules: list[CapsuleDefinition] = []
    catalog_dir = resources.files("capsula") / "catalog"
    entries = sorted(
        (entry for entry in catalog_dir.iterdir() if entry.name.endswith(CATALOG_SUFFIXES)),
        key=lambda entry: entry.name,
    )
    for entry in entries:
        try:
            data = yaml.safe_load(entry.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise CatalogError(f"Malformed YAML in built-in catalog {entry.name}: {e}") from e
        capsules.extend(parse_capsule_documents(data, entry.name))
    return capsules


def populate_registry(
    registry: CapsuleRegistry, capsules: Iterable[CapsuleDefinition]
) -> int:
    """Register every capsule; returns how many were registered."""
    count = 0
    for capsule in capsules:
        registry.register(capsule)
        count += 1
    return count


__all__ = [
    "load_builtin_catalog",
    "load_capsule_file",
    "load_catalog",
    "parse_capsule_documents",
    "populate_registry",
]
