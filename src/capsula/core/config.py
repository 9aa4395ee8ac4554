"""
Compiler configuration.

Parses the [compiler] section from capsula.toml and provides typed settings
for the registry and the orchestrator.

Example capsula.toml:

    [compiler]
    strict_props = true
    parallel = true
    max_workers = 4
    cache_results = false
    include_builtin_catalog = true
    catalog_paths = ["capsules/"]
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "capsula.toml"


class CompilerConfig(BaseModel):
    """
    Compiler settings.

    Attributes:
        strict_props: Reject unknown props (True) or drop them silently (False)
        parallel: Compile targets of compile_all on a thread pool
        max_workers: Upper bound on worker threads
        cache_results: Reuse results for identical (composition, platform, registry version)
        include_builtin_catalog: Register the bundled capsules at startup
        catalog_paths: Extra capsule catalog files/directories, relative to the project root
    """

    strict_props: bool = True
    parallel: bool = True
    max_workers: int = Field(default=4, ge=1)
    cache_results: bool = False
    include_builtin_catalog: bool = True
    catalog_paths: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def resolve_catalog_paths(self, project_root: Path) -> list[Path]:
        """Catalog paths made absolute against ``project_root``."""
        resolved = []
        for raw in self.catalog_paths:
            path = Path(raw)
            resolved.append(path if path.is_absolute() else project_root / path)
        return resolved


def parse_compiler_config(data: dict[str, Any]) -> CompilerConfig:
    """
    Build a CompilerConfig from the parsed [compiler] table.

    Raises:
        ConfigError: If a value has the wrong type or an unknown key is present
    """
    try:
        return CompilerConfig(**data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid [compiler] configuration: {e}") from e


def load_compiler_config(toml_path: Path) -> CompilerConfig:
    """
    Load compiler configuration from capsula.toml.

    Args:
        toml_path: Path to capsula.toml

    Returns:
        CompilerConfig with parsed values or defaults
    """
    if not toml_path.exists():
        return CompilerConfig()

    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Malformed TOML in {toml_path}: {e}") from e

    compiler_data = data.get("compiler", {})
    if not compiler_data:
        return CompilerConfig()

    config = parse_compiler_config(compiler_data)
    logger.debug(f"Loaded compiler config from {toml_path}")
    return config


def load_project_config(project_root: Path) -> CompilerConfig:
    """Load ``capsula.toml`` from a project root (defaults if absent)."""
    return load_compiler_config(project_root / CONFIG_FILENAME)


def build_registry(config: CompilerConfig, project_root: Path | None = None):
    """
    Create a registry populated according to ``config``.

    Returns:
        A new CapsuleRegistry (never the process-wide one)
    """
    from .catalog import load_builtin_catalog, load_catalog, populate_registry
    from .registry import CapsuleRegistry

    registry = CapsuleRegistry()
    if config.include_builtin_catalog:
        populate_registry(registry, load_builtin_catalog())
    if config.catalog_paths:
        root = project_root or Path.cwd()
        count = populate_registry(registry, load_catalog(config.resolve_catalog_paths(root)))
        logger.info(f"Registered {count} capsule(s) from project catalogs")
    return registry


__all__ = [
    "CONFIG_FILENAME",
    "CompilerConfig",
    "build_registry",
    "load_compiler_config",
    "load_project_config",
    "parse_compiler_config",
]
