"""Core capsula functionality: IR, registry, catalog loading, validation, configuration."""

from . import ir
from .catalog import load_builtin_catalog, load_capsule_file, load_catalog, populate_registry
from .composition import build_composition, parse_composition, validate_composition
from .config import CompilerConfig, build_registry, load_compiler_config, load_project_config
from .errors import (
    CapsulaError,
    CapsuleNotFoundError,
    CatalogError,
    ConfigError,
    RegistryError,
    TemplateRenderError,
    TemplateSyntaxError,
    UnknownPlatformError,
    UnresolvedPlaceholderError,
    ValidationError,
)
from .registry import (
    CapsuleRegistry,
    RegistrySnapshot,
    get_registry,
    register_capsule,
    reset_registry,
    unregister_capsule,
)
from .validator import PropValidationResult, Violation, ViolationCode, validate_props

__all__ = [
    "ir",
    # Errors
    "CapsulaError",
    "CapsuleNotFoundError",
    "CatalogError",
    "ConfigError",
    "RegistryError",
    "TemplateRenderError",
    "TemplateSyntaxError",
    "UnknownPlatformError",
    "UnresolvedPlaceholderError",
    "ValidationError",
    # Registry
    "CapsuleRegistry",
    "RegistrySnapshot",
    "get_registry",
    "register_capsule",
    "reset_registry",
    "unregister_capsule",
    # Catalog
    "load_builtin_catalog",
    "load_capsule_file",
    "load_catalog",
    "populate_registry",
    # Validation / composition
    "PropValidationResult",
    "Violation",
    "ViolationCode",
    "validate_props",
    "build_composition",
    "parse_composition",
    "validate_composition",
    # Config
    "CompilerConfig",
    "build_registry",
    "load_compiler_config",
    "load_project_config",
]
