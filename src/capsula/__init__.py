"""
capsula - multi-platform capsule compiler.

Compiles a declarative composition of reusable UI components ("capsules")
into native source trees for web, iOS, Android and desktop.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _distribution_version

# Re-export commonly used types for convenience
from .compilers import CapsuleCompiler, compile_all, compile_for_platform, summarize
from .core import ir
from .core.composition import build_composition
from .core.config import CompilerConfig, build_registry, load_compiler_config
from .core.errors import (
    CapsulaError,
    RegistryError,
    TemplateRenderError,
    UnknownPlatformError,
    ValidationError,
)
from .core.registry import CapsuleRegistry, get_registry, register_capsule, unregister_capsule

try:
    __version__ = _distribution_version("capsula")
except PackageNotFoundError:  # source checkout without an install
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "ir",
    # Errors
    "CapsulaError",
    "RegistryError",
    "TemplateRenderError",
    "UnknownPlatformError",
    "ValidationError",
    # Registry
    "CapsuleRegistry",
    "get_registry",
    "register_capsule",
    "unregister_capsule",
    # Composition / compile
    "CapsuleCompiler",
    "CompilerConfig",
    "build_composition",
    "build_registry",
    "compile_all",
    "compile_for_platform",
    "load_compiler_config",
    "summarize",
]
