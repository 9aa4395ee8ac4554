"""
Capsula intermediate representation (IR) types.

Types are organized into submodules and re-exported here.
"""

from .capsules import (
    CapsuleDefinition,
    PlatformImplementation,
    PropSpec,
    PropType,
)
from .composition import (
    AndroidAppConfig,
    AppComposition,
    CapsuleInstance,
    DesktopAppConfig,
    IOSAppConfig,
    PlatformConfig,
    WebAppConfig,
)
from .platforms import ALL_PLATFORMS, Platform, parse_platform
from .results import (
    CompilationResult,
    CompilationStats,
    CompilationStatus,
    CompilationSummary,
    DependencyEntry,
    Diagnostic,
    DiagnosticCode,
    GeneratedFile,
)
from .theme import ThemeColors, ThemeConfig, Typography

__all__ = [
    # Platforms
    "ALL_PLATFORMS",
    "Platform",
    "parse_platform",
    # Capsules
    "CapsuleDefinition",
    "PlatformImplementation",
    "PropSpec",
    "PropType",
    # Theme
    "ThemeColors",
    "ThemeConfig",
    "Typography",
    # Composition
    "AppComposition",
    "CapsuleInstance",
    "PlatformConfig",
    "WebAppConfig",
    "IOSAppConfig",
    "AndroidAppConfig",
    "DesktopAppConfig",
    # Results
    "CompilationResult",
    "CompilationStats",
    "CompilationStatus",
    "CompilationSummary",
    "DependencyEntry",
    "Diagnostic",
    "DiagnosticCode",
    "GeneratedFile",
]
