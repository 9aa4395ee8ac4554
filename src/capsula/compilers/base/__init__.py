"""
Shared machinery for platform compilers.

Provides:
- PlatformCompiler: staged compile of a composition for one target
- TemplateRenderer: capsule code template rendering
- DependencyAggregator: per-platform dependency resolution
- theme emitters for CSS, SwiftUI and Compose
"""

from .compiler import CompileContext, CompileStage, EmittedComponent, PlatformCompiler
from .dependencies import (
    DependencyAggregator,
    DependencyManifest,
    aggregate,
    parse_dependency,
    resolve_collision,
)
from .renderer import TemplateRenderer, format_literal
from .theme import radius_px, to_css_variables, to_kotlin_theme, to_swift_theme

__all__ = [
    "CompileContext",
    "CompileStage",
    "EmittedComponent",
    "PlatformCompiler",
    "DependencyAggregator",
    "DependencyManifest",
    "aggregate",
    "parse_dependency",
    "resolve_collision",
    "TemplateRenderer",
    "format_literal",
    "radius_px",
    "to_css_variables",
    "to_kotlin_theme",
    "to_swift_theme",
]
