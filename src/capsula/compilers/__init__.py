"""
Platform compilers for capsula.

Compilers turn a validated AppComposition into native project files:
- web: React + Vite
- ios: SwiftUI
- android: Jetpack Compose
- desktop: Tauri + React
"""

from .android import AndroidCompiler
from .base import CompileContext, CompileStage, PlatformCompiler, TemplateRenderer
from .cache import ResultCache
from .desktop import DesktopCompiler
from .ios import IOSCompiler
from .orchestrator import (
    COMPILERS,
    CapsuleCompiler,
    compile_all,
    compile_for_platform,
    summarize,
)
from .web import WebCompiler

__all__ = [
    "AndroidCompiler",
    "CapsuleCompiler",
    "COMPILERS",
    "CompileContext",
    "CompileStage",
    "DesktopCompiler",
    "IOSCompiler",
    "PlatformCompiler",
    "ResultCache",
    "TemplateRenderer",
    "WebCompiler",
    "compile_all",
    "compile_for_platform",
    "summarize",
]
