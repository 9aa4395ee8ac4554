"""
Compilation output types.

A CompilationResult is a pure value created once per compile call. It holds
no timestamps so identical inputs produce identical results.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .platforms import Platform


class DiagnosticCode(str, Enum):
    """Codes for conditions accumulated into a CompilationResult."""

    # Warnings (non-fatal)
    UNSUPPORTED_ON_PLATFORM = "UnsupportedOnPlatform"
    VERSION_CONFLICT = "VersionConflict"
    DEPRECATED_CAPSULE = "DeprecatedCapsule"
    # Errors (fatal for the instance, mark the compile as failed)
    UNRESOLVED_PLACEHOLDER = "UnresolvedPlaceholder"
    TEMPLATE_SYNTAX = "TemplateSyntax"
    UNKNOWN_CAPSULE = "UnknownCapsule"
    COMPILATION_FAILED = "CompilationFailed"


class Diagnostic(BaseModel):
    """A warning or error attached to a compilation result."""

    code: DiagnosticCode
    message: str
    capsule_id: str | None = None
    instance_id: str | None = None
    suggestion: str | None = None

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class CompilationStatus(str, Enum):
    SUCCEEDED = "succeeded"
    PARTIALLY_SUCCEEDED = "partially_succeeded"
    FAILED = "failed"


class GeneratedFile(BaseModel):
    """A file ready to be written verbatim at ``path`` inside the project tree."""

    path: str
    content: str
    language: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def size(self) -> int:
        return len(self.content.encode("utf-8"))


class DependencyEntry(BaseModel):
    """
    One resolved third-party dependency.

    ``separator`` records the notation the capsule author used so the entry
    renders back the same way (``lib@1.4.0`` or ``group:artifact:1.4.0``).
    """

    name: str
    version: str | None = None
    separator: str = "@"

    model_config = ConfigDict(frozen=True)

    @property
    def spec(self) -> str:
        if self.version is None:
            return self.name
        return f"{self.name}{self.separator}{self.version}"

    def __str__(self) -> str:
        return self.spec


class CompilationStats(BaseModel):
    file_count: int = 0
    total_size: int = 0

    model_config = ConfigDict(frozen=True)


class CompilationResult(BaseModel):
    """
    Output of compiling one composition for one platform.

    Attributes:
        platform: Target platform
        files: Generated files in emission order
        dependencies: Deduplicated manifest entries in first-seen order
        warnings: Non-fatal issues (e.g. capsule unsupported on this platform)
        errors: Fatal issues; any error marks the compile as failed
    """

    platform: Platform
    files: tuple[GeneratedFile, ...] = ()
    dependencies: tuple[DependencyEntry, ...] = ()
    warnings: tuple[Diagnostic, ...] = ()
    errors: tuple[Diagnostic, ...] = ()

    model_config = ConfigDict(frozen=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> CompilationStatus:
        if self.errors:
            return CompilationStatus.FAILED
        if self.warnings:
            return CompilationStatus.PARTIALLY_SUCCEEDED
        return CompilationStatus.SUCCEEDED

    @property
    def success(self) -> bool:
        """True unless a fatal error occurred (warnings still count as success)."""
        return self.status is not CompilationStatus.FAILED

    @property
    def stats(self) -> CompilationStats:
        return CompilationStats(
            file_count=len(self.files),
            total_size=sum(f.size for f in self.files),
        )

    @property
    def paths(self) -> list[str]:
        return [f.path for f in self.files]

    def get_file(self, path: str) -> GeneratedFile | None:
        for f in self.files:
            if f.path == path:
                return f
        return None

    def dependency_specs(self) -> list[str]:
        return [d.spec for d in self.dependencies]


class CompilationSummary(BaseModel):
    """Aggregate view over the per-target results of ``compile_all``."""

    total_platforms: int
    successful_platforms: list[Platform] = Field(default_factory=list)
    failed_platforms: list[Platform] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed_platforms
