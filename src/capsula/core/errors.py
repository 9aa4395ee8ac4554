"""
Error types for capsule registration, composition validation and compilation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .validator import Violation


class CapsulaError(Exception):
    """Base exception for all capsula errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class RegistryError(CapsulaError):
    """
    Raised when a capsule definition cannot be registered.

    Examples:
    - Duplicate prop names within one capsule
    - A prop that is both required and carries a default
    - No platform implementations at all
    """

    pass


class CapsuleNotFoundError(RegistryError):
    """Raised by ``CapsuleRegistry.require`` when an id is not registered."""

    def __init__(self, capsule_id: str):
        self.capsule_id = capsule_id
        super().__init__(f"Capsule '{capsule_id}' is not registered")


class CatalogError(CapsulaError):
    """Raised when a capsule catalog file cannot be loaded."""

    pass


class ConfigError(CapsulaError):
    """Raised when capsula.toml contains invalid compiler settings."""

    pass


class ValidationError(CapsulaError):
    """
    Raised when a composition fails validation before any compiler runs.

    Carries every violation found in the tree, not just the first one.

    Examples:
    - Instance referencing an unregistered capsule
    - Missing required prop / unknown prop / invalid option / type mismatch
    - Children placed under a capsule that does not accept them
    """

    def __init__(self, violations: list[Violation]):
        self.violations = list(violations)
        lines = [v.message for v in self.violations]
        summary = f"Composition has {len(lines)} violation(s)"
        super().__init__(summary + (":\n  - " + "\n  - ".join(lines) if lines else ""))

    @property
    def codes(self) -> list[str]:
        """Violation codes in report order."""
        return [v.code.value for v in self.violations]


class UnknownPlatformError(CapsulaError):
    """Raised when asked to compile for a platform that has no compiler."""

    def __init__(self, platform: object, available: list[str]):
        self.platform = platform
        self.available = available
        super().__init__(
            f"Unknown platform '{platform}'. Available platforms: {', '.join(available)}"
        )


class TemplateRenderError(CapsulaError):
    """Base class for failures while rendering a capsule code template."""

    pass


class UnresolvedPlaceholderError(TemplateRenderError):
    """Raised when a template placeholder has no bound value, default or derived value."""

    def __init__(self, placeholder: str, capsule_id: str | None = None):
        self.placeholder = placeholder
        self.capsule_id = capsule_id
        where = f" in capsule '{capsule_id}'" if capsule_id else ""
        super().__init__(f"Unresolved placeholder '{placeholder}'{where}")


class TemplateSyntaxError(TemplateRenderError):
    """Raised when a code template cannot be parsed."""

    def __init__(self, detail: str, capsule_id: str | None = None, line: int | None = None):
        self.detail = detail
        self.capsule_id = capsule_id
        self.line = line
        where = f" in capsule '{capsule_id}'" if capsule_id else ""
        at = f" (line {line})" if line else ""
        super().__init__(f"Malformed code template{where}{at}: {detail}")
