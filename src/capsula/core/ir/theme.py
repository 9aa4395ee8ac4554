"""
Theme tokens shared by every generated platform project.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


class ThemeColors(BaseModel):
    """Color tokens. Every value is a ``#rrggbb`` hex string."""

    primary: str = Field(default="#3b82f6", pattern=HEX_COLOR_PATTERN)
    secondary: str = Field(default="#8b5cf6", pattern=HEX_COLOR_PATTERN)
    accent: str = Field(default="#06b6d4", pattern=HEX_COLOR_PATTERN)
    background: str = Field(default="#ffffff", pattern=HEX_COLOR_PATTERN)
    surface: str = Field(default="#f8fafc", pattern=HEX_COLOR_PATTERN)
    error: str = Field(default="#ef4444", pattern=HEX_COLOR_PATTERN)
    success: str = Field(default="#22c55e", pattern=HEX_COLOR_PATTERN)
    warning: str = Field(default="#f59e0b", pattern=HEX_COLOR_PATTERN)
    text_primary: str = Field(default="#0f172a", pattern=HEX_COLOR_PATTERN)
    text_secondary: str = Field(default="#64748b", pattern=HEX_COLOR_PATTERN)
    text_disabled: str = Field(default="#94a3b8", pattern=HEX_COLOR_PATTERN)

    model_config = ConfigDict(frozen=True)

    @field_validator("*")
    @classmethod
    def lowercase_hex(cls, v: str) -> str:
        return v.lower()


class Typography(BaseModel):
    """Font tokens."""

    font_family: str = "Inter"
    heading_font: str | None = None
    mono_font: str | None = None
    scale: Literal["compact", "normal", "large"] = "normal"

    model_config = ConfigDict(frozen=True)

    @property
    def heading(self) -> str:
        return self.heading_font or self.font_family


class ThemeConfig(BaseModel):
    """
    Global theme for a composition.

    Attributes:
        name: Theme name
        colors: Color tokens
        typography: Font tokens
        spacing: Spacing density
        border_radius: Corner radius step
        shadows: Whether elevation shadows are drawn
    """

    name: str = "Default"
    colors: ThemeColors = Field(default_factory=ThemeColors)
    typography: Typography = Field(default_factory=Typography)
    spacing: Literal["compact", "normal", "relaxed"] = "normal"
    border_radius: Literal["none", "sm", "md", "lg", "full"] = "md"
    shadows: bool = True

    model_config = ConfigDict(frozen=True)

    def tokens(self) -> dict[str, Any]:
        """Flat token mapping exposed to code templates as ``theme``."""
        return self.model_dump(mode="json")
