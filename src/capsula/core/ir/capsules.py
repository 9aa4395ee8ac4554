"""
Capsule definition types.

A capsule is a reusable UI component: a platform-agnostic prop schema plus
one opaque code template per supported platform. Definitions are immutable
once built; the registry owns them and everything else only reads them.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..versions import is_strict_semver
from .platforms import Platform


class PropType(str, Enum):
    """Declared type of a capsule prop."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    SELECT = "select"  # enumerated; the only type that carries options
    # String-valued semantic types
    COLOR = "color"  # hex value or theme token name
    ICON = "icon"  # SF Symbol / Material icon name
    IMAGE = "image"  # URL or bundled asset
    ACTION = "action"  # handler name wired by the generated app

    @property
    def is_string_like(self) -> bool:
        return self in _STRING_LIKE


_STRING_LIKE = frozenset(
    {PropType.STRING, PropType.COLOR, PropType.ICON, PropType.IMAGE, PropType.ACTION}
)


class PropSpec(BaseModel):
    """
    Schema entry for a single capsule prop.

    Attributes:
        name: Prop identifier, unique within its capsule
        type: Declared type
        required: Whether an instance must bind a value
        default: Value used when the instance leaves the prop unbound
        options: Allowed values (``select`` only)
        description: Human-readable help text
        min_value / max_value: Inclusive bounds for ``number`` props
        pattern: Regular expression a string-like value must fully match
    """

    name: str = Field(..., pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    type: PropType
    required: bool = False
    default: Any = None
    options: tuple[Any, ...] | None = None
    description: str = ""
    min_value: float | None = Field(default=None, alias="min")
    max_value: float | None = Field(default=None, alias="max")
    pattern: str | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str | None) -> str | None:
        if v is not None:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"Pattern {v!r} is not a valid regular expression: {e}") from e
        return v

    @model_validator(mode="after")
    def check_schema_shape(self) -> PropSpec:
        if self.type is PropType.SELECT:
            if not self.options:
                raise ValueError(f"Prop '{self.name}' of type select must declare options")
            if self.default is not None and self.default not in self.options:
                raise ValueError(
                    f"Default {self.default!r} of prop '{self.name}' is not one of its options"
                )
        elif self.options is not None:
            raise ValueError(f"Prop '{self.name}' declares options but is not of type select")
        if self.required and self.default is not None:
            raise ValueError(f"Prop '{self.name}' cannot be both required and have a default")
        return self

    @property
    def has_default(self) -> bool:
        return self.default is not None


class PlatformImplementation(BaseModel):
    """
    Native realization of a capsule on one platform.

    The code template is opaque text; only placeholders are interpreted,
    at render time. Dependencies use the target's native notation
    (``name@version`` for npm/SPM, ``group:artifact:version`` for Gradle).
    """

    framework: str
    min_version: str | None = None
    dependencies: tuple[str, ...] = ()
    code_template: str = Field(..., alias="code")
    imports: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class CapsuleDefinition(BaseModel):
    """
    Immutable, versioned component description.

    Attributes:
        id: Unique registry key
        name: Display name
        category: Grouping (ui, layout, forms, data, media, ...)
        tags: Free-form search tags
        version: Semantic version of this definition
        props: Ordered prop schema
        platforms: Implementation per supported platform (non-empty subset)
        children: Whether instances may nest other instances
        deprecated: Still compiles, but compilers warn
    """

    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    category: str = "ui"
    tags: frozenset[str] = Field(default_factory=frozenset)
    version: str = "1.0.0"
    props: tuple[PropSpec, ...] = ()
    platforms: dict[Platform, PlatformImplementation]
    children: bool = False
    deprecated: bool = False
    author: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        if not is_strict_semver(v):
            raise ValueError(f"Capsule version '{v}' is not a MAJOR.MINOR.PATCH semantic version")
        return v

    @field_validator("platforms")
    @classmethod
    def validate_platforms(
        cls, v: dict[Platform, PlatformImplementation]
    ) -> dict[Platform, PlatformImplementation]:
        if not v:
            raise ValueError("Capsule must implement at least one platform")
        return v

    @model_validator(mode="after")
    def check_unique_props(self) -> CapsuleDefinition:
        names = [p.name for p in self.props]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Capsule '{self.id}' has duplicate prop names: {duplicates}")
        return self

    def get_prop(self, name: str) -> PropSpec | None:
        """Get prop spec by name."""
        for prop in self.props:
            if prop.name == name:
                return prop
        return None

    @property
    def prop_names(self) -> list[str]:
        return [p.name for p in self.props]

    def defaults(self) -> dict[str, Any]:
        """Default values of every prop that declares one, in schema order."""
        return {p.name: p.default for p in self.props if p.has_default}

    def supports(self, platform: Platform) -> bool:
        return platform in self.platforms

    def implementation(self, platform: Platform) -> PlatformImplementation | None:
        return self.platforms.get(platform)

    @property
    def supported_platforms(self) -> list[Platform]:
        return [p for p in Platform if p in self.platforms]
