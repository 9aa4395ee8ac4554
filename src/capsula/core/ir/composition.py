"""
Composition IR: the tree of capsule instances submitted to the compiler.

Compositions are plain values. Instances nest by value (no parent links);
``instance_id`` is the stable handle used for diagnostics and for generated
component identifiers.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .platforms import ALL_PLATFORMS, Platform
from .theme import ThemeConfig


class CapsuleInstance(BaseModel):
    """
    One placement of a capsule within a composition.

    Attributes:
        instance_id: Unique within the composition
        capsule_id: Registry key of the capsule definition
        bound_props: Concrete prop values for this placement
        children: Nested instances, in declared order
    """

    instance_id: str = Field(
        ...,
        pattern=r"^[A-Za-z][A-Za-z0-9_-]*$",
        validation_alias=AliasChoices("instance_id", "instanceId", "id"),
    )
    capsule_id: str = Field(..., validation_alias=AliasChoices("capsule_id", "capsuleId"))
    bound_props: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("bound_props", "boundProps", "props"),
    )
    children: tuple[CapsuleInstance, ...] = ()

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class WebAppConfig(BaseModel):
    """React frontend settings, shared by the web and desktop targets."""

    styling: Literal["tailwind", "css"] = "tailwind"

    model_config = ConfigDict(frozen=True)


class IOSAppConfig(BaseModel):
    bundle_id: str | None = None
    min_version: str = "16.0"

    model_config = ConfigDict(frozen=True)


class AndroidAppConfig(BaseModel):
    package_name: str | None = None
    min_sdk: int = 24
    target_sdk: int = 34
    permissions: tuple[str, ...] = ("INTERNET",)

    model_config = ConfigDict(frozen=True)

    @field_validator("package_name")
    @classmethod
    def validate_package_name(cls, v: str | None) -> str | None:
        if v is not None and not re.match(r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)+$", v):
            raise ValueError(f"'{v}' is not a valid Android package name")
        return v


class DesktopAppConfig(BaseModel):
    app_id: str | None = None
    window_width: int = 1200
    window_height: int = 800
    resizable: bool = True

    model_config = ConfigDict(frozen=True)


class PlatformConfig(BaseModel):
    """Per-platform project settings. Unset identifiers derive from the app name."""

    web: WebAppConfig = Field(default_factory=WebAppConfig)
    ios: IOSAppConfig = Field(default_factory=IOSAppConfig)
    android: AndroidAppConfig = Field(default_factory=AndroidAppConfig)
    desktop: DesktopAppConfig = Field(default_factory=DesktopAppConfig)

    model_config = ConfigDict(frozen=True)


class AppComposition(BaseModel):
    """
    The unit submitted to the compiler.

    Attributes:
        app_name: Human-readable application name
        description: Optional description, copied into generated READMEs
        version: Application version written to generated manifests
        theme: Color and typography tokens
        targets: Ordered platforms to compile for (defaults to all four)
        root: Top-level instances in declared order
        platform_config: Per-platform project settings
    """

    app_name: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("app_name", "appName", "name")
    )
    description: str = ""
    version: str = "1.0.0"
    theme: ThemeConfig = Field(default_factory=ThemeConfig)
    targets: tuple[Platform, ...] = ALL_PLATFORMS
    root: tuple[CapsuleInstance, ...] = ()
    platform_config: PlatformConfig = Field(
        default_factory=PlatformConfig,
        validation_alias=AliasChoices("platform_config", "platformConfig"),
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("targets", mode="before")
    @classmethod
    def default_targets(cls, v: Any) -> Any:
        if v is None:
            return ALL_PLATFORMS
        return v

    @field_validator("targets")
    @classmethod
    def dedupe_targets(cls, v: tuple[Platform, ...]) -> tuple[Platform, ...]:
        if not v:
            raise ValueError("targets must name at least one platform")
        return tuple(dict.fromkeys(v))

    def iter_instances(self) -> Iterator[tuple[CapsuleInstance, int, str | None]]:
        """
        Walk every instance depth-first in declared order.

        Yields:
            (instance, depth, parent instance_id or None for top-level)
        """
        stack: list[tuple[CapsuleInstance, int, str | None]] = [
            (inst, 0, None) for inst in reversed(self.root)
        ]
        while stack:
            instance, depth, parent_id = stack.pop()
            yield instance, depth, parent_id
            for child in reversed(instance.children):
                stack.append((child, depth + 1, instance.instance_id))

    def instance_count(self) -> int:
        return sum(1 for _ in self.iter_instances())

    def used_capsule_ids(self) -> list[str]:
        """Distinct capsule ids in first-use order."""
        return list(dict.fromkeys(inst.capsule_id for inst, _, _ in self.iter_instances()))
