"""
Target platform identifiers.
"""

from __future__ import annotations

from enum import Enum


class Platform(str, Enum):
    """Native output targets a capsule can be compiled for."""

    WEB = "web"  # React web components
    IOS = "ios"  # SwiftUI
    ANDROID = "android"  # Jetpack Compose
    DESKTOP = "desktop"  # Tauri shell around a React UI

    def __str__(self) -> str:
        return self.value


# Canonical order, also the default compile target list
ALL_PLATFORMS: tuple[Platform, ...] = (
    Platform.WEB,
    Platform.IOS,
    Platform.ANDROID,
    Platform.DESKTOP,
)


def parse_platform(value: object) -> Platform | None:
    """Return the Platform for ``value`` or None if it is not a known identifier."""
    if isinstance(value, Platform):
        return value
    if isinstance(value, str):
        try:
            return Platform(value.strip().lower())
        except ValueError:
            return None
    return None
