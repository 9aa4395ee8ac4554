"""
Theme token emitters.

Turns a ThemeConfig into the theme file each target project needs:
CSS custom properties (web, desktop), a SwiftUI Color extension (iOS) and a
Compose color object (Android).
"""

from __future__ import annotations

from ...core import ir
from ...core.strings import hex_to_rgb, to_pascal_case

# =============================================================================
# Token tables
# =============================================================================

_RADIUS_PX: dict[str, int] = {
    "none": 0,
    "sm": 4,
    "md": 8,
    "lg": 12,
    "full": 9999,
}

_SPACING_SCALE: dict[str, str] = {
    "compact": "0.875",
    "normal": "1",
    "relaxed": "1.25",
}

_FONT_SCALE: dict[str, str] = {
    "compact": "0.9375",
    "normal": "1",
    "large": "1.125",
}

# (token name, ThemeColors attribute)
_COLOR_TOKENS: list[tuple[str, str]] = [
    ("primary", "primary"),
    ("secondary", "secondary"),
    ("accent", "accent"),
    ("background", "background"),
    ("surface", "surface"),
    ("error", "error"),
    ("success", "success"),
    ("warning", "warning"),
    ("text-primary", "text_primary"),
    ("text-secondary", "text_secondary"),
    ("text-disabled", "text_disabled"),
]


def radius_px(theme: ir.ThemeConfig) -> int:
    return _RADIUS_PX.get(theme.border_radius, 8)


def to_css_variables(theme: ir.ThemeConfig) -> str:
    """Theme as a ``:root`` block of CSS custom properties."""
    colors = theme.colors
    lines = [":root {"]
    for token, attr in _COLOR_TOKENS:
        lines.append(f"  --color-{token}: {getattr(colors, attr)};")
    lines.append(f"  --font-family: {theme.typography.font_family}, system-ui, sans-serif;")
    lines.append(f"  --font-heading: {theme.typography.heading}, system-ui, sans-serif;")
    if theme.typography.mono_font:
        lines.append(f"  --font-mono: {theme.typography.mono_font}, ui-monospace, monospace;")
    lines.append(f"  --font-scale: {_FONT_SCALE[theme.typography.scale]};")
    lines.append(f"  --spacing-scale: {_SPACING_SCALE[theme.spacing]};")
    lines.append(f"  --radius-base: {radius_px(theme)}px;")
    shadow = "0 1px 3px rgba(15, 23, 42, 0.12)" if theme.shadows else "none"
    lines.append(f"  --shadow-base: {shadow};")
    lines.append("}")
    lines.append("")
    lines.append("body {")
    lines.append("  margin: 0;")
    lines.append("  font-family: var(--font-family);")
    lines.append("  background: var(--color-background);")
    lines.append("  color: var(--color-text-primary);")
    lines.append("}")
    return "\n".join(lines) + "\n"


def _swift_color(hex_color: str) -> str:
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return "Color.clear"
    r, g, b = (component / 255 for component in rgb)
    return f"Color(red: {r:.3f}, green: {g:.3f}, blue: {b:.3f})"


def to_swift_theme(theme: ir.ThemeConfig, prefix: str = "app") -> str:
    """Theme as a SwiftUI ``Color`` extension plus layout constants."""
    lines = ["import SwiftUI", "", "extension Color {"]
    for token, attr in _COLOR_TOKENS:
        name = prefix + to_pascal_case(token)
        lines.append(f"    static let {name} = {_swift_color(getattr(theme.colors, attr))}")
    lines.append("}")
    lines.append("")
    lines.append("enum AppTheme {")
    lines.append(f"    static let cornerRadius: CGFloat = {min(radius_px(theme), 999)}")
    lines.append(f"    static let spacingScale: CGFloat = {_SPACING_SCALE[theme.spacing]}")
    lines.append(f'    static let fontFamily = "{theme.typography.font_family}"')
    lines.append(f"    static let shadows = {'true' if theme.shadows else 'false'}")
    lines.append("}")
    return "\n".join(lines) + "\n"


def _kotlin_color(hex_color: str) -> str:
    return f"Color(0xFF{hex_color.lstrip('#').upper()})"


def to_kotlin_theme(theme: ir.ThemeConfig, package: str) -> str:
    """Theme as a Compose color object plus layout constants."""
    lines = [
        f"package {package}",
        "",
        "import androidx.compose.ui.graphics.Color",
        "import androidx.compose.ui.unit.dp",
        "",
        "object AppColors {",
    ]
    for token, attr in _COLOR_TOKENS:
        lines.append(f"    val {to_pascal_case(token)} = {_kotlin_color(getattr(theme.colors, attr))}")
    lines.append("}")
    lines.append("")
    lines.append("object AppShape {")
    lines.append(f"    val CornerRadius = {min(radius_px(theme), 999)}.dp")
    lines.append(f"    const val SpacingScale = {_SPACING_SCALE[theme.spacing]}f")
    lines.append("}")
    return "\n".join(lines) + "\n"


__all__ = [
    "radius_px",
    "to_css_variables",
    "to_kotlin_theme",
    "to_swift_theme",
]
