"""
Template renderer for capsule code templates.

Code templates are capsule-author text with Jinja2 placeholders
(``{{ label }}``). Rendering is a single substitution pass against the
instance's bound props merged over the capsule defaults, on top of values
derived by the platform compiler (component name, child identifiers, theme
tokens). The environment is sandboxed and undefined names are fatal, so the
renderer stays side-effect free and byte-for-byte deterministic.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from jinja2 import StrictUndefined, TemplateError, UndefinedError
from jinja2 import TemplateSyntaxError as JinjaTemplateSyntaxError
from jinja2.sandbox import SandboxedEnvironment

from ...core import ir
from ...core.errors import (
    TemplateRenderError,
    TemplateSyntaxError,
    UnresolvedPlaceholderError,
)
from ...core.strings import (
    escape_string,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_snake_case,
)

_UNDEFINED_NAME = re.compile(r"^'(?P<name>[^']+)' is undefined")
_MISSING_ATTRIBUTE = re.compile(r"has no attribute '(?P<name>[^']+)'")
_MISSING_ITEM = re.compile(r"has no element (?P<name>.+)$")


# =============================================================================
# Literal formatting
# =============================================================================


def _ts_literal(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return json.dumps(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, list | tuple):
        return "[" + ", ".join(_ts_literal(v) for v in value) + "]"
    if isinstance(value, dict):
        if not value:
            return "{}"
        parts = []
        for key, item in value.items():
            key_text = str(key)
            if not re.fullmatch(r"[A-Za-z_$][A-Za-z0-9_$]*", key_text):
                key_text = json.dumps(key_text, ensure_ascii=False)
            parts.append(f"{key_text}: {_ts_literal(item)}")
        return "{ " + ", ".join(parts) + " }"
    return json.dumps(str(value), ensure_ascii=False)


def _swift_literal(value: Any) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return repr(value)
    if isinstance(value, str):
        return f'"{escape_string(value)}"'
    if isinstance(value, list | tuple):
        return "[" + ", ".join(_swift_literal(v) for v in value) + "]"
    if isinstance(value, dict):
        if not value:
            return "[:]"
        return (
            "["
            + ", ".join(f"{_swift_literal(str(k))}: {_swift_literal(v)}" for k, v in value.items())
            + "]"
        )
    return f'"{escape_string(str(value))}"'


def _kotlin_literal(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return repr(value)
    if isinstance(value, str):
        return '"' + escape_string(value).replace("$", "\\$") + '"'
    if isinstance(value, list | tuple):
        return "listOf(" + ", ".join(_kotlin_literal(v) for v in value) + ")"
    if isinstance(value, dict):
        return (
            "mapOf("
            + ", ".join(f"{_kotlin_literal(str(k))} to {_kotlin_literal(v)}" for k, v in value.items())
            + ")"
        )
    return _kotlin_literal(str(value))


_LITERAL_FORMATTERS = {
    ir.Platform.WEB: _ts_literal,
    ir.Platform.DESKTOP: _ts_literal,
    ir.Platform.IOS: _swift_literal,
    ir.Platform.ANDROID: _kotlin_literal,
}


def format_literal(value: Any, platform: ir.Platform) -> str:
    """
    Render a Python value as a source literal for ``platform``.

    Examples:
        >>> format_literal(["a", 1], ir.Platform.ANDROID)
        'listOf("a", 1)'
        >>> format_literal({}, ir.Platform.IOS)
        '[:]'
    """
    return _LITERAL_FORMATTERS[platform](value)


# =============================================================================
# Renderer
# =============================================================================


def _placeholder_from(error: UndefinedError) -> str:
    message = error.message or ""
    for pattern in (_UNDEFINED_NAME, _MISSING_ATTRIBUTE, _MISSING_ITEM):
        match = pattern.search(message)
        if match:
            return match.group("name")
    return message or "<unknown>"


class TemplateRenderer:
    """
    Renders capsule code templates for one platform.

    Filters available to templates:
        literal  - platform-native literal (strings quoted/escaped, arrays, maps)
        quote    - double-quoted, escaped string
        pascal / camel / snake / kebab - identifier casing
    """

    def __init__(self, platform: ir.Platform):
        self.platform = platform
        self.env = SandboxedEnvironment(
            undefined=StrictUndefined,  # unresolved placeholders are fatal
            keep_trailing_newline=True,
            autoescape=False,
        )
        self.env.filters.update(
            literal=lambda value: format_literal(value, platform),
            quote=lambda value: f'"{escape_string(str(value))}"',
            pascal=lambda value: to_pascal_case(str(value)),
            camel=lambda value: to_camel_case(str(value)),
            snake=lambda value: to_snake_case(str(value)),
            kebab=lambda value: to_kebab_case(str(value)),
        )

    def render_template(
        self,
        template: str,
        values: Mapping[str, Any],
        *,
        capsule_id: str | None = None,
    ) -> str:
        """
        Substitute ``values`` into ``template``.

        Raises:
            UnresolvedPlaceholderError: A placeholder has no value
            TemplateSyntaxError: The template cannot be parsed
            TemplateRenderError: Any other template failure
        """
        try:
            compiled = self.env.from_string(template)
        except JinjaTemplateSyntaxError as e:
            raise TemplateSyntaxError(e.message or str(e), capsule_id, e.lineno) from e

        try:
            return compiled.render(dict(values))
        except UndefinedError as e:
            raise UnresolvedPlaceholderError(_placeholder_from(e), capsule_id) from e
        except TemplateError as e:
            raise TemplateRenderError(
                f"Template for capsule '{capsule_id}' failed to render: {e}"
            ) from e
        except Exception as e:
            # Runtime errors raised by template expressions, e.g. {{ text + 1 }}
            raise TemplateRenderError(
                f"Template for capsule '{capsule_id}' failed to render: "
                f"{type(e).__name__}: {e}"
            ) from e

    def build_context(
        self,
        bound_props: Mapping[str, Any],
        *,
        defaults: Mapping[str, Any] | None = None,
        derived: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Derived values, overlaid by capsule defaults, overlaid by bound props."""
        context: dict[str, Any] = {"platform": self.platform.value}
        context.update(derived or {})
        context.update(defaults or {})
        context.update(bound_props)
        return context

    def render(
        self,
        implementation: ir.PlatformImplementation,
        bound_props: Mapping[str, Any],
        *,
        defaults: Mapping[str, Any] | None = None,
        derived: Mapping[str, Any] | None = None,
        capsule_id: str | None = None,
    ) -> str:
        """
        Render one platform implementation for one instance.

        Args:
            implementation: Platform implementation holding the code template
            bound_props: Values bound on the instance
            defaults: Capsule prop defaults used when a prop is unbound
            derived: Compiler-computed values (component_name, children, theme, ...)
            capsule_id: Capsule id for diagnostics

        Returns:
            Rendered source text
        """
        context = self.build_context(bound_props, defaults=defaults, derived=derived)
        return self.render_template(implementation.code_template, context, capsule_id=capsule_id)

    def render_capsule(
        self,
        capsule: ir.CapsuleDefinition,
        bound_props: Mapping[str, Any],
        derived: Mapping[str, Any] | None = None,
    ) -> str:
        """Render ``capsule``'s implementation for this renderer's platform."""
        implementation = capsule.implementation(self.platform)
        if implementation is None:
            raise TemplateRenderError(
                f"Capsule '{capsule.id}' has no {self.platform.value} implementation"
            )
        return self.render(
            implementation,
            bound_props,
            defaults=capsule.defaults(),
            derived=derived,
            capsule_id=capsule.id,
        )


__all__ = ["TemplateRenderer", "format_literal"]
