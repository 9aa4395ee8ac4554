"""Shared pytest fixtures for capsula tests."""

from __future__ import annotations

from typing import Any

import pytest

from capsula.core import ir
from capsula.core.registry import CapsuleRegistry, reset_registry


def make_button(**overrides: Any) -> ir.CapsuleDefinition:
    """Button capsule implemented for web and ios only."""
    data: dict[str, Any] = {
        "id": "button",
        "name": "Button",
        "description": "Clickable button",
        "category": "ui",
        "tags": ["action", "form"],
        "version": "1.0.0",
        "props": [
            {"name": "label", "type": "string", "required": True},
            {
                "name": "variant",
                "type": "select",
                "options": ["primary", "secondary"],
                "default": "primary",
            },
            {"name": "disabled", "type": "boolean", "default": False},
        ],
        "platforms": {
            "web": {
                "framework": "react",
                "dependencies": ["lib@1.2.0"],
                "imports": ['import React from "react";'],
                "code": (
                    "export function {{ component_name }}() {\n"
                    '  return <button className={ {{ variant | literal }} } '
                    "disabled={ {{ disabled | literal }} }>{ {{ label | literal }} }</button>;\n"
                    "}\n"
                ),
            },
            "ios": {
                "framework": "swiftui",
                "imports": ["import SwiftUI"],
                "code": (
                    "struct {{ component_name }}View: View {\n"
                    "    var body: some View { Button({{ label | literal }}) {} }\n"
                    "}\n"
                ),
            },
        },
    }
    data.update(overrides)
    return ir.CapsuleDefinition.model_validate(data)


def make_stack(**overrides: Any) -> ir.CapsuleDefinition:
    """Layout capsule accepting children, implemented on every platform."""
    web_code = (
        "{{ children_imports }}\n"
        "export function {{ component_name }}() {\n"
        "  return (\n"
        "    <div>\n"
        "{{ children_body }}\n"
        "    </div>\n"
        "  );\n"
        "}\n"
    )
    data: dict[str, Any] = {
        "id": "stack",
        "name": "Stack",
        "category": "layout",
        "tags": ["layout"],
        "version": "1.0.0",
        "children": True,
        "props": [{"name": "gap", "type": "number", "default": 8, "min": 0}],
        "platforms": {
            "web": {"framework": "react", "dependencies": ["lib@1.4.0"], "code": web_code},
            "desktop": {"framework": "react", "code": web_code},
            "ios": {
                "framework": "swiftui",
                "code": (
                    "struct {{ component_name }}View: View {\n"
                    "    var body: some View {\n"
                    "        VStack(spacing: {{ gap }}) {\n"
                    "{{ children_body }}\n"
                    "        }\n"
                    "    }\n"
                    "}\n"
                ),
            },
            "android": {
                "framework": "compose",
                "code": (
                    "@Composable\n"
                    "fun {{ component_name }}() {\n"
                    "    Column {\n"
                    "{{ children_body }}\n"
                    "    }\n"
                    "}\n"
                ),
            },
        },
    }
    data.update(overrides)
    return ir.CapsuleDefinition.model_validate(data)


def make_label(**overrides: Any) -> ir.CapsuleDefinition:
    """Text capsule implemented on every platform."""
    data: dict[str, Any] = {
        "id": "label",
        "name": "Label",
        "category": "ui",
        "version": "1.0.0",
        "props": [{"name": "text", "type": "string", "default": "Hello"}],
        "platforms": {
            platform: {"framework": "native", "code": "// {{ component_name }}: {{ text }}\n"}
            for platform in ("web", "ios", "android", "desktop")
        },
    }
    data.update(overrides)
    return ir.CapsuleDefinition.model_validate(data)


@pytest.fixture
def button_capsule() -> ir.CapsuleDefinition:
    return make_button()


@pytest.fixture
def stack_capsule() -> ir.CapsuleDefinition:
    return make_stack()


@pytest.fixture
def label_capsule() -> ir.CapsuleDefinition:
    return make_label()


@pytest.fixture
def registry(
    button_capsule: ir.CapsuleDefinition,
    stack_capsule: ir.CapsuleDefinition,
    label_capsule: ir.CapsuleDefinition,
) -> CapsuleRegistry:
    """Isolated registry holding the button, stack and label fixtures."""
    return CapsuleRegistry([button_capsule, stack_capsule, label_capsule])


@pytest.fixture
def buy_now_composition() -> ir.AppComposition:
    """Single top-level button instance."""
    return ir.AppComposition(
        app_name="Shop",
        root=(
            ir.CapsuleInstance(
                instance_id="buy-button", capsule_id="button", bound_props={"label": "Buy Now"}
            ),
        ),
    )


@pytest.fixture
def nested_composition() -> ir.AppComposition:
    """Stack holding a button and a label."""
    return ir.AppComposition(
        app_name="My Shop",
        description="Demo storefront",
        root=(
            ir.CapsuleInstance(
                instance_id="main",
                capsule_id="stack",
                bound_props={"gap": 12},
                children=(
                    ir.CapsuleInstance(
                        instance_id="buy-button",
                        capsule_id="button",
                        bound_props={"label": "Buy Now"},
                    ),
                    ir.CapsuleInstance(
                        instance_id="greeting", capsule_id="label", bound_props={"text": "Hi"}
                    ),
                ),
            ),
        ),
    )


@pytest.fixture(autouse=True)
def _isolate_process_registry():
    """Keep the process-wide registry from leaking between tests."""
    reset_registry()
    yield
    reset_registry()
