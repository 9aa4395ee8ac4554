"""
Desktop compiler: Tauri 2 + React.

The frontend is the same React tree the web compiler produces; packaging adds
the Tauri shell.

Generates:
- src/components/<Name>.tsx, src/components/index.ts
- src/App.tsx, src/main.tsx, src/styles/theme.css
- package.json, tsconfig.json, vite.config.ts, index.html
- src-tauri/Cargo.toml, src-tauri/tauri.conf.json, src-tauri/src/main.rs
- src-tauri/build.rs, src-tauri/capabilities/default.json
- README.md
"""

from __future__ import annotations

import json

from ..core import ir
from ..core.strings import escape_string, to_package_segment, to_snake_case
from .base.compiler import CompileContext
from .web import REACT_DEPENDENCIES, WebCompiler, npm_dependencies

TAURI_DEPENDENCIES: dict[str, str] = {
    "@tauri-apps/api": "^2.0.0",
}

TAURI_DEV_DEPENDENCIES: dict[str, str] = {
    "@tauri-apps/cli": "^2.0.0",
}

DEV_SERVER_PORT = 1420


class DesktopCompiler(WebCompiler):
    """Compiles compositions into a Tauri desktop application."""

    platform = ir.Platform.DESKTOP
    language = "tsx"

    def app_id(self, ctx: CompileContext) -> str:
        configured = ctx.composition.platform_config.desktop.app_id
        return configured or f"com.capsula.{to_package_segment(ctx.app_name)}"

    def crate_name(self, ctx: CompileContext) -> str:
        return to_snake_case(ctx.app_name) or "app"

    def package(self, ctx: CompileContext) -> list[ir.GeneratedFile]:
        return [
            self._generate_desktop_package_json(ctx),
            self._generate_tsconfig(),
            self._generate_vite_config(ctx, port=DEV_SERVER_PORT),
            self._generate_index_html(ctx),
            self._generate_main_entry(),
            self._generate_app_component(ctx),
            self._generate_component_index(ctx),
            self._generate_theme_css(ctx),
            self._generate_cargo_toml(ctx),
            self._generate_tauri_config(ctx),
            self._generate_main_rs(),
            self._generate_build_rs(),
            self._generate_capabilities(),
            self._generate_desktop_readme(ctx),
        ]

    def _generate_desktop_package_json(self, ctx: CompileContext) -> ir.GeneratedFile:
        package = {
            "name": ctx.app_slug,
            "version": ctx.composition.version,
            "private": True,
            "type": "module",
            "scripts": {
                "dev": "vite",
                "build": "tsc && vite build",
                "tauri": "tauri",
                "tauri:dev": "tauri dev",
                "tauri:build": "tauri build",
            },
            "dependencies": npm_dependencies(
                {**REACT_DEPENDENCIES, **TAURI_DEPENDENCIES}, ctx.dependencies
            ),
            "devDependencies": {**self.dev_dependencies(ctx), **TAURI_DEV_DEPENDENCIES},
        }
        return ir.GeneratedFile(
            path="package.json", content=json.dumps(package, indent=2) + "\n", language="json"
        )

    def _generate_cargo_toml(self, ctx: CompileContext) -> ir.GeneratedFile:
        description = escape_string(ctx.composition.description or ctx.app_name)
        content = f"""[package]
name = "{self.crate_name(ctx)}"
version = "{ctx.composition.version}"
description = "{description}"
edition = "2021"

[build-dependencies]
tauri-build = {{ version = "2", features = [] }}

[dependencies]
tauri = {{ version = "2", features = [] }}
serde = {{ version = "1", features = ["derive"] }}
serde_json = "1"

[profile.release]
codegen-units = 1
lto = true
opt-level = "s"
strip = true
"""
        return ir.GeneratedFile(path="src-tauri/Cargo.toml", content=content, language="toml")

    def _generate_tauri_config(self, ctx: CompileContext) -> ir.GeneratedFile:
        window = ctx.composition.platform_config.desktop
        config = {
            "$schema": "https://schema.tauri.app/config/2",
            "productName": ctx.app_name,
            "version": ctx.composition.version,
            "identifier": self.app_id(ctx),
            "build": {
                "beforeDevCommand": "npm run dev",
                "devUrl": f"http://localhost:{DEV_SERVER_PORT}",
                "beforeBuildCommand": "npm run build",
                "frontendDist": "../dist",
            },
            "app": {
                "windows": [
                    {
                        "label": "main",
                        "title": ctx.app_name,
                        "width": window.window_width,
                        "height": window.window_height,
                        "resizable": window.resizable,
                        "center": True,
                    }
                ],
                "security": {"csp": None},
            },
            "bundle": {"active": True, "targets": "all"},
        }
        return ir.GeneratedFile(
            path="src-tauri/tauri.conf.json",
            content=json.dumps(config, indent=2) + "\n",
            language="json",
        )

    def _generate_main_rs(self) -> ir.GeneratedFile:
        content = """// Prevents an extra console window on Windows in release builds
#![cfg_attr(not(debug_assertions), windows_subsystem = "windows")]

fn main() {
    tauri::Builder::default()
        .run(tauri::generate_context!())
        .expect("error while running tauri application");
}
"""
        return ir.GeneratedFile(path="src-tauri/src/main.rs", content=content, language="rust")

    def _generate_build_rs(self) -> ir.GeneratedFile:
        content = """fn main() {
    tauri_build::build()
}
"""
        return ir.GeneratedFile(path="src-tauri/build.rs", content=content, language="rust")

    def _generate_capabilities(self) -> ir.GeneratedFile:
        capabilities = {
            "$schema": "../gen/schemas/desktop-schema.json",
            "identifier": "default",
            "description": "Default capabilities for the main window",
            "windows": ["main"],
            "permissions": ["core:default"],
        }
        return ir.GeneratedFile(
            path="src-tauri/capabilities/default.json",
            content=json.dumps(capabilities, indent=2) + "\n",
            language="json",
        )

    def _generate_desktop_readme(self, ctx: CompileContext) -> ir.GeneratedFile:
        content = f"""# {ctx.app_name}

{ctx.composition.description or "Tauri desktop application."}

## Requirements

- Node.js 18+
- Rust toolchain (stable)

## Getting Started

```bash
npm install
npm run tauri:dev
```

{ctx.components_markdown()}
"""
        return ir.GeneratedFile(path="README.md", content=content, language="markdown")


__all__ = ["DesktopCompiler"]
