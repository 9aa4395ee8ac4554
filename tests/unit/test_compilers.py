"""Tests for the per-platform compilers."""

from __future__ import annotations

import json
import logging

import pytest
from conftest import make_label, make_stack

from capsula.compilers import AndroidCompiler, DesktopCompiler, IOSCompiler, WebCompiler
from capsula.compilers.base.compiler import CompileContext
from capsula.core import ir
from capsula.core.catalog import load_builtin_catalog
from capsula.core.composition import build_composition
from capsula.core.registry import CapsuleRegistry

ANDROID_ROOT = "app/src/main/java/com/capsula/myshop"


def _codes(diagnostics: tuple[ir.Diagnostic, ...]) -> list[str]:
    return [d.code.value for d in diagnostics]


class TestUnsupportedCapsules:
    def test_lone_unsupported_capsule_yields_no_files(
        self, registry: CapsuleRegistry, buy_now_composition: ir.AppComposition
    ) -> None:
        result = AndroidCompiler(registry).compile(buy_now_composition)

        assert result.files == ()
        assert result.dependencies == ()
        assert _codes(result.warnings) == ["UnsupportedOnPlatform"]
        assert result.warnings[0].instance_id == "buy-button"
        assert result.warnings[0].suggestion == "Supported platforms: web, ios"
        assert result.errors == ()
        assert result.status is ir.CompilationStatus.PARTIALLY_SUCCEEDED

    def test_siblings_still_compile(
        self, registry: CapsuleRegistry, nested_composition: ir.AppComposition
    ) -> None:
        result = AndroidCompiler(registry).compile(nested_composition)

        assert f"{ANDROID_ROOT}/ui/components/Main.kt" in result.paths
        assert f"{ANDROID_ROOT}/ui/components/Greeting.kt" in result.paths
        assert f"{ANDROID_ROOT}/ui/components/BuyButton.kt" not in result.paths
        assert _codes(result.warnings) == ["UnsupportedOnPlatform"]

        main = result.get_file(f"{ANDROID_ROOT}/ui/components/Main.kt").content
        assert "Greeting()" in main
        assert "BuyButton" not in main

    def test_unsupported_wrapper_promotes_children(self, registry: CapsuleRegistry) -> None:
        ios_only = make_stack(
            id="sheet",
            platforms={"ios": {"framework": "swiftui", "code": "struct {{ component_name }}View {}"}},
        )
        registry.register(ios_only)
        composition = ir.AppComposition(
            app_name="Wrapped",
            root=(
                ir.CapsuleInstance(
                    instance_id="sheet",
                    capsule_id="sheet",
                    children=(ir.CapsuleInstance(instance_id="note", capsule_id="label"),),
                ),
            ),
        )

        result = WebCompiler(registry).compile(composition)

        app = result.get_file("src/App.tsx").content
        assert 'import { Note } from "./components";' in app
        assert "<Note />" in app
        assert "Sheet" not in app


class TestWebCompiler:
    def test_component_and_project_files(
        self, registry: CapsuleRegistry, buy_now_composition: ir.AppComposition
    ) -> None:
        result = WebCompiler(registry).compile(buy_now_composition)

        assert result.status is ir.CompilationStatus.SUCCEEDED
        assert result.paths == [
            "src/components/BuyButton.tsx",
            "package.json",
            "tsconfig.json",
            "vite.config.ts",
            "index.html",
            "src/main.tsx",
            "src/App.tsx",
            "src/components/index.ts",
            "src/styles/theme.css",
            "README.md",
        ]
        assert result.stats.file_count == 10
        assert result.stats.total_size == sum(len(f.content.encode()) for f in result.files)
        component = result.get_file("src/components/BuyButton.tsx").content
        assert component.startswith('import React from "react";\n\nexport function BuyButton()')
        assert '{ "Buy Now" }' in component
        assert 'className={ "primary" }' in component

    def test_package_json_carries_resolved_dependencies(
        self, registry: CapsuleRegistry, nested_composition: ir.AppComposition
    ) -> None:
        result = WebCompiler(registry).compile(nested_composition)

        assert result.dependency_specs() == ["lib@1.4.0"]
        package = json.loads(result.get_file("package.json").content)
        assert package["name"] == "my-shop"
        assert package["dependencies"]["lib"] == "1.4.0"
        assert "react" in package["dependencies"]

    def test_parent_imports_and_places_children(
        self, registry: CapsuleRegistry, nested_composition: ir.AppComposition
    ) -> None:
        result = WebCompiler(registry).compile(nested_composition)

        main = result.get_file("src/components/Main.tsx").content
        assert main.startswith('import { BuyButton } from "./BuyButton";\n')
        assert "<BuyButton />\n<Greeting />" in main

        app = result.get_file("src/App.tsx").content
        assert 'import { Main } from "./components";' in app
        assert "Greeting" not in app

        index = result.get_file("src/components/index.ts").content
        assert index.splitlines() == [
            'export { Main } from "./Main";',
            'export { BuyButton } from "./BuyButton";',
            'export { Greeting } from "./Greeting";',
        ]

    def test_theme_css(self, registry: CapsuleRegistry, buy_now_composition: ir.AppComposition) -> None:
        themed = buy_now_composition.model_copy(
            update={"theme": ir.ThemeConfig(colors=ir.ThemeColors(primary="#FF0000"))}
        )
        css = WebCompiler(registry).compile(themed).get_file("src/styles/theme.css").content
        assert css.startswith('@import "tailwindcss";\n\n:root {')
        assert "--color-primary: #ff0000;" in css

    def test_index_html_escapes_title(
        self, registry: CapsuleRegistry, buy_now_composition: ir.AppComposition
    ) -> None:
        hostile = buy_now_composition.model_copy(
            update={"app_name": "Shop</title><script>alert(1)</script>"}
        )
        page = WebCompiler(registry).compile(hostile).get_file("index.html").content

        assert "<script>alert(1)</script>" not in page
        assert "<title>Shop&lt;/title&gt;&lt;script&gt;alert(1)&lt;/script&gt;</title>" in page

    def test_plain_css_styling_drops_tailwind(
        self, registry: CapsuleRegistry, buy_now_composition: ir.AppComposition
    ) -> None:
        plain = buy_now_composition.model_copy(
            update={"platform_config": ir.PlatformConfig(web=ir.WebAppConfig(styling="css"))}
        )
        result = WebCompiler(registry).compile(plain)

        assert result.get_file("src/styles/theme.css").content.startswith(":root {")
        assert "tailwindcss" not in result.get_file("vite.config.ts").content
        package = json.loads(result.get_file("package.json").content)
        assert "tailwindcss" not in package["devDependencies"]


class TestIOSCompiler:
    def test_paths_and_entry_points(
        self, registry: CapsuleRegistry, nested_composition: ir.AppComposition
    ) -> None:
        result = IOSCompiler(registry).compile(nested_composition)

        assert result.status is ir.CompilationStatus.SUCCEEDED
        for path in (
            "MyShop/Components/MainView.swift",
            "MyShop/Components/BuyButtonView.swift",
            "MyShop/Components/GreetingView.swift",
            "Package.swift",
            "MyShop/MyShopApp.swift",
            "MyShop/ContentView.swift",
            "MyShop/Theme/Theme.swift",
            "MyShop/Info.plist",
            "README.md",
        ):
            assert path in result.paths

        main = result.get_file("MyShop/Components/MainView.swift").content
        assert "VStack(spacing: 12)" in main
        assert "BuyButtonView()\nGreetingView()" in main

        content_view = result.get_file("MyShop/ContentView.swift").content
        assert "MainView()" in content_view
        assert "GreetingView()" not in content_view

    def test_imports_are_emitted_once(
        self, registry: CapsuleRegistry, buy_now_composition: ir.AppComposition
    ) -> None:
        result = IOSCompiler(registry).compile(buy_now_composition)
        view = result.get_file("Shop/Components/BuyButtonView.swift")
        assert view.content.count("import SwiftUI") == 1

    def test_package_swift_requirements(self, registry: CapsuleRegistry) -> None:
        registry.register(
            make_label(
                id="gallery",
                platforms={
                    "ios": {
                        "framework": "swiftui",
                        "code": "struct {{ component_name }}View {}",
                        "dependencies": ["onevcat/Kingfisher@latest", "apple/swift-log@^1.5"],
                    }
                },
            )
        )
        composition = ir.AppComposition(
            app_name="Shop", root=(ir.CapsuleInstance(instance_id="photos", capsule_id="gallery"),)
        )

        manifest = IOSCompiler(registry).compile(composition).get_file("Package.swift").content

        assert '.package(url: "https://github.com/onevcat/Kingfisher", branch: "main"),' in manifest
        assert '.package(url: "https://github.com/apple/swift-log", from: "1.5.0"),' in manifest

    def test_bundle_id_from_platform_config(
        self, registry: CapsuleRegistry, buy_now_composition: ir.AppComposition
    ) -> None:
        configured = buy_now_composition.model_copy(
            update={
                "platform_config": ir.PlatformConfig(
                    ios=ir.IOSAppConfig(bundle_id="com.example.shop")
                )
            }
        )
        plist = IOSCompiler(registry).compile(configured).get_file("Shop/Info.plist").content
        assert "com.example.shop" in plist


class TestAndroidCompiler:
    def test_component_files_declare_package(
        self, registry: CapsuleRegistry, nested_composition: ir.AppComposition
    ) -> None:
        result = AndroidCompiler(registry).compile(nested_composition)

        greeting = result.get_file(f"{ANDROID_ROOT}/ui/components/Greeting.kt").content
        assert greeting.startswith("package com.capsula.myshop.ui.components\n\n")
        assert "// Greeting: Hi" in greeting

    def test_project_files(
        self, registry: CapsuleRegistry, nested_composition: ir.AppComposition
    ) -> None:
        result = AndroidCompiler(registry).compile(nested_composition)

        for path in (
            "settings.gradle.kts",
            "build.gradle.kts",
            "app/build.gradle.kts",
            "app/src/main/AndroidManifest.xml",
            f"{ANDROID_ROOT}/MainActivity.kt",
            f"{ANDROID_ROOT}/ui/theme/Color.kt",
            "README.md",
        ):
            assert path in result.paths

        activity = result.get_file(f"{ANDROID_ROOT}/MainActivity.kt").content
        assert "import com.capsula.myshop.ui.components.Main" in activity
        assert "Main()" in activity

        manifest = result.get_file("app/src/main/AndroidManifest.xml").content
        gradle = result.get_file("app/build.gradle.kts").content
        assert 'android:theme="@style/Theme.Material3.DayNight.NoActionBar"' in manifest
        assert 'implementation("com.google.android.material:material:1.11.0")' in gradle


class TestDesktopCompiler:
    def test_tauri_project(
        self, registry: CapsuleRegistry, nested_composition: ir.AppComposition
    ) -> None:
        result = DesktopCompiler(registry).compile(nested_composition)

        assert _codes(result.warnings) == ["UnsupportedOnPlatform"]
        assert "src/components/Main.tsx" in result.paths
        assert "src-tauri/Cargo.toml" in result.paths
        assert "src-tauri/src/main.rs" in result.paths
        assert result.get_file("src-tauri/build.rs").content == (
            "fn main() {\n    tauri_build::build()\n}\n"
        )

        config = json.loads(result.get_file("src-tauri/tauri.conf.json").content)
        (window,) = config["app"]["windows"]
        assert (window["width"], window["height"]) == (1200, 800)
        assert window["title"] == "My Shop"

        capabilities = json.loads(result.get_file("src-tauri/capabilities/default.json").content)
        assert capabilities["windows"] == [window["label"]]
        assert capabilities["permissions"] == ["core:default"]


class TestDiagnostics:
    def test_unresolved_placeholder_fails_without_packaging(
        self, registry: CapsuleRegistry, buy_now_composition: ir.AppComposition
    ) -> None:
        registry.register(
            make_label(
                id="broken",
                platforms={"web": {"framework": "react", "code": "{{ nope }}"}},
            )
        )
        composition = buy_now_composition.model_copy(
            update={
                "root": buy_now_composition.root
                + (ir.CapsuleInstance(instance_id="oops", capsule_id="broken"),)
            }
        )

        result = WebCompiler(registry).compile(composition)

        assert result.status is ir.CompilationStatus.FAILED
        (error,) = result.errors
        assert error.code is ir.DiagnosticCode.UNRESOLVED_PLACEHOLDER
        assert error.instance_id == "oops"
        assert "nope" in error.suggestion
        assert "package.json" not in result.paths
        assert result.paths == ["src/components/BuyButton.tsx"]

    def test_template_syntax_error(self, registry: CapsuleRegistry) -> None:
        registry.register(
            make_label(id="garbled", platforms={"web": {"framework": "react", "code": "{% if %}"}})
        )
        composition = ir.AppComposition(
            app_name="Bad", root=(ir.CapsuleInstance(instance_id="g", capsule_id="garbled"),)
        )
        result = WebCompiler(registry).compile(composition)
        assert _codes(result.errors) == ["TemplateSyntax"]

    def test_template_runtime_error_is_per_instance(self, registry: CapsuleRegistry) -> None:
        registry.register(
            make_label(id="adder", platforms={"web": {"framework": "react", "code": "{{ text + 1 }}"}})
        )
        composition = ir.AppComposition(
            app_name="Sum",
            root=(
                ir.CapsuleInstance(instance_id="first", capsule_id="label"),
                ir.CapsuleInstance(instance_id="boom", capsule_id="adder"),
                ir.CapsuleInstance(instance_id="after", capsule_id="label"),
            ),
        )

        result = WebCompiler(registry).compile(composition)

        assert result.paths == ["src/components/First.tsx", "src/components/After.tsx"]
        (error,) = result.errors
        assert error.code is ir.DiagnosticCode.COMPILATION_FAILED
        assert error.instance_id == "boom"
        assert error.capsule_id == "adder"

    def test_unknown_capsule_is_an_error(self, registry: CapsuleRegistry) -> None:
        composition = ir.AppComposition(
            app_name="Ghost", root=(ir.CapsuleInstance(instance_id="g", capsule_id="ghost"),)
        )
        result = WebCompiler(registry).compile(composition)
        assert _codes(result.errors) == ["UnknownCapsule"]
        assert result.files == ()

    def test_deprecated_capsule_warns_once(self, registry: CapsuleRegistry) -> None:
        registry.register(make_label(deprecated=True))
        composition = ir.AppComposition(
            app_name="Old",
            root=(
                ir.CapsuleInstance(instance_id="first", capsule_id="label"),
                ir.CapsuleInstance(instance_id="second", capsule_id="label"),
            ),
        )
        result = WebCompiler(registry).compile(composition)

        assert _codes(result.warnings) == ["DeprecatedCapsule"]
        assert len([p for p in result.paths if p.startswith("src/components/") and p.endswith(".tsx")]) == 2

    def test_unexpected_exception_becomes_compilation_failed(
        self, registry: CapsuleRegistry, buy_now_composition: ir.AppComposition
    ) -> None:
        class ExplodingCompiler(WebCompiler):
            def package(self, ctx: CompileContext) -> list[ir.GeneratedFile]:
                raise RuntimeError("disk on fire")

        result = ExplodingCompiler(registry).compile(buy_now_composition)

        (error,) = result.errors
        assert error.code is ir.DiagnosticCode.COMPILATION_FAILED
        assert "packaging" in error.message
        assert "disk on fire" in error.message

    def test_stage_transitions_are_logged(
        self,
        registry: CapsuleRegistry,
        buy_now_composition: ir.AppComposition,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.DEBUG, logger="capsula.compilers.base.compiler")
        WebCompiler(registry).compile(buy_now_composition)
        assert "pending -> validating" in caplog.text
        assert "packaging -> done" in caplog.text


class TestNaming:
    def test_colliding_identifiers_get_suffix(self, registry: CapsuleRegistry) -> None:
        composition = ir.AppComposition(
            app_name="Twins",
            root=(
                ir.CapsuleInstance(instance_id="buy-button", capsule_id="label"),
                ir.CapsuleInstance(instance_id="buyButton", capsule_id="label"),
            ),
        )
        names = WebCompiler(registry).assign_names(composition)
        assert names == {"buy-button": "BuyButton", "buyButton": "BuyButton2"}

        result = WebCompiler(registry).compile(composition)
        assert "src/components/BuyButton2.tsx" in result.paths

    def test_web_app_component_name_is_reserved(self, registry: CapsuleRegistry) -> None:
        composition = ir.AppComposition(
            app_name="Shop", root=(ir.CapsuleInstance(instance_id="app", capsule_id="label"),)
        )

        result = WebCompiler(registry).compile(composition)

        assert "src/components/App2.tsx" in result.paths
        app = result.get_file("src/App.tsx").content
        assert 'import { App2 } from "./components";' in app
        assert "<App2 />" in app

    def test_ios_content_view_name_is_reserved(self, registry: CapsuleRegistry) -> None:
        composition = ir.AppComposition(
            app_name="Shop",
            root=(
                ir.CapsuleInstance(instance_id="content", capsule_id="label"),
                ir.CapsuleInstance(instance_id="shop-app", capsule_id="label"),
            ),
        )

        result = IOSCompiler(registry).compile(composition)

        assert "Shop/Components/Content2View.swift" in result.paths
        assert "Shop/Components/ContentView.swift" not in result.paths
        assert "Shop/Components/ShopAppView.swift" in result.paths
        assert "Content2View()" in result.get_file("Shop/ContentView.swift").content

    def test_android_scaffolding_names_are_reserved(self, registry: CapsuleRegistry) -> None:
        composition = ir.AppComposition(
            app_name="My Shop",
            root=(
                ir.CapsuleInstance(instance_id="main-activity", capsule_id="label"),
                ir.CapsuleInstance(instance_id="app-colors", capsule_id="label"),
            ),
        )

        names = AndroidCompiler(registry).assign_names(
            composition, {"MainActivity", "AppColors", "AppShape"}
        )

        assert names == {"main-activity": "MainActivity2", "app-colors": "AppColors2"}
        result = AndroidCompiler(registry).compile(composition)
        assert f"{ANDROID_ROOT}/ui/components/MainActivity2.kt" in result.paths


class TestDeterminism:
    @pytest.mark.parametrize("compiler_class", [WebCompiler, IOSCompiler, AndroidCompiler, DesktopCompiler])
    def test_identical_inputs_identical_results(
        self, registry: CapsuleRegistry, nested_composition: ir.AppComposition, compiler_class: type
    ) -> None:
        compiler = compiler_class(registry)
        first = compiler.compile(nested_composition)
        second = compiler.compile(nested_composition)
        assert first == second
        assert first.model_dump() == second.model_dump()


class TestBuiltinCatalog:
    def test_showcase_compiles_everywhere(self) -> None:
        registry = CapsuleRegistry(load_builtin_catalog())
        composition = build_composition(
            {
                "appName": "Showcase",
                "theme": {"colors": {"primary": "#3366ff"}},
                "root": [
                    {
                        "instanceId": "page",
                        "capsuleId": "stack",
                        "props": {"gap": 16},
                        "children": [
                            {"instanceId": "title", "capsuleId": "text", "props": {"content": "Welcome"}},
                            {"instanceId": "hero", "capsuleId": "image", "props": {"src": "https://example.com/h.png"}},
                            {"instanceId": "email", "capsuleId": "text-input", "props": {"label": "Email"}},
                            {"instanceId": "submit", "capsuleId": "button", "props": {"label": "Sign up"}},
                        ],
                    }
                ],
            },
            registry,
        )

        for compiler_class in (WebCompiler, IOSCompiler, AndroidCompiler, DesktopCompiler):
            result = compiler_class(registry).compile(composition)
            assert result.errors == (), result.errors
            assert result.files

        desktop = DesktopCompiler(registry).compile(composition)
        assert _codes(desktop.warnings) == ["UnsupportedOnPlatform"]
        assert desktop.warnings[0].capsule_id == "image"

        android = AndroidCompiler(registry).compile(composition)
        assert "io.coil-kt:coil-compose:2.5.0" in android.dependency_specs()
