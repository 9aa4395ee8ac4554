"""
iOS compiler: SwiftUI.

Generates:
- <App>/Components/<Name>View.swift (one view per component)
- <App>/<App>App.swift, <App>/ContentView.swift
- <App>/Theme/Theme.swift
- <App>/Info.plist
- Package.swift (Swift Package Manager manifest)
- README.md
"""

from __future__ import annotations

from ..core import ir
from ..core.strings import escape_string, to_package_segment
from ..core.versions import parse_version
from .base.compiler import CompileContext, PlatformCompiler
from .base.theme import to_swift_theme

SWIFT_TOOLS_VERSION = "5.9"


def _package_url(name: str) -> str:
    if "://" in name:
        return name
    return f"https://github.com/{name}"


def _product_name(name: str) -> str:
    tail = name.rstrip("/").rsplit("/", 1)[-1]
    return tail.removesuffix(".git")


def _swift_requirement(version: str | None) -> str:
    parsed = parse_version(version) if version else None
    if parsed is None:
        return 'branch: "main"'
    if version.startswith("="):
        return f'exact: "{parsed}"'
    return f'from: "{parsed}"'


class IOSCompiler(PlatformCompiler):
    """Compiles compositions into a SwiftUI application package."""

    platform = ir.Platform.IOS
    language = "swift"

    def type_name(self, name: str) -> str:
        return f"{name}View"

    def reserved_names(self, ctx: CompileContext) -> set[str]:
        return {"ContentView", f"{ctx.app_identifier}App", "AppTheme"}

    def component_path(self, ctx: CompileContext, name: str) -> str:
        return f"{ctx.app_identifier}/Components/{self.type_name(name)}.swift"

    def child_invocation(self, name: str) -> str:
        return f"{self.type_name(name)}()"

    def bundle_id(self, ctx: CompileContext) -> str:
        configured = ctx.composition.platform_config.ios.bundle_id
        return configured or f"com.capsula.{to_package_segment(ctx.app_name)}"

    def package(self, ctx: CompileContext) -> list[ir.GeneratedFile]:
        app = ctx.app_identifier
        return [
            self._generate_package_swift(ctx),
            self._generate_app_entry(ctx),
            self._generate_content_view(ctx),
            ir.GeneratedFile(
                path=f"{app}/Theme/Theme.swift",
                content=to_swift_theme(ctx.composition.theme),
                language="swift",
            ),
            self._generate_info_plist(ctx),
            self._generate_readme(ctx),
        ]

    def _generate_package_swift(self, ctx: CompileContext) -> ir.GeneratedFile:
        app = ctx.app_identifier
        major = ctx.composition.platform_config.ios.min_version.split(".", 1)[0]

        package_lines = [
            f'        .package(url: "{_package_url(d.name)}", {_swift_requirement(d.version)}),'
            for d in ctx.dependencies
        ]
        product_lines = [
            f'                .product(name: "{_product_name(d.name)}", package: "{_product_name(d.name)}"),'
            for d in ctx.dependencies
        ]

        lines = [
            f"// swift-tools-version:{SWIFT_TOOLS_VERSION}",
            "import PackageDescription",
            "",
            "let package = Package(",
            f'    name: "{app}",',
            f"    platforms: [.iOS(.v{major})],",
            f'    products: [.library(name: "{app}", targets: ["{app}"])],',
            "    dependencies: [",
            *package_lines,
            "    ],",
            "    targets: [",
            "        .target(",
            f'            name: "{app}",',
            "            dependencies: [",
            *product_lines,
            "            ],",
            f'            path: "{app}"',
            "        ),",
            "    ]",
            ")",
        ]
        return ir.GeneratedFile(
            path="Package.swift", content="\n".join(lines) + "\n", language="swift"
        )

    def _generate_app_entry(self, ctx: CompileContext) -> ir.GeneratedFile:
        app = ctx.app_identifier
        content = f"""import SwiftUI

@main
struct {app}App: App {{
    var body: some Scene {{
        WindowGroup {{
            ContentView()
        }}
    }}
}}
"""
        return ir.GeneratedFile(path=f"{app}/{app}App.swift", content=content, language="swift")

    def _generate_content_view(self, ctx: CompileContext) -> ir.GeneratedFile:
        views = "\n".join(
            f"                {self.child_invocation(c.name)}" for c in ctx.root_components
        )
        content = f"""import SwiftUI

struct ContentView: View {{
    var body: some View {{
        ScrollView {{
            VStack(alignment: .leading, spacing: 16) {{
{views}
            }}
            .padding()
        }}
        .background(Color.appBackground)
    }}
}}
"""
        return ir.GeneratedFile(
            path=f"{ctx.app_identifier}/ContentView.swift", content=content, language="swift"
        )

    def _generate_info_plist(self, ctx: CompileContext) -> ir.GeneratedFile:
        display_name = escape_string(ctx.app_name).replace("&", "&amp;").replace("<", "&lt;")
        content = f"""<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict>
    <key>CFBundleDisplayName</key>
    <string>{display_name}</string>
    <key>CFBundleIdentifier</key>
    <string>{self.bundle_id(ctx)}</string>
    <key>CFBundleShortVersionString</key>
    <string>{ctx.composition.version}</string>
    <key>CFBundleVersion</key>
    <string>1</string>
    <key>MinimumOSVersion</key>
    <string>{ctx.composition.platform_config.ios.min_version}</string>
    <key>UILaunchScreen</key>
    <dict/>
</dict>
</plist>
"""
        return ir.GeneratedFile(
            path=f"{ctx.app_identifier}/Info.plist", content=content, language="xml"
        )

    def _generate_readme(self, ctx: CompileContext) -> ir.GeneratedFile:
        content = f"""# {ctx.app_name}

{ctx.composition.description or "SwiftUI application."}

## Requirements

- Xcode 15+
- iOS {ctx.composition.platform_config.ios.min_version}+

## Getting Started

Open `Package.swift` in Xcode and run the `{ctx.app_identifier}` target.

{ctx.components_markdown()}
"""
        return ir.GeneratedFile(path="README.md", content=content, language="markdown")


__all__ = ["IOSCompiler"]
