"""
Android compiler: Jetpack Compose.

Generates:
- app/src/main/java/<package>/ui/components/<Name>.kt (one composable per component)
- app/src/main/java/<package>/MainActivity.kt
- app/src/main/java/<package>/ui/theme/Color.kt
- app/src/main/AndroidManifest.xml
- settings.gradle.kts, build.gradle.kts, app/build.gradle.kts
- README.md
"""

from __future__ import annotations

from ..core import ir
from ..core.strings import escape_string, to_package_segment
from .base.compiler import CompileContext, PlatformCompiler
from .base.theme import to_kotlin_theme

COMPOSE_BOM = "androidx.compose:compose-bom:2024.02.00"

BASE_DEPENDENCIES: list[str] = [
    "androidx.core:core-ktx:1.12.0",
    "androidx.activity:activity-compose:1.8.2",
    "androidx.compose.ui:ui",
    "androidx.compose.material3:material3",
    # provides the Theme.Material3 XML style referenced by the manifest
    "com.google.android.material:material:1.11.0",
]


def gradle_coordinate(entry: ir.DependencyEntry) -> str:
    """Dependency entry in ``group:artifact:version`` form."""
    if entry.version is None:
        return entry.name
    return f"{entry.name}:{entry.version}"


class AndroidCompiler(PlatformCompiler):
    """Compiles compositions into a Gradle project with Compose UI."""

    platform = ir.Platform.ANDROID
    language = "kotlin"

    def package_name(self, ctx: CompileContext) -> str:
        configured = ctx.composition.platform_config.android.package_name
        return configured or f"com.capsula.{to_package_segment(ctx.app_name)}"

    def source_root(self, ctx: CompileContext) -> str:
        return "app/src/main/java/" + self.package_name(ctx).replace(".", "/")

    def component_path(self, ctx: CompileContext, name: str) -> str:
        return f"{self.source_root(ctx)}/ui/components/{name}.kt"

    def child_invocation(self, name: str) -> str:
        return f"{name}()"

    def reserved_names(self, ctx: CompileContext) -> set[str]:
        return {"MainActivity", "AppColors", "AppShape"}

    def component_file(
        self, ctx: CompileContext, name: str, imports: list[str], body: str
    ) -> str:
        header = f"package {self.package_name(ctx)}.ui.components\n\n"
        return header + super().component_file(ctx, name, imports, body)

    def package(self, ctx: CompileContext) -> list[ir.GeneratedFile]:
        root = self.source_root(ctx)
        package = self.package_name(ctx)
        return [
            self._generate_settings_gradle(ctx),
            self._generate_root_build_gradle(),
            self._generate_app_build_gradle(ctx),
            self._generate_manifest(ctx),
            self._generate_main_activity(ctx),
            ir.GeneratedFile(
                path=f"{root}/ui/theme/Color.kt",
                content=to_kotlin_theme(ctx.composition.theme, f"{package}.ui.theme"),
                language="kotlin",
            ),
            self._generate_readme(ctx),
        ]

    # =========================================================================
    # Gradle
    # =========================================================================

    def _generate_settings_gradle(self, ctx: CompileContext) -> ir.GeneratedFile:
        content = f"""pluginManagement {{
    repositories {{
        google()
        mavenCentral()
        gradlePluginPortal()
    }}
}}

dependencyResolutionManagement {{
    repositories {{
        google()
        mavenCentral()
    }}
}}

rootProject.name = "{escape_string(ctx.app_name)}"
include(":app")
"""
        return ir.GeneratedFile(path="settings.gradle.kts", content=content, language="kotlin")

    def _generate_root_build_gradle(self) -> ir.GeneratedFile:
        content = """plugins {
    id("com.android.application") version "8.2.2" apply false
    id("org.jetbrains.kotlin.android") version "1.9.22" apply false
}
"""
        return ir.GeneratedFile(path="build.gradle.kts", content=content, language="kotlin")

    def _generate_app_build_gradle(self, ctx: CompileContext) -> ir.GeneratedFile:
        android = ctx.composition.platform_config.android
        package = self.package_name(ctx)
        coordinates = list(BASE_DEPENDENCIES)
        for entry in ctx.dependencies:
            coordinate = gradle_coordinate(entry)
            if coordinate not in coordinates:
                coordinates.append(coordinate)
        deps = "\n".join(f'    implementation("{c}")' for c in coordinates)

        content = f"""plugins {{
    id("com.android.application")
    id("org.jetbrains.kotlin.android")
}}

android {{
    namespace = "{package}"
    compileSdk = {android.target_sdk}

    defaultConfig {{
        applicationId = "{package}"
        minSdk = {android.min_sdk}
        targetSdk = {android.target_sdk}
        versionCode = 1
        versionName = "{ctx.composition.version}"
    }}

    buildFeatures {{
        compose = true
    }}

    composeOptions {{
        kotlinCompilerExtensionVersion = "1.5.8"
    }}

    kotlinOptions {{
        jvmTarget = "17"
    }}
}}

dependencies {{
    implementation(platform("{COMPOSE_BOM}"))
{deps}
}}
"""
        return ir.GeneratedFile(path="app/build.gradle.kts", content=content, language="kotlin")

    # =========================================================================
    # Sources
    # =========================================================================

    def _generate_manifest(self, ctx: CompileContext) -> ir.GeneratedFile:
        permissions = "\n".join(
            f'    <uses-permission android:name="android.permission.{p}" />'
            for p in ctx.composition.platform_config.android.permissions
        )
        label = ctx.app_name.replace("&", "&amp;").replace('"', "&quot;").replace("<", "&lt;")
        content = f"""<?xml version="1.0" encoding="utf-8"?>
<manifest xmlns:android="http://schemas.android.com/apk/res/android">

{permissions}

    <application
        android:label="{label}"
        android:theme="@style/Theme.Material3.DayNight.NoActionBar">
        <activity
            android:name=".MainActivity"
            android:exported="true">
            <intent-filter>
                <action android:name="android.intent.action.MAIN" />
                <category android:name="android.intent.category.LAUNCHER" />
            </intent-filter>
        </activity>
    </application>

</manifest>
"""
        return ir.GeneratedFile(
            path="app/src/main/AndroidManifest.xml", content=content, language="xml"
        )

    def _generate_main_activity(self, ctx: CompileContext) -> ir.GeneratedFile:
        package = self.package_name(ctx)
        roots = ctx.root_components
        imports = "\n".join(f"import {package}.ui.components.{c.name}" for c in roots)
        calls = "\n".join(f"                    {self.child_invocation(c.name)}" for c in roots)
        content = f"""package {package}

import android.os.Bundle
import androidx.activity.ComponentActivity
import androidx.activity.compose.setContent
import androidx.compose.foundation.background
import androidx.compose.foundation.layout.Arrangement
import androidx.compose.foundation.layout.Column
import androidx.compose.foundation.layout.fillMaxSize
import androidx.compose.foundation.layout.padding
import androidx.compose.material3.MaterialTheme
import androidx.compose.ui.Modifier
import androidx.compose.ui.unit.dp
import {package}.ui.theme.AppColors
{imports}

class MainActivity : ComponentActivity() {{
    override fun onCreate(savedInstanceState: Bundle?) {{
        super.onCreate(savedInstanceState)
        setContent {{
            MaterialTheme {{
                Column(
                    modifier = Modifier
                        .fillMaxSize()
                        .background(AppColors.Background)
                        .padding(16.dp),
                    verticalArrangement = Arrangement.spacedBy(16.dp),
                ) {{
{calls}
                }}
            }}
        }}
    }}
}}
"""
        return ir.GeneratedFile(
            path=f"{self.source_root(ctx)}/MainActivity.kt", content=content, language="kotlin"
        )

    def _generate_readme(self, ctx: CompileContext) -> ir.GeneratedFile:
        android = ctx.composition.platform_config.android
        content = f"""# {ctx.app_name}

{ctx.composition.description or "Jetpack Compose application."}

## Requirements

- Android Studio Hedgehog or newer
- Android SDK {android.target_sdk} (minimum SDK {android.min_sdk})

## Getting Started

```bash
./gradlew installDebug
```

{ctx.components_markdown()}
"""
        return ir.GeneratedFile(path="README.md", content=content, language="markdown")


__all__ = ["AndroidCompiler", "gradle_coordinate"]
