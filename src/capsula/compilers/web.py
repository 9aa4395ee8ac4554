"""
Web compiler: React + Vite + TypeScript.

Generates:
- src/components/<Name>.tsx (one module per component)
- src/components/index.ts
- src/App.tsx, src/main.tsx
- src/styles/theme.css
- package.json, tsconfig.json, vite.config.ts, index.html
- README.md
"""

from __future__ import annotations

import html
import json

from ..core import ir
from .base.compiler import CompileContext, PlatformCompiler
from .base.theme import to_css_variables

REACT_DEPENDENCIES: dict[str, str] = {
    "react": "^18.2.0",
    "react-dom": "^18.2.0",
}

REACT_DEV_DEPENDENCIES: dict[str, str] = {
    "@types/react": "^18.2.0",
    "@types/react-dom": "^18.2.0",
    "@vitejs/plugin-react": "^4.2.0",
    "typescript": "^5.3.0",
    "vite": "^5.0.0",
}

TAILWIND_DEV_DEPENDENCIES: dict[str, str] = {
    "@tailwindcss/vite": "^4.0.0",
    "tailwindcss": "^4.0.0",
}

DEV_SERVER_PORT = 3000


def npm_dependencies(
    base: dict[str, str], dependencies: list[ir.DependencyEntry]
) -> dict[str, str]:
    """Base dependencies overlaid with the resolved capsule dependencies."""
    merged = dict(base)
    for entry in dependencies:
        merged[entry.name] = entry.version or "latest"
    return merged


class WebCompiler(PlatformCompiler):
    """Compiles compositions into a Vite React project."""

    platform = ir.Platform.WEB
    language = "tsx"

    def component_path(self, ctx: CompileContext, name: str) -> str:
        return f"src/components/{name}.tsx"

    def child_invocation(self, name: str) -> str:
        return f"<{name} />"

    def child_import(self, ctx: CompileContext, name: str) -> str | None:
        return f'import {{ {name} }} from "./{name}";'

    def reserved_names(self, ctx: CompileContext) -> set[str]:
        return {"App"}

    def uses_tailwind(self, ctx: CompileContext) -> bool:
        return ctx.composition.platform_config.web.styling == "tailwind"

    def dev_dependencies(self, ctx: CompileContext) -> dict[str, str]:
        if self.uses_tailwind(ctx):
            return {**REACT_DEV_DEPENDENCIES, **TAILWIND_DEV_DEPENDENCIES}
        return dict(REACT_DEV_DEPENDENCIES)

    def package(self, ctx: CompileContext) -> list[ir.GeneratedFile]:
        return [
            self._generate_package_json(ctx),
            self._generate_tsconfig(),
            self._generate_vite_config(ctx),
            self._generate_index_html(ctx),
            self._generate_main_entry(),
            self._generate_app_component(ctx),
            self._generate_component_index(ctx),
            self._generate_theme_css(ctx),
            self._generate_readme(ctx),
        ]

    # =========================================================================
    # Shared React sources (reused by the desktop compiler)
    # =========================================================================

    def _generate_main_entry(self) -> ir.GeneratedFile:
        content = """import React from "react";
import ReactDOM from "react-dom/client";
import App from "./App";
import "./styles/theme.css";

ReactDOM.createRoot(document.getElementById("root")!).render(
  <React.StrictMode>
    <App />
  </React.StrictMode>,
);
"""
        return ir.GeneratedFile(path="src/main.tsx", content=content, language="tsx")

    def _generate_app_component(self, ctx: CompileContext) -> ir.GeneratedFile:
        roots = [c.name for c in ctx.root_components]
        lines = []
        if roots:
            lines.append(f'import {{ {", ".join(roots)} }} from "./components";')
            lines.append("")
        lines.append("export default function App() {")
        lines.append("  return (")
        lines.append('    <main className="app">')
        for name in roots:
            lines.append(f"      <{name} />")
        lines.append("    </main>")
        lines.append("  );")
        lines.append("}")
        return ir.GeneratedFile(
            path="src/App.tsx", content="\n".join(lines) + "\n", language="tsx"
        )

    def _generate_component_index(self, ctx: CompileContext) -> ir.GeneratedFile:
        lines = [f'export {{ {c.name} }} from "./{c.name}";' for c in ctx.components]
        return ir.GeneratedFile(
            path="src/components/index.ts", content="\n".join(lines) + "\n", language="typescript"
        )

    def _generate_theme_css(self, ctx: CompileContext) -> ir.GeneratedFile:
        header = '@import "tailwindcss";\n\n' if self.uses_tailwind(ctx) else ""
        return ir.GeneratedFile(
            path="src/styles/theme.css",
            content=header + to_css_variables(ctx.composition.theme),
            language="css",
        )

    def _generate_index_html(self, ctx: CompileContext) -> ir.GeneratedFile:
        title = html.escape(ctx.app_name)
        content = f"""<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <meta name="theme-color" content="{ctx.composition.theme.colors.primary}" />
    <title>{title}</title>
  </head>
  <body>
    <div id="root"></div>
    <script type="module" src="/src/main.tsx"></script>
  </body>
</html>
"""
        return ir.GeneratedFile(path="index.html", content=content, language="html")

    def _generate_tsconfig(self) -> ir.GeneratedFile:
        tsconfig = {
            "compilerOptions": {
                "target": "ES2020",
                "lib": ["ES2020", "DOM", "DOM.Iterable"],
                "module": "ESNext",
                "moduleResolution": "bundler",
                "jsx": "react-jsx",
                "strict": True,
                "skipLibCheck": True,
                "isolatedModules": True,
                "noEmit": True,
            },
            "include": ["src"],
        }
        return ir.GeneratedFile(
            path="tsconfig.json", content=json.dumps(tsconfig, indent=2) + "\n", language="json"
        )

    def _generate_vite_config(
        self, ctx: CompileContext, port: int = DEV_SERVER_PORT
    ) -> ir.GeneratedFile:
        imports = [
            'import { defineConfig } from "vite";',
            'import react from "@vitejs/plugin-react";',
        ]
        plugins = ["react()"]
        if self.uses_tailwind(ctx):
            imports.append('import tailwindcss from "@tailwindcss/vite";')
            plugins.append("tailwindcss()")
        plugin_list = ", ".join(plugins)
        content = "\n".join(imports) + f"""

export default defineConfig({{
  plugins: [{plugin_list}],
  server: {{
    port: {port},
    strictPort: true,
  }},
  build: {{
    outDir: "dist",
    sourcemap: true,
  }},
}});
"""
        return ir.GeneratedFile(path="vite.config.ts", content=content, language="typescript")

    # =========================================================================
    # Web-only files
    # =========================================================================

    def _generate_package_json(self, ctx: CompileContext) -> ir.GeneratedFile:
        package = {
            "name": ctx.app_slug,
            "version": ctx.composition.version,
            "private": True,
            "type": "module",
            "scripts": {
                "dev": "vite",
                "build": "tsc && vite build",
                "preview": "vite preview",
            },
            "dependencies": npm_dependencies(REACT_DEPENDENCIES, ctx.dependencies),
            "devDependencies": self.dev_dependencies(ctx),
        }
        return ir.GeneratedFile(
            path="package.json", content=json.dumps(package, indent=2) + "\n", language="json"
        )

    def _generate_readme(self, ctx: CompileContext) -> ir.GeneratedFile:
        content = f"""# {ctx.app_name}

{ctx.composition.description or "React web application."}

## Getting Started

```bash
npm install
npm run dev
```

{ctx.components_markdown()}
"""
        return ir.GeneratedFile(path="README.md", content=content, language="markdown")


__all__ = ["WebCompiler", "npm_dependencies"]
