"""
Base platform compiler.

A PlatformCompiler turns a validated AppComposition into a CompilationResult
for one target. Every compile call walks the same stages:

    Pending -> Validating -> Rendering -> Aggregating -> Packaging -> Done

Per-instance problems are accumulated as diagnostics instead of raised, so a
caller always gets a best-effort result:
- capsule unsupported on the target: warning, instance skipped
- unresolved placeholder / malformed template: error, instance skipped
- anything unexpected: CompilationFailed error, compile stops

Subclasses only decide where files go and what the project scaffolding looks
like; rendering, naming and dependency resolution are shared.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ...core import ir
from ...core.composition import CapsuleLookup
from ...core.errors import TemplateRenderError, TemplateSyntaxError, UnresolvedPlaceholderError
from ...core.registry import CapsuleRegistry
from ...core.strings import to_kebab_case, to_pascal_case
from .dependencies import DependencyAggregator
from .renderer import TemplateRenderer

logger = logging.getLogger(__name__)


class CompileStage(str, Enum):
    PENDING = "pending"
    VALIDATING = "validating"
    RENDERING = "rendering"
    AGGREGATING = "aggregating"
    PACKAGING = "packaging"
    DONE = "done"


@dataclass(frozen=True)
class EmittedComponent:
    """A component file produced during the rendering stage."""

    instance_id: str
    capsule_id: str
    name: str
    path: str
    is_root: bool


@dataclass
class CompileContext:
    """
    State owned by a single compile call.

    Nothing here is shared between calls, so concurrent compiles of the same
    composition need no locking beyond the registry snapshot they read.
    """

    composition: ir.AppComposition
    capsules: CapsuleLookup
    names: dict[str, str] = field(default_factory=dict)
    files: list[ir.GeneratedFile] = field(default_factory=list)
    warnings: list[ir.Diagnostic] = field(default_factory=list)
    errors: list[ir.Diagnostic] = field(default_factory=list)
    components: list[EmittedComponent] = field(default_factory=list)
    dependencies: list[ir.DependencyEntry] = field(default_factory=list)
    stage: CompileStage = CompileStage.PENDING

    @property
    def app_name(self) -> str:
        return self.composition.app_name

    @property
    def app_identifier(self) -> str:
        """PascalCase app name, used for type and directory names."""
        return to_pascal_case(self.app_name)

    @property
    def app_slug(self) -> str:
        """kebab-case app name, used for package names."""
        return to_kebab_case(self.app_name) or "app"

    @property
    def root_components(self) -> list[EmittedComponent]:
        return [c for c in self.components if c.is_root]

    def components_markdown(self) -> str:
        """README section listing generated components and resolved dependencies."""
        lines = ["## Components", ""]
        for component in self.components:
            lines.append(f"- `{component.name}` ({component.capsule_id}): `{component.path}`")
        if self.dependencies:
            lines.extend(["", "## Dependencies", ""])
            lines.extend(f"- `{entry.spec}`" for entry in self.dependencies)
        return "\n".join(lines)

    def add_warning(self, code: ir.DiagnosticCode, message: str, **kwargs: Any) -> None:
        self.warnings.append(ir.Diagnostic(code=code, message=message, **kwargs))

    def add_error(self, code: ir.DiagnosticCode, message: str, **kwargs: Any) -> None:
        self.errors.append(ir.Diagnostic(code=code, message=message, **kwargs))


class PlatformCompiler(ABC):
    """
    Base class for the per-target compilers.

    Subclasses set ``platform`` and ``language`` and implement the path,
    invocation and packaging hooks.

    Example:
        class WebCompiler(PlatformCompiler):
            platform = ir.Platform.WEB
            language = "tsx"

            def component_path(self, ctx, name):
                return f"src/components/{name}.tsx"
            ...
    """

    platform: ir.Platform
    language: str = "text"

    def __init__(self, registry: CapsuleRegistry | CapsuleLookup):
        """
        Initialize compiler.

        Args:
            registry: Registry (a snapshot is taken per compile) or a fixed
                capsule lookup such as a RegistrySnapshot
        """
        self.registry = registry
        self.renderer = TemplateRenderer(self.platform)

    # =========================================================================
    # Hooks
    # =========================================================================

    @abstractmethod
    def component_path(self, ctx: CompileContext, name: str) -> str:
        """Project-relative path of the file holding component ``name``."""

    @abstractmethod
    def child_invocation(self, name: str) -> str:
        """Source snippet that places child component ``name`` inside its parent."""

    def child_import(self, ctx: CompileContext, name: str) -> str | None:
        """Import line a parent needs to reference child ``name`` (None if same module)."""
        return None

    def type_name(self, name: str) -> str:
        """Source-level type declared for component ``name``."""
        return name

    def reserved_names(self, ctx: CompileContext) -> set[str]:
        """Type names declared by the generated scaffolding, unavailable to components."""
        return set()

    def component_file(
        self, ctx: CompileContext, name: str, imports: list[str], body: str
    ) -> str:
        """Assemble the final file text from its import header and rendered body."""
        body = body.lstrip("\n")
        if not imports:
            return body if body.endswith("\n") else body + "\n"
        text = "\n".join(imports) + "\n\n" + body
        return text if text.endswith("\n") else text + "\n"

    @abstractmethod
    def package(self, ctx: CompileContext) -> list[ir.GeneratedFile]:
        """Manifest, entry point and boilerplate files for the target project."""

    # =========================================================================
    # Compile
    # =========================================================================

    def _lookup(self) -> CapsuleLookup:
        if isinstance(self.registry, CapsuleRegistry):
            return self.registry.snapshot()
        return self.registry

    def _advance(self, ctx: CompileContext, stage: CompileStage) -> None:
        logger.debug(
            f"[{self.platform.value}] {ctx.app_name}: {ctx.stage.value} -> {stage.value}"
        )
        ctx.stage = stage

    def compile(
        self, composition: ir.AppComposition, capsules: CapsuleLookup | None = None
    ) -> ir.CompilationResult:
        """
        Compile ``composition`` for this compiler's platform.

        Args:
            composition: Validated composition
            capsules: Fixed capsule lookup to compile against (defaults to a
                fresh snapshot of the registry)

        Returns:
            CompilationResult; fatal conditions are reported in ``errors``
            rather than raised
        """
        ctx = CompileContext(
            composition=composition, capsules=capsules if capsules is not None else self._lookup()
        )

        try:
            self._advance(ctx, CompileStage.VALIDATING)
            ctx.names = self.assign_names(composition, self.reserved_names(ctx))

            self._advance(ctx, CompileStage.RENDERING)
            self._render_all(ctx)

            self._advance(ctx, CompileStage.AGGREGATING)
            instances = [inst for inst, _, _ in composition.iter_instances()]
            manifest = DependencyAggregator(self.platform).aggregate(instances, ctx.capsules)
            ctx.dependencies = manifest.entries
            ctx.warnings.extend(manifest.warnings)

            self._advance(ctx, CompileStage.PACKAGING)
            if ctx.components and not ctx.errors:
                ctx.files.extend(self.package(ctx))
            elif ctx.errors:
                logger.info(
                    f"[{self.platform.value}] Skipping packaging for '{ctx.app_name}': "
                    f"{len(ctx.errors)} error(s)"
                )
        except Exception as e:
            logger.exception(f"[{self.platform.value}] Compilation of '{ctx.app_name}' failed")
            ctx.add_error(
                ir.DiagnosticCode.COMPILATION_FAILED,
                f"Compilation failed during {ctx.stage.value}: {e}",
            )

        self._advance(ctx, CompileStage.DONE)
        result = ir.CompilationResult(
            platform=self.platform,
            files=tuple(ctx.files),
            dependencies=tuple(ctx.dependencies),
            warnings=tuple(ctx.warnings),
            errors=tuple(ctx.errors),
        )
        logger.info(
            f"[{self.platform.value}] '{ctx.app_name}' {result.status.value}: "
            f"{len(result.files)} file(s), {len(result.warnings)} warning(s), "
            f"{len(result.errors)} error(s)"
        )
        return result

    # =========================================================================
    # Naming
    # =========================================================================

    def assign_names(
        self, composition: ir.AppComposition, reserved: Iterable[str] = ()
    ) -> dict[str, str]:
        """
        Map each instance_id to a unique component identifier.

        Identifiers are the PascalCase instance id; ids that collapse to the
        same identifier, or whose type name is declared by the project
        scaffolding (``reserved``), get a numeric suffix in walk order.
        """
        names: dict[str, str] = {}
        used: set[str] = set()
        taken = set(reserved)
        for instance, _, _ in composition.iter_instances():
            base = to_pascal_case(instance.instance_id)
            name = base
            suffix = 2
            while name in used or self.type_name(name) in taken:
                name = f"{base}{suffix}"
                suffix += 1
            used.add(name)
            names[instance.instance_id] = name
        return names

    def _supported(self, ctx: CompileContext, instance: ir.CapsuleInstance) -> bool:
        capsule = ctx.capsules.get(instance.capsule_id)
        return capsule is not None and capsule.supports(self.platform)

    def _frontier(
        self, ctx: CompileContext, instances: tuple[ir.CapsuleInstance, ...]
    ) -> list[str]:
        """
        Component names of the nearest supported instances, in declared order.

        An unsupported instance is replaced by its own supported descendants,
        so nested content is not orphaned when a wrapper is skipped.
        """
        names: list[str] = []
        stack = list(reversed(instances))
        while stack:
            instance = stack.pop()
            if self._supported(ctx, instance):
                names.append(ctx.names[instance.instance_id])
            else:
                stack.extend(reversed(instance.children))
        return names

    # =========================================================================
    # Rendering
    # =========================================================================

    def _render_all(self, ctx: CompileContext) -> None:
        root_names = set(self._frontier(ctx, ctx.composition.root))
        deprecated_seen: set[str] = set()

        for instance, _depth, _parent_id in ctx.composition.iter_instances():
            capsule = ctx.capsules.get(instance.capsule_id)

            if capsule is None:
                ctx.add_error(
                    ir.DiagnosticCode.UNKNOWN_CAPSULE,
                    f"Capsule '{instance.capsule_id}' is not registered",
                    capsule_id=instance.capsule_id,
                    instance_id=instance.instance_id,
                )
                continue

            implementation = capsule.implementation(self.platform)
            if implementation is None:
                logger.info(
                    f"[{self.platform.value}] Capsule '{capsule.id}' "
                    f"(instance '{instance.instance_id}') is not supported, skipping"
                )
                ctx.add_warning(
                    ir.DiagnosticCode.UNSUPPORTED_ON_PLATFORM,
                    f"Capsule '{capsule.id}' does not support {self.platform.value}",
                    capsule_id=capsule.id,
                    instance_id=instance.instance_id,
                    suggestion=(
                        "Supported platforms: "
                        + ", ".join(p.value for p in capsule.supported_platforms)
                    ),
                )
                continue

            if capsule.deprecated and capsule.id not in deprecated_seen:
                deprecated_seen.add(capsule.id)
                ctx.add_warning(
                    ir.DiagnosticCode.DEPRECATED_CAPSULE,
                    f"Capsule '{capsule.id}' is deprecated",
                    capsule_id=capsule.id,
                    instance_id=instance.instance_id,
                )

            name = ctx.names[instance.instance_id]
            try:
                body = self.renderer.render(
                    implementation,
                    instance.bound_props,
                    defaults=capsule.defaults(),
                    derived=self.derived_values(ctx, instance, name),
                    capsule_id=capsule.id,
                )
            except UnresolvedPlaceholderError as e:
                ctx.add_error(
                    ir.DiagnosticCode.UNRESOLVED_PLACEHOLDER,
                    e.message,
                    capsule_id=capsule.id,
                    instance_id=instance.instance_id,
                    suggestion=f"Bind '{e.placeholder}' or give the prop a default",
                )
                continue
            except TemplateSyntaxError as e:
                ctx.add_error(
                    ir.DiagnosticCode.TEMPLATE_SYNTAX,
                    e.message,
                    capsule_id=capsule.id,
                    instance_id=instance.instance_id,
                )
                continue
            except TemplateRenderError as e:
                ctx.add_error(
                    ir.DiagnosticCode.COMPILATION_FAILED,
                    e.message,
                    capsule_id=capsule.id,
                    instance_id=instance.instance_id,
                )
                continue

            path = self.component_path(ctx, name)
            imports = list(dict.fromkeys(implementation.imports))
            ctx.files.append(
                ir.GeneratedFile(
                    path=path,
                    content=self.component_file(ctx, name, imports, body),
                    language=self.language,
                )
            )
            ctx.components.append(
                EmittedComponent(
                    instance_id=instance.instance_id,
                    capsule_id=capsule.id,
                    name=name,
                    path=path,
                    is_root=name in root_names,
                )
            )

    def derived_values(
        self, ctx: CompileContext, instance: ir.CapsuleInstance, name: str
    ) -> dict[str, Any]:
        """Compiler-computed template values for one instance."""
        children = self._frontier(ctx, instance.children)
        child_imports = [
            line for line in (self.child_import(ctx, child) for child in children) if line
        ]
        return {
            "instance_id": instance.instance_id,
            "component_name": name,
            "app_name": ctx.app_name,
            "children": children,
            "children_body": "\n".join(self.child_invocation(child) for child in children),
            "children_imports": "\n".join(child_imports),
            "theme": ctx.composition.theme.tokens(),
        }


__all__ = [
    "CompileContext",
    "CompileStage",
    "EmittedComponent",
    "PlatformCompiler",
]
