"""
Compilation orchestrator.

Dispatches a composition to the platform compilers and reassembles the
per-target results in ``targets`` order.

Performance optimizations:
- Parallel target compilation on a thread pool (targets are independent)
- Optional result caching keyed by composition, platform and registry version
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any

from ..core import ir
from ..core.composition import build_composition
from ..core.config import CompilerConfig
from ..core.errors import UnknownPlatformError
from ..core.registry import CapsuleRegistry, RegistrySnapshot, get_registry
from .android import AndroidCompiler
from .base.compiler import PlatformCompiler
from .cache import ResultCache
from .desktop import DesktopCompiler
from .ios import IOSCompiler
from .web import WebCompiler

logger = logging.getLogger(__name__)

COMPILERS: dict[ir.Platform, type[PlatformCompiler]] = {
    ir.Platform.WEB: WebCompiler,
    ir.Platform.IOS: IOSCompiler,
    ir.Platform.ANDROID: AndroidCompiler,
    ir.Platform.DESKTOP: DesktopCompiler,
}


class CapsuleCompiler:
    """
    Compiles compositions for one or more platforms.

    Holds one compiler per platform, all sharing the same registry handle.
    Every call compiles against a single registry snapshot, so concurrent
    registrations never produce a half-updated result.

    Example:
        compiler = CapsuleCompiler(registry)
        results = compiler.compile_all(composition)
        for result in results:
            print(result.platform, result.status)
    """

    def __init__(
        self,
        registry: CapsuleRegistry | RegistrySnapshot,
        config: CompilerConfig | None = None,
    ):
        """
        Initialize orchestrator.

        Args:
            registry: Registry (or fixed snapshot) to resolve capsules against
            config: Compiler settings (defaults if None)
        """
        self.registry = registry
        self.config = config or CompilerConfig()
        self.compilers: dict[ir.Platform, PlatformCompiler] = {
            platform: compiler_class(registry) for platform, compiler_class in COMPILERS.items()
        }
        self.cache = ResultCache() if self.config.cache_results else None

    @property
    def platforms(self) -> list[ir.Platform]:
        return list(self.compilers)

    def _snapshot(self) -> RegistrySnapshot:
        if isinstance(self.registry, CapsuleRegistry):
            return self.registry.snapshot()
        return self.registry

    def _resolve_platform(self, platform: ir.Platform | str) -> ir.Platform:
        resolved = ir.parse_platform(platform)
        if resolved is None or resolved not in self.compilers:
            raise UnknownPlatformError(platform, [p.value for p in self.compilers])
        return resolved

    def build(self, raw: ir.AppComposition | Mapping[str, Any]) -> ir.AppComposition:
        """
        Validate a raw composition against the current registry.

        Raises:
            ValidationError: Carrying every violation found in the tree
        """
        return build_composition(raw, self._snapshot(), strict=self.config.strict_props)

    def compile_for_platform(
        self, composition: ir.AppComposition, platform: ir.Platform | str
    ) -> ir.CompilationResult:
        """
        Compile a composition for a single platform.

        Args:
            composition: Validated composition
            platform: Platform or its string identifier

        Returns:
            CompilationResult for ``platform``

        Raises:
            UnknownPlatformError: If ``platform`` is not a recognized target
        """
        target = self._resolve_platform(platform)
        return self._compile(composition, target, self._snapshot())

    def _compile(
        self, composition: ir.AppComposition, platform: ir.Platform, snapshot: RegistrySnapshot
    ) -> ir.CompilationResult:
        key = None
        if self.cache is not None:
            key = self.cache.compute_key(composition, platform, snapshot.version)
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"[{platform.value}] Cache hit for '{composition.app_name}'")
                return cached

        result = self.compilers[platform].compile(composition, snapshot)

        if self.cache is not None and key is not None:
            self.cache.set(key, result)
        return result

    def _compile_isolated(
        self, composition: ir.AppComposition, platform: ir.Platform, snapshot: RegistrySnapshot
    ) -> ir.CompilationResult:
        try:
            return self._compile(composition, platform, snapshot)
        except Exception as e:
            logger.exception(f"[{platform.value}] Compilation of '{composition.app_name}' failed")
            return ir.CompilationResult(
                platform=platform,
                errors=(
                    ir.Diagnostic(
                        code=ir.DiagnosticCode.COMPILATION_FAILED,
                        message=f"Compilation failed: {e}",
                    ),
                ),
            )

    def compile_all(self, composition: ir.AppComposition) -> list[ir.CompilationResult]:
        """
        Compile a composition for every platform in ``composition.targets``.

        A failure on one target never prevents compiling the others.

        Returns:
            One result per target, in ``targets`` order
        """
        targets = list(composition.targets)
        snapshot = self._snapshot()
        results: list[ir.CompilationResult | None] = [None] * len(targets)

        if self.config.parallel and len(targets) > 1:
            max_workers = min(self.config.max_workers, len(targets))
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = {
                    executor.submit(self._compile_isolated, composition, target, snapshot): index
                    for index, target in enumerate(targets)
                }
                # Collect in completion order, store by target index
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
        else:
            for index, target in enumerate(targets):
                results[index] = self._compile_isolated(composition, target, snapshot)

        logger.info(
            f"Compiled '{composition.app_name}' for {len(targets)} target(s): "
            + ", ".join(f"{r.platform.value}={r.status.value}" for r in results if r)
        )
        return [r for r in results if r is not None]


def summarize(results: list[ir.CompilationResult]) -> ir.CompilationSummary:
    """Aggregate per-target results into a summary."""
    return ir.CompilationSummary(
        total_platforms=len(results),
        successful_platforms=[r.platform for r in results if r.success],
        failed_platforms=[r.platform for r in results if not r.success],
    )


# =============================================================================
# Process-wide convenience functions
# =============================================================================


def compile_for_platform(
    composition: ir.AppComposition, platform: ir.Platform | str
) -> ir.CompilationResult:
    """Compile against the process-wide registry."""
    return CapsuleCompiler(get_registry()).compile_for_platform(composition, platform)


def compile_all(composition: ir.AppComposition) -> list[ir.CompilationResult]:
    """Compile every target against the process-wide registry."""
    return CapsuleCompiler(get_registry()).compile_all(composition)


__all__ = [
    "COMPILERS",
    "CapsuleCompiler",
    "compile_all",
    "compile_for_platform",
    "summarize",
]
