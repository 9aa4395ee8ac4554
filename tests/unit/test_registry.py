"""Tests for the capsule registry."""

from __future__ import annotations

import threading

import pytest

from capsula.core import ir
from capsula.core.errors import CapsuleNotFoundError, RegistryError
from capsula.core.registry import (
    CapsuleRegistry,
    get_registry,
    register_capsule,
    reset_registry,
    unregister_capsule,
)
from conftest import make_button, make_label


class TestRegisterAndLookup:
    def test_register_then_get(self, button_capsule: ir.CapsuleDefinition) -> None:
        registry = CapsuleRegistry()
        registry.register(button_capsule)
        assert registry.get("button") == button_capsule
        assert "button" in registry
        assert len(registry) == 1

    def test_round_trip_unregister(self, button_capsule: ir.CapsuleDefinition) -> None:
        registry = CapsuleRegistry()
        registry.register(button_capsule)
        assert registry.unregister(button_capsule.id) is True
        assert registry.get(button_capsule.id) is None

    def test_unregister_missing_returns_false(self) -> None:
        assert CapsuleRegistry().unregister("nope") is False

    def test_register_overwrites_by_id(self) -> None:
        registry = CapsuleRegistry()
        registry.register(make_button())
        registry.register(make_button(version="2.0.0"))
        assert len(registry) == 1
        assert registry.get("button").version == "2.0.0"

    def test_register_accepts_mapping(self) -> None:
        registry = CapsuleRegistry()
        capsule = registry.register(
            {
                "id": "spacer",
                "name": "Spacer",
                "platforms": {"web": {"framework": "react", "code": "<div />"}},
            }
        )
        assert capsule.id == "spacer"
        assert registry.supports_platform("spacer", "web")

    def test_require_raises_for_missing(self) -> None:
        with pytest.raises(CapsuleNotFoundError) as exc_info:
            CapsuleRegistry().require("ghost")
        assert exc_info.value.capsule_id == "ghost"


class TestRegisterValidation:
    def test_duplicate_prop_names_rejected(self) -> None:
        registry = CapsuleRegistry()
        with pytest.raises(RegistryError, match="duplicate prop names"):
            registry.register(
                {
                    "id": "dup",
                    "name": "Dup",
                    "props": [
                        {"name": "label", "type": "string"},
                        {"name": "label", "type": "string"},
                    ],
                    "platforms": {"web": {"framework": "react", "code": ""}},
                }
            )

    def test_no_platforms_rejected(self) -> None:
        with pytest.raises(RegistryError):
            CapsuleRegistry().register({"id": "empty", "name": "Empty", "platforms": {}})

    def test_invalid_pattern_rejected(self) -> None:
        registry = CapsuleRegistry()
        with pytest.raises(RegistryError, match="not a valid regular expression"):
            registry.register(
                {
                    "id": "coded",
                    "name": "Coded",
                    "props": [{"name": "value", "type": "string", "pattern": "[unclosed"}],
                    "platforms": {"web": {"framework": "react", "code": ""}},
                }
            )
        assert "coded" not in registry

    def test_malformed_template_is_accepted(self) -> None:
        registry = CapsuleRegistry()
        registry.register(
            {
                "id": "broken",
                "name": "Broken",
                "platforms": {"web": {"framework": "react", "code": "{{ unclosed"}},
            }
        )
        assert "broken" in registry


class TestFilters:
    def test_list_by_category_and_tag(self, registry: CapsuleRegistry) -> None:
        assert [c.id for c in registry.list_by_category("layout")] == ["stack"]
        assert [c.id for c in registry.list_by_tag("form")] == ["button"]
        assert registry.list_by_category("missing") == []

    def test_list_by_platform(self, registry: CapsuleRegistry) -> None:
        ids = {c.id for c in registry.list_by_platform(ir.Platform.ANDROID)}
        assert ids == {"stack", "label"}
        assert registry.list_by_platform("plan9") == []

    def test_supports_platform(self, registry: CapsuleRegistry) -> None:
        assert registry.supports_platform("button", ir.Platform.WEB)
        assert not registry.supports_platform("button", ir.Platform.ANDROID)
        assert not registry.supports_platform("ghost", ir.Platform.WEB)

    def test_search_matches_name_and_tags(self, registry: CapsuleRegistry) -> None:
        assert [c.id for c in registry.search("BUTT")] == ["button"]
        assert [c.id for c in registry.search("layout")] == ["stack"]
        assert len(registry.search("")) == 3


class TestSnapshots:
    def test_snapshot_is_stable_across_mutation(self, registry: CapsuleRegistry) -> None:
        snapshot = registry.snapshot()
        registry.unregister("button")
        assert snapshot.get("button") is not None
        assert registry.get("button") is None

    def test_version_bumps_on_mutation(self) -> None:
        registry = CapsuleRegistry()
        start = registry.version
        registry.register(make_label())
        registry.unregister("label")
        registry.unregister("label")
        assert registry.version == start + 2

    def test_concurrent_registration(self) -> None:
        registry = CapsuleRegistry()

        def worker(index: int) -> None:
            registry.register(make_label(id=f"label-{index}"))

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(32)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(registry) == 32
        assert registry.version == 32


class TestProcessRegistry:
    def test_get_registry_loads_builtin_catalog(self) -> None:
        registry = get_registry()
        assert registry is get_registry()
        assert {"button", "text", "stack", "image", "text-input"} <= {c.id for c in registry.list()}

    def test_module_level_register_and_unregister(self) -> None:
        register_capsule(make_label(id="custom-label"))
        assert get_registry().get("custom-label") is not None
        assert unregister_capsule("custom-label") is True
        assert get_registry().get("custom-label") is None

    def test_reset_rebuilds(self) -> None:
        first = get_registry()
        reset_registry()
        assert get_registry() is not first
