"""
Composition building.

Turns raw editor/API input into a validated AppComposition. After
``build_composition`` returns, every instance references a registered capsule
and carries a fully valid set of prop bindings, so compilers never have to
re-check them.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .ir import AppComposition, CapsuleDefinition, CapsuleInstance
from .validator import Violation, ViolationCode, validate_props

logger = logging.getLogger(__name__)


class CapsuleLookup(Protocol):
    """Anything that resolves capsule ids: a registry or one of its snapshots."""

    def get(self, capsule_id: str) -> CapsuleDefinition | None: ...


def _shape_violations(error: PydanticValidationError) -> list[Violation]:
    violations = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        violations.append(
            Violation(ViolationCode.INVALID_SHAPE, f"Invalid composition at {location}: {item['msg']}")
        )
    return violations


def parse_composition(raw: AppComposition | Mapping[str, Any]) -> AppComposition:
    """
    Parse raw input into the composition shape without consulting the registry.

    Raises:
        ValidationError: With InvalidShape violations if the input is malformed
    """
    if isinstance(raw, AppComposition):
        return raw
    try:
        return AppComposition.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationError(_shape_violations(e)) from e


def validate_composition(
    composition: AppComposition, capsules: CapsuleLookup, *, strict: bool = True
) -> tuple[list[Violation], dict[str, dict[str, Any]]]:
    """
    Validate every instance in the tree, depth-first in declared order.

    Returns:
        (violations, accepted props per instance_id)
    """
    violations: list[Violation] = []
    accepted: dict[str, dict[str, Any]] = {}
    seen: set[str] = set()

    for instance, _depth, _parent in composition.iter_instances():
        if instance.instance_id in seen:
            violations.append(
                Violation(
                    ViolationCode.DUPLICATE_INSTANCE_ID,
                    f"Instance id '{instance.instance_id}' is used more than once",
                    instance.capsule_id,
                    None,
                    instance.instance_id,
                )
            )
        seen.add(instance.instance_id)

        capsule = capsules.get(instance.capsule_id)
        if capsule is None:
            violations.append(
                Violation(
                    ViolationCode.UNKNOWN_CAPSULE,
                    f"Instance '{instance.instance_id}' references unknown capsule "
                    f"'{instance.capsule_id}'",
                    instance.capsule_id,
                    None,
                    instance.instance_id,
                )
            )
            continue

        prop_result = validate_props(
            capsule, instance.bound_props, instance_id=instance.instance_id, strict=strict
        )
        violations.extend(prop_result.violations)
        accepted[instance.instance_id] = prop_result.props

        if instance.children and not capsule.children:
            violations.append(
                Violation(
                    ViolationCode.CHILDREN_NOT_ALLOWED,
                    f"Capsule '{capsule.id}' does not accept children "
                    f"(instance '{instance.instance_id}' has {len(instance.children)})",
                    capsule.id,
                    None,
                    instance.instance_id,
                )
            )

    return violations, accepted


def _with_props(
    instance: CapsuleInstance, accepted: dict[str, dict[str, Any]]
) -> CapsuleInstance:
    props = accepted.get(instance.instance_id, instance.bound_props)
    children = tuple(_with_props(child, accepted) for child in instance.children)
    if props == instance.bound_props and children == instance.children:
        return instance
    return instance.model_copy(update={"bound_props": props, "children": children})


def build_composition(
    raw: AppComposition | Mapping[str, Any],
    capsules: CapsuleLookup,
    *,
    strict: bool = True,
) -> AppComposition:
    """
    Build a validated composition.

    Args:
        raw: Composition mapping (editor/API JSON) or an AppComposition
        capsules: Registry or registry snapshot used to resolve capsule ids
        strict: Reject unknown props (default) instead of dropping them

    Returns:
        A self-consistent AppComposition

    Raises:
        ValidationError: Carrying every violation found in the tree
    """
    composition = parse_composition(raw)
    violations, accepted = validate_composition(composition, capsules, strict=strict)

    if violations:
        logger.info(
            f"Composition '{composition.app_name}' rejected with {len(violations)} violation(s)"
        )
        raise ValidationError(violations)

    if not strict:
        composition = composition.model_copy(
            update={"root": tuple(_with_props(inst, accepted) for inst in composition.root)}
        )

    logger.debug(
        f"Built composition '{composition.app_name}' with "
        f"{composition.instance_count()} instance(s)"
    )
    return composition


__all__ = [
    "CapsuleLookup",
    "build_composition",
    "parse_composition",
    "validate_composition",
]
