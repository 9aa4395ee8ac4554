"""
Prop schema validation.

Checks the values bound on a capsule instance against the capsule's declared
prop schema. Every problem is reported as a typed Violation carrying the
capsule id and prop name; validation never stops at the first problem.

Unknown props are rejected in strict mode (the default) since they are most
likely authoring typos. Lenient mode drops them instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .ir import CapsuleDefinition, PropSpec, PropType


class ViolationCode(str, Enum):
    """Kinds of composition-level validation failure."""

    MISSING_REQUIRED_PROP = "MissingRequiredProp"
    UNKNOWN_PROP = "UnknownProp"
    INVALID_OPTION = "InvalidOption"
    TYPE_MISMATCH = "TypeMismatch"
    OUT_OF_RANGE = "OutOfRange"
    PATTERN_MISMATCH = "PatternMismatch"
    UNKNOWN_CAPSULE = "UnknownCapsule"
    CHILDREN_NOT_ALLOWED = "ChildrenNotAllowed"
    DUPLICATE_INSTANCE_ID = "DuplicateInstanceId"
    INVALID_SHAPE = "InvalidShape"


@dataclass(frozen=True)
class Violation:
    """A single validation failure."""

    code: ViolationCode
    message: str
    capsule_id: str | None = None
    prop: str | None = None
    instance_id: str | None = None


@dataclass
class PropValidationResult:
    """
    Outcome of validating one instance's bindings.

    Attributes:
        violations: Every problem found (empty means valid)
        props: Accepted bindings (unknown keys removed in lenient mode)
    """

    violations: list[Violation] = field(default_factory=list)
    props: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.violations


def _type_name(value: Any) -> str:
    return type(value).__name__


def _matches_type(prop_type: PropType, value: Any) -> bool:
    if prop_type.is_string_like:
        return isinstance(value, str)
    if prop_type is PropType.NUMBER:
        # bool is an int subclass but never a valid number binding
        return isinstance(value, int | float) and not isinstance(value, bool)
    if prop_type is PropType.BOOLEAN:
        return isinstance(value, bool)
    if prop_type is PropType.ARRAY:
        return isinstance(value, list | tuple)
    if prop_type is PropType.OBJECT:
        return isinstance(value, dict)
    # select: membership is checked separately
    return True


def _check_value(
    capsule: CapsuleDefinition, spec: PropSpec, value: Any, instance_id: str | None
) -> Violation | None:
    where = f" on instance '{instance_id}'" if instance_id else ""

    if spec.type is PropType.SELECT:
        if value not in spec.options:  # type: ignore[operator]
            allowed = ", ".join(repr(o) for o in spec.options or ())
            return Violation(
                ViolationCode.INVALID_OPTION,
                f"Prop '{spec.name}' of capsule '{capsule.id}'{where} must be one of "
                f"{allowed}, got {value!r}",
                capsule.id,
                spec.name,
                instance_id,
            )
        return None

    if not _matches_type(spec.type, value):
        return Violation(
            ViolationCode.TYPE_MISMATCH,
            f"Prop '{spec.name}' of capsule '{capsule.id}'{where} expects "
            f"{spec.type.value}, got {_type_name(value)}",
            capsule.id,
            spec.name,
            instance_id,
        )

    if spec.type is PropType.NUMBER:
        if (spec.min_value is not None and value < spec.min_value) or (
            spec.max_value is not None and value > spec.max_value
        ):
            return Violation(
                ViolationCode.OUT_OF_RANGE,
                f"Prop '{spec.name}' of capsule '{capsule.id}'{where} must be within "
                f"[{spec.min_value}, {spec.max_value}], got {value}",
                capsule.id,
                spec.name,
                instance_id,
            )

    if spec.pattern is not None and spec.type.is_string_like:
        if not re.fullmatch(spec.pattern, value):
            return Violation(
                ViolationCode.PATTERN_MISMATCH,
                f"Prop '{spec.name}' of capsule '{capsule.id}'{where} does not match "
                f"pattern {spec.pattern!r}",
                capsule.id,
                spec.name,
                instance_id,
            )
    return None


def validate_props(
    capsule: CapsuleDefinition,
    bound_props: dict[str, Any],
    *,
    instance_id: str | None = None,
    strict: bool = True,
) -> PropValidationResult:
    """
    Validate bound values against a capsule's prop schema.

    Checks, in order:
    1. Required props without a default are bound
    2. No unknown props (strict) / unknown props dropped (lenient)
    3. Enumerated props use one of their options
    4. Primitive props match their declared type (plus min/max/pattern)

    Args:
        capsule: Capsule definition owning the schema
        bound_props: Values bound on the instance
        instance_id: Instance being validated, for diagnostics
        strict: Reject unknown props instead of dropping them

    Returns:
        PropValidationResult with every violation found
    """
    result = PropValidationResult()
    where = f" on instance '{instance_id}'" if instance_id else ""

    for spec in capsule.props:
        if spec.required and not spec.has_default and spec.name not in bound_props:
            result.violations.append(
                Violation(
                    ViolationCode.MISSING_REQUIRED_PROP,
                    f"Missing required prop '{spec.name}' of capsule '{capsule.id}'{where}",
                    capsule.id,
                    spec.name,
                    instance_id,
                )
            )

    for name, value in bound_props.items():
        spec = capsule.get_prop(name)
        if spec is None:
            if strict:
                result.violations.append(
                    Violation(
                        ViolationCode.UNKNOWN_PROP,
                        f"Unknown prop '{name}' for capsule '{capsule.id}'{where}. "
                        f"Known props: {', '.join(capsule.prop_names) or '(none)'}",
                        capsule.id,
                        name,
                        instance_id,
                    )
                )
            continue

        violation = _check_value(capsule, spec, value, instance_id)
        if violation is not None:
            result.violations.append(violation)
        else:
            result.props[name] = value

    return result


__all__ = [
    "PropValidationResult",
    "Violation",
    "ViolationCode",
    "validate_props",
]
