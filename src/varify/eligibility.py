from __future__ import annotations

from varify.inference import is_anonymous_class_initializer, is_lambda_initializer
from varify.policy import PolicyConfiguration

PRIMITIVE_TYPES: frozenset[str] = frozenset(
    {"int", "long", "short", "byte", "char", "float", "double", "boolean"}
)
DIAMOND_MARKER = "<>"


def has_diamond_operator(type_name: str) -> bool:
    return DIAMOND_MARKER in type_name


def is_primitive_type(type_name: str) -> bool:
    return type_name in PRIMITIVE_TYPES


def is_eligible(
    declared_type: str,
    initializer_type: str,
    is_local: bool,
    is_loop_variable: bool,
    policy: PolicyConfiguration,
) -> bool:
    """Decide whether ``declared_type`` may be replaced with ``var``.

    Each check is a veto; the first one that fires wins.
    """
    if not is_local:
        return False
    if is_loop_variable and not policy.allow_loop_variables:
        return False
    if has_diamond_operator(declared_type) and not policy.allow_diamond_operator:
        return False
    if is_primitive_type(declared_type) and not policy.allow_primitive_types:
        return False
    if declared_type != initializer_type and not policy.allow_type_mismatch:
        return False
    return True


def initializer_allowed(initializer: str, policy: PolicyConfiguration) -> bool:
    """Veto initializer shapes that must keep an explicit type.

    ``null`` and bare array initializers never compile with ``var``; lambdas
    and anonymous classes are left to the policy.
    """
    text = initializer.strip()
    if text == "null" or text.startswith("{"):
        return False
    if not policy.refactor_lambda_expressions and is_lambda_initializer(initializer):
        return False
    if not policy.refactor_anonymous_classes and is_anonymous_class_initializer(
        initializer
    ):
        return False
    return True
