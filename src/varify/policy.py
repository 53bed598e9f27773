from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Mapping

_TRUE_STRINGS = {"1", "true", "yes", "on"}

# snake_case field -> camelCase key sent by editor clients
_CLIENT_KEYS: dict[str, str] = {
    "allow_primitive_types": "allowPrimitiveTypes",
    "allow_loop_variables": "allowLoopVariables",
    "allow_diamond_operator": "allowDiamondOperator",
    "allow_type_mismatch": "allowTypeMismatch",
    "refactor_anonymous_classes": "refactorAnonymousClasses",
    "refactor_lambda_expressions": "refactorLambdaExpressions",
}


def _as_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


@dataclass(frozen=True)
class PolicyConfiguration:
    """Switches deciding which declarations may be rewritten to ``var``."""

    allow_primitive_types: bool = True
    allow_loop_variables: bool = True
    allow_diamond_operator: bool = True
    allow_type_mismatch: bool = False
    refactor_anonymous_classes: bool = False
    refactor_lambda_expressions: bool = False

    @classmethod
    def from_mapping(cls, values: Mapping[str, object] | None) -> "PolicyConfiguration":
        if not values:
            return cls()
        return cls().with_overrides(values)

    def with_overrides(self, values: Mapping[str, object]) -> "PolicyConfiguration":
        changes: dict[str, bool] = {}
        for name, client_key in _CLIENT_KEYS.items():
            for key in (name, client_key):
                value = values.get(key)
                if value is None:
                    continue
                changes[name] = _as_bool(value)
                break
        if not changes:
            return self
        return replace(self, **changes)

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)


DEFAULT_POLICY = PolicyConfiguration()
