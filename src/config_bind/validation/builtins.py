from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Union

from config_bind.expressions import ExpressionEvaluatorProtocol, evaluate_bool

if TYPE_CHECKING:
    from config_bind.registries.validators import ValidatorRegistry


class ExprValidator:
    """``expr="value > 0"``: the converted value is bound to ``value``."""

    def __init__(self, evaluator: ExpressionEvaluatorProtocol) -> None:
        self._evaluator = evaluator

    def __call__(self, tag: str, value: Any) -> bool:
        return evaluate_bool(self._evaluator, tag, {"value": value})


def _number(tag: str) -> Union[int, float]:
    try:
        return int(tag, 0)
    except ValueError:
        return float(tag)


def _measure(value: Any) -> Any:
    # sized values are bounded by length, like string/list bounds on parameters
    if isinstance(value, (str, bytes, list, tuple, dict, set, frozenset)):
        return len(value)
    return value


def min_validator(tag: str, value: Any) -> bool:
    return _measure(value) >= _number(tag.strip())


def max_validator(tag: str, value: Any) -> bool:
    return _measure(value) <= _number(tag.strip())


def pattern_validator(tag: str, value: Any) -> bool:
    return re.match(tag, str(value)) is not None


def register_builtin_validators(
    registry: ValidatorRegistry, evaluator: ExpressionEvaluatorProtocol
) -> None:
    registry.register("expr", ExprValidator(evaluator), override=True)
    registry.register("min", min_validator, override=True)
    registry.register("max", max_validator, override=True)
    registry.register("pattern", pattern_validator, override=True)
