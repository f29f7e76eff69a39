from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Protocol

from simpleeval import DEFAULT_FUNCTIONS, EvalWithCompoundTypes
from typing_extensions import runtime_checkable

from config_bind.exceptions import ConfigExpressionError

logger = logging.getLogger("config_bind.expressions")
logger.addHandler(logging.NullHandler())

__all__ = ["ExpressionEvaluatorProtocol", "SimpleEvalEvaluator", "evaluate_bool"]

_EXTRA_FUNCTIONS: Mapping[str, Callable[..., Any]] = {
    "len": len,
    "abs": abs,
    "min": min,
    "max": max,
    "bool": bool,
    "round": round,
}


@runtime_checkable
class ExpressionEvaluatorProtocol(Protocol):
    def evaluate(
        self,
        expression: str,
        names: Mapping[str, Any],
        functions: Optional[Mapping[str, Callable[..., Any]]] = None,
    ) -> Any: ...


class SimpleEvalEvaluator:
    """Sandboxed evaluation of Python-syntax expressions through ``simpleeval``."""

    def evaluate(
        self,
        expression: str,
        names: Mapping[str, Any],
        functions: Optional[Mapping[str, Callable[..., Any]]] = None,
    ) -> Any:
        funcs = {**DEFAULT_FUNCTIONS, **_EXTRA_FUNCTIONS, **(functions or {})}
        evaluator = EvalWithCompoundTypes(names=dict(names), functions=funcs)
        try:
            return evaluator.eval(expression)
        except Exception as e:
            logger.error("Expression %r failed: %s", expression, e)
            raise ConfigExpressionError(f"eval {expression!r} returns: {e}") from e


def evaluate_bool(
    evaluator: ExpressionEvaluatorProtocol,
    expression: str,
    names: Mapping[str, Any],
    functions: Optional[Mapping[str, Callable[..., Any]]] = None,
) -> bool:
    result = evaluator.evaluate(expression, names, functions)
    if not isinstance(result, bool):
        raise ConfigExpressionError(f"eval {expression!r} doesn't return bool")
    return result
