"""
Composable activation conditions.

A ``Conditional`` is built by appending predicates one at a time. Each append is
joined to the result so far with the operator selected just before it (``and_()``
or ``or_()``, AND when none was chosen), and evaluation is a left fold that skips
predicates whose outcome cannot change the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple

from typing_extensions import runtime_checkable

from config_bind.beans import BeanRegistryProtocol, BeanSelector
from config_bind.exceptions import ConfigExpressionError
from config_bind.expressions import (
    ExpressionEvaluatorProtocol,
    SimpleEvalEvaluator,
    evaluate_bool,
)
from config_bind.store.manager import PropertyStore
from config_bind.utils import to_property_string

logger = logging.getLogger("config_bind.conditions")
logger.addHandler(logging.NullHandler())

__all__ = [
    "ConditionContextProtocol",
    "EvaluationContext",
    "Condition",
    "PropertyCondition",
    "MissingPropertyCondition",
    "PropertyValueCondition",
    "BeanCondition",
    "MissingBeanCondition",
    "ExpressionCondition",
    "ProfileCondition",
    "FunctionCondition",
    "NotCondition",
    "Conditional",
]

EXPR_PREFIX = "expr:"
AND = "and"
OR = "or"


@runtime_checkable
class ConditionContextProtocol(Protocol):
    @property
    def properties(self) -> PropertyStore: ...

    @property
    def profiles(self) -> Sequence[str]: ...

    @property
    def evaluator(self) -> ExpressionEvaluatorProtocol: ...

    def find_beans(self, selector: BeanSelector) -> List[Any]: ...


@dataclass
class EvaluationContext:
    """A standalone condition context over a store, optional beans and profiles."""

    properties: PropertyStore
    beans: Optional[BeanRegistryProtocol] = None
    profiles: Sequence[str] = ()
    evaluator: ExpressionEvaluatorProtocol = field(default_factory=SimpleEvalEvaluator)

    def find_beans(self, selector: BeanSelector) -> List[Any]:
        if self.beans is None:
            return []
        return list(self.beans.find(selector))


@runtime_checkable
class Condition(Protocol):
    def matches(self, ctx: ConditionContextProtocol) -> bool: ...


@dataclass(frozen=True)
class PropertyCondition:
    name: str

    def matches(self, ctx: ConditionContextProtocol) -> bool:
        return ctx.properties.has(self.name)


@dataclass(frozen=True)
class MissingPropertyCondition:
    name: str

    def matches(self, ctx: ConditionContextProtocol) -> bool:
        return not ctx.properties.has(self.name)


@dataclass(frozen=True)
class PropertyValueCondition:
    """
    Matches when the property exists and equals ``having_value``.

    A ``having_value`` of ``"expr:<expression>"`` is evaluated instead, with the
    property string bound to ``value``.
    """

    name: str
    having_value: Any

    def matches(self, ctx: ConditionContextProtocol) -> bool:
        if not ctx.properties.has(self.name):
            return False
        val = ctx.properties.get(self.name)
        expected = self.having_value
        if isinstance(expected, str) and expected.startswith(EXPR_PREFIX):
            return evaluate_bool(ctx.evaluator, expected[len(EXPR_PREFIX) :], {"value": val})
        return val == to_property_string(expected)


@dataclass(frozen=True)
class BeanCondition:
    selector: BeanSelector

    def matches(self, ctx: ConditionContextProtocol) -> bool:
        return len(ctx.find_beans(self.selector)) > 0


@dataclass(frozen=True)
class MissingBeanCondition:
    selector: BeanSelector

    def matches(self, ctx: ConditionContextProtocol) -> bool:
        return len(ctx.find_beans(self.selector)) == 0


@dataclass(frozen=True)
class ExpressionCondition:
    """
    Evaluates an expression over the properties.

    Names available to the expression: ``props`` (the flat property mapping),
    ``profiles``, ``prop(key, default="")`` and ``has(key)``.
    """

    expression: str

    def matches(self, ctx: ConditionContextProtocol) -> bool:
        store = ctx.properties

        def prop(key: str, default: str = "") -> str:
            return store.get(key, default)

        names = {"props": dict(store.snapshot()), "profiles": list(ctx.profiles)}
        return evaluate_bool(
            ctx.evaluator, self.expression, names, {"prop": prop, "has": store.has}
        )


@dataclass(frozen=True)
class ProfileCondition:
    profile: str

    def matches(self, ctx: ConditionContextProtocol) -> bool:
        wanted = self.profile.strip().lower()
        return any(p.strip().lower() == wanted for p in ctx.profiles)


@dataclass(frozen=True)
class FunctionCondition:
    fn: Callable[[ConditionContextProtocol], bool]

    def matches(self, ctx: ConditionContextProtocol) -> bool:
        return bool(self.fn(ctx))


@dataclass(frozen=True)
class NotCondition:
    condition: Condition

    def matches(self, ctx: ConditionContextProtocol) -> bool:
        return not self.condition.matches(ctx)


class Conditional:
    """A left-folded chain of conditions joined by AND/OR."""

    def __init__(self) -> None:
        self._chain: List[Tuple[str, Condition]] = []
        self._op: Optional[str] = None

    def __len__(self) -> int:
        return len(self._chain)

    def __repr__(self) -> str:
        return f"<Conditional conditions={len(self._chain)} pending={self._op!r}>"

    def _select(self, op: str) -> "Conditional":
        if not self._chain:
            raise ConfigExpressionError(f"no condition before {op}")
        if self._op is not None:
            raise ConfigExpressionError(f"{op} follows {self._op} without a condition between")
        self._op = op
        return self

    def and_(self) -> "Conditional":
        return self._select(AND)

    def or_(self) -> "Conditional":
        return self._select(OR)

    def on_condition(self, cond: Condition) -> "Conditional":
        if not isinstance(cond, Condition):
            raise ConfigExpressionError(f"{cond!r} is not a condition")
        self._chain.append((self._op or AND, cond))
        self._op = None
        return self

    def on_condition_not(self, cond: Condition) -> "Conditional":
        return self.on_condition(NotCondition(cond))

    def on_property(self, name: str) -> "Conditional":
        return self.on_condition(PropertyCondition(name))

    def on_missing_property(self, name: str) -> "Conditional":
        return self.on_condition(MissingPropertyCondition(name))

    def on_property_value(self, name: str, having_value: Any) -> "Conditional":
        return self.on_condition(PropertyValueCondition(name, having_value))

    def on_bean(self, selector: BeanSelector) -> "Conditional":
        return self.on_condition(BeanCondition(selector))

    def on_missing_bean(self, selector: BeanSelector) -> "Conditional":
        return self.on_condition(MissingBeanCondition(selector))

    def on_expression(self, expression: str) -> "Conditional":
        return self.on_condition(ExpressionCondition(expression))

    def on_profile(self, profile: str) -> "Conditional":
        return self.on_condition(ProfileCondition(profile))

    def on_matches(self, fn: Callable[[ConditionContextProtocol], bool]) -> "Conditional":
        if not callable(fn):
            raise ConfigExpressionError(f"condition function must be callable, got {fn!r}")
        return self.on_condition(FunctionCondition(fn))

    def matches(self, ctx: ConditionContextProtocol) -> bool:
        if self._op is not None:
            raise ConfigExpressionError(f"no condition after {self._op}")
        if not self._chain:
            return True
        result = True
        for i, (op, cond) in enumerate(self._chain):
            if i > 0:
                if op == AND and not result:
                    continue
                if op == OR and result:
                    continue
            result = cond.matches(ctx)
            logger.debug("Condition %r -> %s", cond, result)
        return result
