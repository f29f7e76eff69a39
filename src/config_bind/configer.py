from __future__ import annotations

import inspect
import logging
import typing
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple

from config_bind.beans import BeanSelector
from config_bind.conditions import Condition, ConditionContextProtocol, Conditional
from config_bind.exceptions import ConfigRegistrationError, ConfigSyntaxError
from config_bind.tags import parse_tag

if TYPE_CHECKING:
    from config_bind.binder import TypeBinder

logger = logging.getLogger("config_bind.configer")
logger.addHandler(logging.NullHandler())

__all__ = ["Configer", "ConfigerArg"]

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


class ConfigerArg(typing.NamedTuple):
    name: str
    hint: Any
    tag: Optional[str]


def _arguments(name: str, fn: Callable[..., Any], tags: Tuple[str, ...]) -> Tuple[ConfigerArg, ...]:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError) as e:
        raise ConfigRegistrationError(f"configer {name!r}: cannot inspect {fn!r}: {e}") from e
    try:
        hints = typing.get_type_hints(fn)
    except Exception as e:
        raise ConfigRegistrationError(
            f"configer {name!r}: cannot resolve annotations of {fn!r}: {e}"
        ) from e

    params = [p for p in sig.parameters.values() if p.kind in _POSITIONAL]
    if len(tags) > len(params):
        raise ConfigRegistrationError(
            f"configer {name!r}: {len(tags)} tags for {len(params)} positional parameters"
        )
    args: List[ConfigerArg] = []
    for i, param in enumerate(params):
        tag = tags[i] if i < len(tags) else None
        if tag is None:
            if param.default is inspect.Parameter.empty:
                raise ConfigRegistrationError(
                    f"configer {name!r}: parameter {param.name!r} has no tag and no default"
                )
            continue
        try:
            parse_tag(tag)
        except ConfigSyntaxError as e:
            raise ConfigRegistrationError(f"configer {name!r}: {e}") from e
        hint = hints.get(param.name, param.annotation)
        if hint is inspect.Parameter.empty:
            hint = str
        args.append(ConfigerArg(param.name, hint, tag))
    return tuple(args)


class Configer:
    """
    A named configuration function run once during context refresh.

    Positional parameters of ``fn`` are bound, in order, from ``tags``. Execution
    is gated by a ``Conditional`` and ordered by ``before``/``after`` constraints.
    """

    def __init__(self, name: str, fn: Callable[..., Any], *tags: str) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ConfigRegistrationError("configer name must be a non-empty string")
        if not callable(fn):
            logger.error("Configer %r: fn is not callable", name)
            raise ConfigRegistrationError(f"configer {name!r}: fn must be callable, got {fn!r}")
        self._name = name
        self._fn = fn
        self._args = _arguments(name, fn, tuple(tags))
        self._cond = Conditional()
        self._before: Tuple[str, ...] = ()
        self._after: Tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self._name

    @property
    def fn(self) -> Callable[..., Any]:
        return self._fn

    @property
    def arguments(self) -> Tuple[ConfigerArg, ...]:
        return self._args

    @property
    def condition(self) -> Conditional:
        return self._cond

    @property
    def before_names(self) -> Tuple[str, ...]:
        return self._before

    @property
    def after_names(self) -> Tuple[str, ...]:
        return self._after

    def before(self, *names: str) -> "Configer":
        """Run ahead of the named configers. Replaces earlier ``before`` names."""
        self._before = tuple(names)
        return self

    def after(self, *names: str) -> "Configer":
        """Run behind the named configers. Replaces earlier ``after`` names."""
        self._after = tuple(names)
        return self

    def and_(self) -> "Configer":
        self._cond.and_()
        return self

    def or_(self) -> "Configer":
        self._cond.or_()
        return self

    def on_condition(self, cond: Condition) -> "Configer":
        self._cond.on_condition(cond)
        return self

    def on_condition_not(self, cond: Condition) -> "Configer":
        self._cond.on_condition_not(cond)
        return self

    def on_property(self, name: str) -> "Configer":
        self._cond.on_property(name)
        return self

    def on_missing_property(self, name: str) -> "Configer":
        self._cond.on_missing_property(name)
        return self

    def on_property_value(self, name: str, having_value: Any) -> "Configer":
        self._cond.on_property_value(name, having_value)
        return self

    def on_bean(self, selector: BeanSelector) -> "Configer":
        self._cond.on_bean(selector)
        return self

    def on_missing_bean(self, selector: BeanSelector) -> "Configer":
        self._cond.on_missing_bean(selector)
        return self

    def on_expression(self, expression: str) -> "Configer":
        self._cond.on_expression(expression)
        return self

    def on_profile(self, profile: str) -> "Configer":
        self._cond.on_profile(profile)
        return self

    def on_matches(self, fn: Callable[[ConditionContextProtocol], bool]) -> "Configer":
        self._cond.on_matches(fn)
        return self

    def matches(self, ctx: ConditionContextProtocol) -> bool:
        return self._cond.matches(ctx)

    def run(self, binder: TypeBinder) -> Any:
        values = [
            binder.bind(arg.hint, arg.tag, path=f"{self._name}.{arg.name}")
            for arg in self._args
        ]
        logger.debug("Running configer %r with %d arguments", self._name, len(values))
        return self._fn(*values)

    def __repr__(self) -> str:
        return f"<Configer {self._name!r} before={list(self._before)} after={list(self._after)}>"
