from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Sequence

from config_bind.binder import TypeBinder
from config_bind.conditions import ConditionContextProtocol
from config_bind.configer import Configer
from config_bind.exceptions import ConfigCycleError, ConfigDuplicateError

logger = logging.getLogger("config_bind.graph")
logger.addHandler(logging.NullHandler())

__all__ = ["ConfigerGraph", "sort_configers"]


def _predecessors(configers: Sequence[Configer], current: Configer) -> List[Configer]:
    """Configers that must run before ``current``, in collection order."""
    result: List[Configer] = []
    for c in configers:
        for name in c.before_names:
            if name == current.name:
                result.append(c)
        for name in current.after_names:
            if name == c.name:
                result.append(c)
    return result


def _warn_unknown(configers: Sequence[Configer]) -> None:
    known = {c.name for c in configers}
    for c in configers:
        for name in (*c.before_names, *c.after_names):
            if name not in known:
                logger.warning("Configer %r references unknown configer %r", c.name, name)


def sort_configers(configers: Iterable[Configer]) -> List[Configer]:
    """
    Order configers so that every ``before``/``after`` constraint holds.

    Each configer is placed after everything that must precede it, visiting
    predecessors depth first. Unconstrained configers keep their input order.
    Raises ``ConfigCycleError`` naming every configer on the first cycle found.
    """
    items = list(configers)
    _warn_unknown(items)
    to_sort = list(items)
    done: List[Configer] = []
    in_progress: List[Configer] = []

    def contains(seq: List[Configer], c: Configer) -> bool:
        return any(x is c for x in seq)

    def visit(current: Configer) -> None:
        in_progress.append(current)
        for dep in _predecessors(items, current):
            for i, p in enumerate(in_progress):
                if p is dep:
                    chain = [x.name for x in in_progress[i:]] + [dep.name]
                    logger.error("Found cycle config: %s", " -> ".join(chain))
                    raise ConfigCycleError(chain)
            if not contains(done, dep) and contains(to_sort, dep):
                visit(dep)
        in_progress.pop()
        for i, p in enumerate(to_sort):
            if p is current:
                del to_sort[i]
                break
        done.append(current)
        logger.debug("Sorted configer %r at position %d", current.name, len(done) - 1)

    while to_sort:
        visit(to_sort.pop(0))
    return done


class ConfigerGraph:
    """Holds the registered configers of one context, keyed by name."""

    def __init__(self) -> None:
        self._configers: Dict[str, Configer] = {}

    def register(self, configer: Configer, override: bool = False) -> Configer:
        if not override and configer.name in self._configers:
            logger.error("Configer %r already registered", configer.name)
            raise ConfigDuplicateError(f"configer {configer.name!r} already registered")
        self._configers[configer.name] = configer
        logger.debug("Configer registered: %r", configer.name)
        return configer

    def get(self, name: str) -> Configer:
        return self._configers[name]

    def sort(self) -> List[Configer]:
        return sort_configers(self._configers.values())

    def run(self, ctx: ConditionContextProtocol, binder: TypeBinder) -> List[str]:
        """Run the matching configers in sorted order and return the names that ran."""
        executed: List[str] = []
        for configer in self.sort():
            if not configer.matches(ctx):
                logger.warning("Configer %r skipped: condition not met", configer.name)
                continue
            configer.run(binder)
            executed.append(configer.name)
            logger.info("Configer %r executed", configer.name)
        return executed

    def clear(self) -> None:
        self._configers.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._configers

    def __iter__(self) -> Iterator[Configer]:
        return iter(tuple(self._configers.values()))

    def __len__(self) -> int:
        return len(self._configers)
