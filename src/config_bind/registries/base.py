from __future__ import annotations

import logging
from typing import Callable, Dict, Generic, Hashable, Iterator, Optional, Tuple, TypeVar

from config_bind.exceptions import (
    ConfigDuplicateError,
    ConfigNotFoundError,
    ConfigRegistrationError,
)

logger = logging.getLogger("config_bind.registries")
logger.addHandler(logging.NullHandler())

K = TypeVar("K", bound=Hashable)
F = TypeVar("F", bound=Callable)


class Registry(Generic[K, F]):
    """Keyed registry of callables with duplicate protection."""

    kind = "entry"

    def __init__(self) -> None:
        self._entries: Dict[K, F] = {}
        logger.debug("%s initialized id=%s", type(self).__name__, hex(id(self)))

    def _canon(self, key: K) -> K:
        return key

    def register(self, key: K, fn: F, override: bool = False) -> None:
        if not callable(fn):
            logger.error("Register failed: %s for %r is not callable", self.kind, key)
            raise ConfigRegistrationError(f"{self.kind} for {key!r} must be callable, got {fn!r}")
        canon = self._canon(key)
        if not override and canon in self._entries:
            logger.error("Register failed: %s %r already registered", self.kind, canon)
            raise ConfigDuplicateError(f"{self.kind} {canon!r} already registered")
        existed = canon in self._entries
        self._entries[canon] = fn
        if existed:
            logger.debug("%s overridden for %r", self.kind, canon)
        else:
            logger.debug("%s registered for %r", self.kind, canon)

    def has(self, key: K) -> bool:
        try:
            return self._canon(key) in self._entries
        except ConfigRegistrationError:
            return False

    def find(self, key: K) -> Optional[F]:
        try:
            return self._entries.get(self._canon(key))
        except ConfigRegistrationError:
            return None

    def get(self, key: K) -> F:
        fn = self.find(key)
        if fn is None:
            raise ConfigNotFoundError(f"unknown {self.kind} {key!r}")
        return fn

    def names(self) -> Tuple[K, ...]:
        return tuple(self._entries.keys())

    def items(self) -> Iterator[Tuple[K, F]]:
        return iter(tuple(self._entries.items()))

    def copy(self):
        other = type(self)()
        other._entries.update(self._entries)
        return other

    def clear(self) -> None:
        logger.debug("Clearing %s: entries=%d", type(self).__name__, len(self._entries))
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return self.has(key)  # type: ignore[arg-type]

    def __len__(self) -> int:
        return len(self._entries)


class NamedRegistry(Registry[str, F]):
    """Registry keyed by case-insensitive names."""

    def _canon(self, key: str) -> str:
        if not isinstance(key, str) or not key.strip():
            raise ConfigRegistrationError(f"{self.kind} name must be a non-empty string")
        return key.strip().lower()
