from __future__ import annotations

import logging
import threading
from functools import wraps
from pathlib import Path
from types import TracebackType
from typing import Any, Callable, List, Mapping, Optional, Type, TypeVar, cast

from config_bind.beans import BeanSelector, SimpleBeanRegistry
from config_bind.binder import TypeBinder
from config_bind.configer import Configer
from config_bind.exceptions import ConfigLockedError, ConfigNotFoundError, ConfigTornDownError
from config_bind.expressions import ExpressionEvaluatorProtocol, SimpleEvalEvaluator
from config_bind.graph import ConfigerGraph
from config_bind.locks import LockGuard
from config_bind.registries import Converter, Registries, Splitter, default_registries
from config_bind.store import loaders
from config_bind.store.manager import PropertyStore
from config_bind.utils import _redact_for_log
from config_bind.validation.protocol import ValidatorProtocol

logger = logging.getLogger("config_bind.context")
logger.addHandler(logging.NullHandler())

F = TypeVar("F", bound=Callable[..., Any])

PROFILES_TAG = "${app.profiles.active:=}"


def is_torn_down(func: F) -> F:
    """
    Decorator to check if the context has been closed before method execution.
    Raises ConfigTornDownError if closed.
    """

    @wraps(func)
    def wrapper(self: "AppContext", *args: Any, **kwargs: Any) -> Any:
        if self.torn_down:
            logger.error(f"Attempted {func.__name__} after close.")
            raise ConfigTornDownError("Context has been closed")
        return func(self, *args, **kwargs)

    return cast(F, wrapper)


class AppContext:
    """
    Application context tying properties, binding and configers together.

    Load properties, register converters/splitters/validators, beans and
    configers, then call refresh() once to run the configers in order.
    Registries and configers are locked after refresh(); properties and beans
    can still be changed.
    Use close() (or a ``with`` block) to release the context.
    """

    def __init__(
        self,
        properties: Optional[Mapping[str, Any]] = None,
        *,
        registries: Optional[Registries] = None,
        evaluator: Optional[ExpressionEvaluatorProtocol] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._torn_down = False
        self._evaluator = evaluator or SimpleEvalEvaluator()
        self._registries = registries if registries is not None else default_registries(self._evaluator)
        self._store = PropertyStore(properties)
        self._binder = TypeBinder(self._store, self._registries)
        self._graph = ConfigerGraph()
        self._beans = SimpleBeanRegistry()
        self._guard = LockGuard()
        logger.debug("AppContext created with %d properties", len(self._store))

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    @property
    def refreshed(self) -> bool:
        return self._guard.is_locked()

    @property
    def properties(self) -> PropertyStore:
        return self._store

    @property
    def registries(self) -> Registries:
        return self._registries

    @property
    def binder(self) -> TypeBinder:
        return self._binder

    @property
    def graph(self) -> ConfigerGraph:
        return self._graph

    @property
    def beans(self) -> SimpleBeanRegistry:
        return self._beans

    @property
    def evaluator(self) -> ExpressionEvaluatorProtocol:
        return self._evaluator

    @property
    def profiles(self) -> List[str]:
        """Active profiles, from the ``app.profiles.active`` comma list."""
        return self._binder.bind(List[str], PROFILES_TAG, path="profiles")

    # properties
    @is_torn_down
    def set_property(self, key: str, value: Any) -> None:
        with self._lock:
            self._store.set(key, value)
            logger.debug("Property set %s=%s", key, _redact_for_log(key, value))

    @is_torn_down
    def update(self, values: Mapping[str, Any]) -> None:
        with self._lock:
            self._store.update(values)
            logger.info("Properties updated keys=%d", len(values))

    @is_torn_down
    def load_file(self, path: Path | str) -> None:
        with self._lock:
            loaders.load_file(self._store, path)

    @is_torn_down
    def load_environ(self, prefix: str = "APP_", environ: Optional[Mapping[str, str]] = None) -> None:
        with self._lock:
            loaders.load_environ(self._store, prefix, environ)

    @is_torn_down
    def load_application_files(self, name: str = "application") -> List[Path]:
        """Locate ``<name>.<suffix>`` files under ``app.config.locations`` and load them."""
        with self._lock:
            locator = self._binder.bind(loaders.FileResourceLocator)
            found = loaders.load_application_files(self._store, locator, name)
            logger.info("Loaded %d application files", len(found))
            return found

    @is_torn_down
    def get_property(self, key: str, default: str = "") -> str:
        return self._store.get(key, default)

    @is_torn_down
    def has_property(self, key: str) -> bool:
        return self._store.has(key)

    @is_torn_down
    def bind(self, tp: Any, tag: str = "${ROOT}", **kwargs: Any) -> Any:
        return self._binder.bind(tp, tag, **kwargs)

    # registration
    @is_torn_down
    def register_converter(self, tp: type, fn: Converter, override: bool = False) -> None:
        with self._lock:
            self._guard.ensure_unlocked("register converter")
            self._registries.converters.register(tp, fn, override)

    @is_torn_down
    def register_splitter(self, name: str, fn: Splitter, override: bool = False) -> None:
        with self._lock:
            self._guard.ensure_unlocked("register splitter")
            self._registries.splitters.register(name, fn, override)

    @is_torn_down
    def register_validator(self, name: str, fn: ValidatorProtocol, override: bool = False) -> None:
        with self._lock:
            self._guard.ensure_unlocked("register validator")
            self._registries.validators.register(name, fn, override)

    @is_torn_down
    def register_bean(self, name: str, bean: Any, override: bool = False) -> None:
        with self._lock:
            self._beans.register(name, bean, override)

    @is_torn_down
    def configer(self, name: str, fn: Callable[..., Any], *tags: str) -> Configer:
        """Register a configer; chain conditions and ordering on the returned object."""
        with self._lock:
            self._guard.ensure_unlocked("register configer")
            return self._graph.register(Configer(name, fn, *tags))

    # beans
    @is_torn_down
    def find_beans(self, selector: BeanSelector) -> List[Any]:
        return self._beans.find(selector)

    @is_torn_down
    def has_bean(self, selector: BeanSelector) -> bool:
        return len(self._beans.find(selector)) > 0

    # lifecycle
    @is_torn_down
    def refresh(self) -> List[str]:
        """Run the registered configers once, in order. Returns the names that ran."""
        with self._lock:
            if self._guard.is_locked():
                logger.error("refresh() called twice")
                raise ConfigLockedError("context already refreshed")
            self._guard.lock("refreshed")
            logger.info("Refreshing context: configers=%d", len(self._graph))
            executed = self._graph.run(self, self._binder)
            logger.info("Context refreshed: executed=%s", executed)
            return executed

    def close(self) -> None:
        with self._lock:
            self._torn_down = True
            self._store.clear()
            self._beans.clear()
            self._graph.clear()
            logger.info("AppContext closed.")

    def __repr__(self) -> str:
        return (
            f"<AppContext properties={len(self._store)} configers={len(self._graph)} "
            f"refreshed={self.refreshed} closed={self._torn_down}>"
        )

    def __enter__(self) -> "AppContext":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    def __contains__(self, key: str) -> bool:
        return self.has_property(key)

    def __getitem__(self, key: str) -> str:
        if not self.has_property(key):
            raise ConfigNotFoundError(f"property {key!r}: not exist", key=key)
        return self._store.get(key)
