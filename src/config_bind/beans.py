from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Protocol, Union

from typing_extensions import runtime_checkable

from config_bind.exceptions import ConfigDuplicateError, ConfigRegistrationError

logger = logging.getLogger("config_bind.beans")
logger.addHandler(logging.NullHandler())

__all__ = ["BeanSelector", "BeanRegistryProtocol", "SimpleBeanRegistry"]

BeanSelector = Union[str, type]


@runtime_checkable
class BeanRegistryProtocol(Protocol):
    def find(self, selector: BeanSelector) -> List[Any]: ...


class SimpleBeanRegistry:
    """In-memory beans looked up by name or by type."""

    def __init__(self) -> None:
        self._beans: Dict[str, Any] = {}

    def register(self, name: str, bean: Any, override: bool = False) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ConfigRegistrationError("bean name must be a non-empty string")
        if not override and name in self._beans:
            logger.error("Bean %r already registered", name)
            raise ConfigDuplicateError(f"bean {name!r} already registered")
        self._beans[name] = bean
        logger.debug("Bean registered: %r (%s)", name, type(bean).__name__)

    def find(self, selector: BeanSelector) -> List[Any]:
        if isinstance(selector, str):
            return [self._beans[selector]] if selector in self._beans else []
        if isinstance(selector, type):
            return [b for b in self._beans.values() if isinstance(b, selector)]
        raise ConfigRegistrationError(f"bean selector must be a name or a type, got {selector!r}")

    def names(self) -> List[str]:
        return list(self._beans)

    def clear(self) -> None:
        self._beans.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._beans

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._beans))

    def __len__(self) -> int:
        return len(self._beans)
