from typing import Any, List, Mapping, Protocol

from typing_extensions import runtime_checkable


@runtime_checkable
class PropertySourceProtocol(Protocol):
    def has(self, key: str) -> bool: ...

    def get(self, key: str, default: str = "") -> str: ...

    def sub_keys(self, prefix: str) -> List[str]: ...


@runtime_checkable
class PropertyLoaderProtocol(Protocol):
    def load(self) -> Mapping[str, Any]: ...
