from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class ValidatorProtocol(Protocol):
    def __call__(self, tag: str, value: Any) -> Optional[bool]:  # False or raise on failure
        ...
