from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from config_bind.exceptions import ConfigNotFoundError, ConfigSyntaxError
from config_bind.store.adaptors import PropertySourceProtocol
from config_bind.tags import BindTarget

logger = logging.getLogger("config_bind.resolver")
logger.addHandler(logging.NullHandler())

__all__ = ["PlaceholderResolver", "find_placeholder"]


def find_placeholder(s: str) -> Tuple[int, int]:
    """
    Locate the leftmost outermost ``${...}`` span of ``s``.

    Returns ``(start, end)`` with ``end`` the index of the closing brace, or
    ``(-1, -1)`` when ``s`` holds no placeholder.
    """
    count = 0
    start = -1
    n = len(s)
    i = 0
    while i < n:
        c = s[i]
        if c == "$" and i < n - 1 and s[i + 1] == "{":
            if count == 0:
                start = i
            count += 1
        elif c == "}" and count > 0:
            count -= 1
            if count == 0:
                return start, i
        i += 1
    if start < 0:
        return -1, -1
    raise ConfigSyntaxError(f"resolve string {s!r} error: invalid syntax")


class PlaceholderResolver:
    """Expands ``${key:=default}`` references against a property source."""

    def __init__(self, store: PropertySourceProtocol) -> None:
        self._store = store

    def resolve(
        self,
        target: BindTarget,
        props: Optional[PropertySourceProtocol] = None,
        _seen: Tuple[str, ...] = (),
    ) -> str:
        """
        Return the effective string for ``target``: its stored value, else its tag
        default, expanded. ``props`` is where the key itself is looked up;
        references inside the value always resolve against the resolver's store.
        """
        props = self._store if props is None else props
        key = target.key
        val = props.get(key)
        if val != "":
            if key in _seen:
                chain = " -> ".join(_seen + (key,))
                raise ConfigSyntaxError(
                    f"circular property reference {chain}", key=key, path=target.path
                )
            return self.resolve_string(val, _seen + (key,))
        if target.tag.has_default:
            return self.resolve_string(target.tag.default, _seen)
        if props.has(key):
            return ""
        raise ConfigNotFoundError(f"property {key!r}: not exist", key=key, path=target.path)

    def resolve_string(self, s: str, _seen: Tuple[str, ...] = ()) -> str:
        pieces: List[str] = []
        rest = s
        while True:
            start, end = find_placeholder(rest)
            if start < 0:
                break
            inner = BindTarget().bind_tag(rest[start : end + 1])
            logger.debug("Resolving %r in %r", inner.key, s)
            pieces.append(rest[:start])
            pieces.append(self.resolve(inner, _seen=_seen))
            rest = rest[end + 1 :]
        pieces.append(rest)
        return "".join(pieces)
