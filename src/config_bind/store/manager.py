from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional

from config_bind.exceptions import ConfigConflictError, ConfigSyntaxError
from config_bind.store.adaptors import PropertyLoaderProtocol
from config_bind.utils import _redact_for_log, flatten, split_key

logger = logging.getLogger("config_bind.store")
logger.addHandler(logging.NullHandler())

_Node = Dict[str, Optional["_Node"]]


def _canonical(segments: List[str]) -> str:
    out = ""
    for seg in segments:
        if seg.startswith("["):
            out += seg
        elif out:
            out += "." + seg
        else:
            out = seg
    return out


class PropertyStore:
    """
    Flat ``key -> string`` property storage with a hierarchical index.

    Keys are dotted paths whose segments may carry bracketed indexes
    (``servers[0].host``). A key is either a leaf holding a value or a container
    prefix of other keys, never both. Writes are serialised by an internal lock;
    reads are not guarded, callers must not mutate the store during a bind pass.
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None) -> None:
        self._lock = threading.RLock()
        self._data: Dict[str, str] = {}
        self._tree: _Node = {}
        if values:
            self.update(values)
        logger.debug("PropertyStore init keys=%d", len(self._data))

    def set(self, key: str, value: Any) -> None:
        segments = split_key(key)
        if not segments:
            raise ConfigSyntaxError("property key must not be empty", key=key)
        canon = _canonical(segments)
        text = "" if value is None else str(value)
        with self._lock:
            self._check_conflict(canon, segments)
            node = self._tree
            for seg in segments[:-1]:
                child = node.get(seg)
                if child is None:
                    child = {}
                    node[seg] = child
                node = child
            node[segments[-1]] = None
            self._data[canon] = text
        logger.debug("Store.set key=%r value=%s", canon, _redact_for_log(canon, text))

    def _check_conflict(self, canon: str, segments: List[str]) -> None:
        node = self._tree
        for i, seg in enumerate(segments):
            if seg not in node:
                return
            child = node[seg]
            last = i == len(segments) - 1
            if child is None:
                if last:
                    return
                prefix = _canonical(segments[: i + 1])
                logger.error("Property conflict: %r is a value, cannot hold %r", prefix, canon)
                raise ConfigConflictError(f"property {prefix!r} is a value, cannot hold {canon!r}")
            if last:
                logger.error("Property conflict: %r is a container", canon)
                raise ConfigConflictError(f"property {canon!r} is a container, cannot hold a value")
            node = child

    def update(self, values: Mapping[str, Any]) -> None:
        """Flatten ``values`` (nested mappings and lists allowed) and store every leaf."""
        with self._lock:
            for k, v in flatten(values).items():
                self.set(k, v)

    def load(self, loader: PropertyLoaderProtocol) -> None:
        try:
            loaded = loader.load()
        except Exception as e:
            logger.error("Error loading properties from %r: %s", loader, e)
            raise
        if not isinstance(loaded, Mapping):
            logger.error("Property loader %r did not return a mapping", loader)
            raise ValueError("PropertyLoader.load() must return a mapping")
        self.update(loaded)
        logger.debug("PropertyStore loaded %d top-level keys from %r", len(loaded), loader)

    def _find(self, key: str) -> Any:
        node: Any = self._tree
        for seg in split_key(key):
            if not isinstance(node, dict) or seg not in node:
                return _MISSING
            node = node[seg]
        return node

    def has(self, key: str) -> bool:
        if key in self._data:
            return True
        if key == "":
            return bool(self._tree)
        try:
            return self._find(key) is not _MISSING
        except ConfigSyntaxError:
            return False

    def get(self, key: str, default: str = "") -> str:
        return self._data.get(key, default)

    def sub_keys(self, prefix: str) -> List[str]:
        """
        Return the names one level below ``prefix``; maps sort by name, indexes numerically
        and keep their brackets (``"[0]"``).

        An absent prefix has no sub keys. A prefix that holds a value raises
        ``ConfigConflictError``.
        """
        node = self._tree if prefix == "" else self._find(prefix)
        if node is _MISSING:
            return []
        if node is None:
            raise ConfigConflictError(f"property {prefix!r} is a value, not a container")
        names = [seg for seg in node if not seg.startswith("[")]
        indexes = [int(seg[1:-1]) for seg in node if seg.startswith("[")]
        return sorted(names) + [f"[{i}]" for i in sorted(indexes)]

    def keys(self) -> List[str]:
        return list(self._data.keys())

    def snapshot(self) -> MappingProxyType[str, str]:
        return MappingProxyType(dict(self._data))

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
            self._tree.clear()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._data.keys()))

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"<PropertyStore keys={len(self._data)}>"


_MISSING = object()
