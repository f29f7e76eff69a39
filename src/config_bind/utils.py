from __future__ import annotations

import datetime
import re
from typing import Any, Dict, List, Mapping

from config_bind.exceptions import ConfigSyntaxError

__all__ = [
    "split_key",
    "join_key",
    "index_key",
    "flatten",
    "to_property_string",
    "_redact_for_log",
]

_SEGMENT_RE = re.compile(r"^([^\[\]]+)((?:\[\d+\])*)$")
_INDEX_RE = re.compile(r"\[(\d+)\]")

_SECRET_MARKERS = ("secret", "password", "token", "key", "passwd", "api_key")


def split_key(key: str) -> List[str]:
    """
    Split a property key into path segments.

    ``a.b[0][1].c`` becomes ``["a", "b", "[0]", "[1]", "c"]``. Index segments keep
    their brackets so they never collide with map keys named by digits.
    """
    if key == "":
        return []
    segments: List[str] = []
    for part in key.split("."):
        m = _SEGMENT_RE.match(part.strip())
        if m is None:
            raise ConfigSyntaxError(f"invalid property key {key!r}", key=key)
        segments.append(m.group(1))
        segments.extend(f"[{i}]" for i in _INDEX_RE.findall(m.group(2)))
    return segments


def join_key(prefix: str, name: str) -> str:
    if not prefix:
        return name
    return f"{prefix}.{name}"


def index_key(prefix: str, index: int) -> str:
    return f"{prefix}[{index}]"


def to_property_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime.date, datetime.datetime, datetime.time)):
        return value.isoformat()
    return str(value)


def flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, str]:
    """
    Flatten nested mappings and lists into dotted / bracketed property keys.

    Empty lists flatten to an empty string so that binding yields an empty sequence;
    empty mappings contribute nothing.
    """
    out: Dict[str, str] = {}
    for k, v in data.items():
        _flatten_into(out, join_key(prefix, str(k)), v)
    return out


def _flatten_into(out: Dict[str, str], key: str, value: Any) -> None:
    if isinstance(value, Mapping):
        for k, v in value.items():
            _flatten_into(out, join_key(key, str(k)), v)
    elif isinstance(value, (list, tuple)):
        if not value:
            out[key] = ""
        for i, v in enumerate(value):
            _flatten_into(out, index_key(key, i), v)
    else:
        out[key] = to_property_string(value)


def _redact_for_log(name: str, value: Any) -> str:
    """
    Redact likely secrets in logs.
    """
    lowered = name.lower()
    if any(s in lowered for s in _SECRET_MARKERS):
        return "***"
    try:
        return repr(value)
    except Exception:
        return "<unreprable>"
