from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

from config_bind.exceptions import ConfigSyntaxError

__all__ = ["ParsedTag", "parse_tag", "BindTarget", "ROOT_KEY", "ANONYMOUS_KEY"]

# "${ROOT}" binds the whole store at the current path; "${}" binds a reserved key.
ROOT_KEY = "ROOT"
ANONYMOUS_KEY = "ANONYMOUS"

_EMPTY: Mapping[str, str] = MappingProxyType({})


@dataclass(frozen=True)
class ParsedTag:
    """A value tag ``${key:=default}||splitter``."""

    key: str
    default: str = ""
    has_default: bool = False
    splitter: str = ""

    def __str__(self) -> str:
        s = "${" + self.key
        if self.has_default:
            s += ":=" + self.default
        s += "}"
        if self.splitter:
            s += "||" + self.splitter
        return s


def parse_tag(tag: str) -> ParsedTag:
    i = tag.rfind("||")
    j = tag.rfind("}")
    k = tag.find("${")
    if i == 0 or j <= 0 or k < 0:
        raise ConfigSyntaxError(f"parse tag {tag!r} error: invalid syntax")
    splitter = tag[i + 2 :].strip() if i > j else ""
    key, sep, default = tag[k + 2 : j].partition(":=")
    return ParsedTag(key=key, default=default, has_default=bool(sep), splitter=splitter)


@dataclass(frozen=True)
class BindTarget:
    """
    Where a value is bound from and reported as.

    ``key`` is the full property key, ``path`` the diagnostic path through the
    target type. ``validate`` holds the validator tags of the field being bound and
    ``items`` the element-level validator tags of a container field.
    """

    key: str = ""
    path: str = ""
    tag: ParsedTag = ParsedTag(key="")
    validate: Mapping[str, str] = field(default_factory=lambda: _EMPTY)
    items: Mapping[str, str] = field(default_factory=lambda: _EMPTY)

    def bind_tag(
        self,
        tag: str,
        validate: Mapping[str, str] = _EMPTY,
        items: Mapping[str, str] = _EMPTY,
    ) -> "BindTarget":
        parsed = parse_tag(tag)
        if parsed.key == ROOT_KEY:
            parsed = replace(parsed, key="")
        elif parsed.key == "":
            parsed = replace(parsed, key=ANONYMOUS_KEY)
        key = self.key
        if key == "":
            key = parsed.key
        elif parsed.key != "":
            key = f"{key}.{parsed.key}"
        return replace(self, key=key, tag=parsed, validate=validate, items=items)
