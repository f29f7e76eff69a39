from __future__ import annotations

import datetime
import decimal
import pathlib
import re
from typing import Any, Callable

from config_bind.exceptions import ConfigRegistrationError

from .base import Registry

Converter = Callable[[str], Any]

_DURATION_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


class ConverterRegistry(Registry[type, Converter]):
    """Converters keyed by the exact target type."""

    kind = "converter"

    def _canon(self, key: type) -> type:
        if not isinstance(key, type):
            raise ConfigRegistrationError(f"converter key must be a type, got {key!r}")
        return key


def parse_duration(s: str) -> datetime.timedelta:
    """
    Parse ``1h30m``, ``500ms``, ``-1.5s`` style durations; a bare number means seconds.
    """
    text = s.strip()
    sign = 1
    if text and text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if not text:
        raise ValueError(f"invalid duration {s!r}")
    try:
        return datetime.timedelta(seconds=sign * float(text))
    except ValueError:
        pass
    seconds = 0.0
    pos = 0
    for m in _DURATION_RE.finditer(text):
        if m.start() != pos:
            raise ValueError(f"invalid duration {s!r}")
        seconds += float(m.group(1)) * _DURATION_UNITS[m.group(2)]
        pos = m.end()
    if pos != len(text):
        raise ValueError(f"invalid duration {s!r}")
    return datetime.timedelta(seconds=sign * seconds)


def parse_datetime(s: str) -> datetime.datetime:
    return datetime.datetime.fromisoformat(s.strip())


def parse_date(s: str) -> datetime.date:
    return datetime.date.fromisoformat(s.strip())


def register_builtin_converters(registry: ConverterRegistry) -> None:
    registry.register(datetime.timedelta, parse_duration, override=True)
    registry.register(datetime.datetime, parse_datetime, override=True)
    registry.register(datetime.date, parse_date, override=True)
    registry.register(pathlib.Path, pathlib.Path, override=True)
    registry.register(decimal.Decimal, decimal.Decimal, override=True)
