from __future__ import annotations

from typing import Callable, List

from .base import NamedRegistry

Splitter = Callable[[str], List[str]]


class SplitterRegistry(NamedRegistry[Splitter]):
    """Named strategies that split one delimited string into sequence elements."""

    kind = "splitter"


def split_comma(s: str) -> List[str]:
    return [part.strip() for part in s.split(",")]
