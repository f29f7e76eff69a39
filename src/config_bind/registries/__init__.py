from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from config_bind.expressions import ExpressionEvaluatorProtocol, SimpleEvalEvaluator
from config_bind.validation.builtins import register_builtin_validators

from .base import NamedRegistry, Registry
from .converters import (
    Converter,
    ConverterRegistry,
    parse_date,
    parse_datetime,
    parse_duration,
    register_builtin_converters,
)
from .splitters import Splitter, SplitterRegistry, split_comma
from .validators import ValidatorRegistry

logger = logging.getLogger("config_bind.registries")
logger.addHandler(logging.NullHandler())

__all__ = [
    "Registry",
    "NamedRegistry",
    "Converter",
    "ConverterRegistry",
    "Splitter",
    "SplitterRegistry",
    "ValidatorRegistry",
    "Registries",
    "default_registries",
    "parse_duration",
    "parse_datetime",
    "parse_date",
    "split_comma",
]


@dataclass
class Registries:
    """The converter, splitter and validator registries one binder works against."""

    converters: ConverterRegistry = field(default_factory=ConverterRegistry)
    splitters: SplitterRegistry = field(default_factory=SplitterRegistry)
    validators: ValidatorRegistry = field(default_factory=ValidatorRegistry)

    def copy(self) -> "Registries":
        return Registries(
            converters=self.converters.copy(),
            splitters=self.splitters.copy(),
            validators=self.validators.copy(),
        )


def default_registries(
    evaluator: Optional[ExpressionEvaluatorProtocol] = None,
) -> Registries:
    """Return a fresh bundle seeded with the built-in converters and validators."""
    regs = Registries()
    register_builtin_converters(regs.converters)
    register_builtin_validators(regs.validators, evaluator or SimpleEvalEvaluator())
    logger.debug(
        "default registries: converters=%d splitters=%d validators=%d",
        len(regs.converters),
        len(regs.splitters),
        len(regs.validators),
    )
    return regs
