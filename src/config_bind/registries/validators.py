from __future__ import annotations

from config_bind.validation.protocol import ValidatorProtocol

from .base import NamedRegistry


class ValidatorRegistry(NamedRegistry[ValidatorProtocol]):
    """
    Validators keyed by the tag name they answer to.

    A field declaring ``expr="value > 0"`` is checked by the validator registered
    under ``expr``, which receives the tag content and the converted value.
    """

    kind = "validator"
