from config_bind.validation.base import FieldValidator
from config_bind.validation.builtins import (
    ExprValidator,
    max_validator,
    min_validator,
    pattern_validator,
    register_builtin_validators,
)
from config_bind.validation.protocol import ValidatorProtocol

__all__ = [
    "FieldValidator",
    "ValidatorProtocol",
    "ExprValidator",
    "min_validator",
    "max_validator",
    "pattern_validator",
    "register_builtin_validators",
]
