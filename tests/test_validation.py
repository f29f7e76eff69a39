from typing import Any

import pytest

from config_bind.exceptions import ConfigExpressionError, ConfigValidationError
from config_bind.expressions import SimpleEvalEvaluator
from config_bind.registries import ValidatorRegistry
from config_bind.validation import (
    ExprValidator,
    FieldValidator,
    ValidatorProtocol,
    max_validator,
    min_validator,
    pattern_validator,
    register_builtin_validators,
)


@pytest.fixture
def validator():
    reg = ValidatorRegistry()
    register_builtin_validators(reg, SimpleEvalEvaluator())
    return FieldValidator(reg)


def test_validate_value_passes(validator):
    validator.validate_value({"min": "1", "max": "10"}, 5, key="n", path="Cfg.n")
    validator.validate_value({}, object())


def test_validate_value_failure_names_tag_and_value(validator):
    with pytest.raises(ConfigValidationError) as exc:
        validator.validate_value({"max": "10"}, 11, key="n", path="Cfg.n")
    err = exc.value
    assert err.path == "Cfg.n"
    assert err.key == "n"
    assert err.value == 11
    assert "max" in err.errors["Cfg.n"] and "11" in err.errors["Cfg.n"]


def test_validate_value_tag_names_are_case_insensitive(validator):
    with pytest.raises(ConfigValidationError):
        validator.validate_value({"MIN": "3"}, 2, path="x")


def test_validate_value_wraps_validator_exceptions():
    reg = ValidatorRegistry()

    def broken(tag: str, value: Any) -> bool:
        raise RuntimeError("boom")

    reg.register("broken", broken)
    with pytest.raises(ConfigValidationError) as exc:
        FieldValidator(reg).validate_value({"broken": ""}, 1, path="p")
    assert "boom" in exc.value.errors["p"]


def test_validate_value_unknown_tag_is_ignored(validator, caplog):
    caplog.set_level("DEBUG", logger="config_bind.validation")
    validator.validate_value({"unknown": "x"}, 1, path="p")
    assert any("No validator registered" in r.getMessage() for r in caplog.records)


def test_min_max_measure_sized_values():
    assert min_validator("2", "ab")
    assert not min_validator("3", "ab")
    assert max_validator("2", [1, 2])
    assert not max_validator("0x1", [1, 2])
    assert min_validator("1.5", 2)


def test_pattern_validator():
    assert pattern_validator(r"^\d+$", 123)
    assert not pattern_validator(r"^\d+$", "12a")


def test_expr_validator_binds_value():
    v = ExprValidator(SimpleEvalEvaluator())
    assert v("value > 3", 4)
    assert not v("value > 3", 2)
    assert v("len(value) == 2", ["a", "b"])
    with pytest.raises(ConfigExpressionError):
        v("value + 1", 1)


def test_validator_protocol():
    def sample(tag: str, value: Any) -> bool:
        return True

    assert isinstance(sample, ValidatorProtocol)
    assert isinstance(min_validator, ValidatorProtocol)
