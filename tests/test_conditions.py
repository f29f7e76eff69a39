import pytest

from config_bind.beans import SimpleBeanRegistry
from config_bind.conditions import (
    Conditional,
    EvaluationContext,
    MissingPropertyCondition,
    PropertyCondition,
)
from config_bind.exceptions import ConfigExpressionError
from config_bind.store import PropertyStore


class Database:
    pass


class Cache:
    pass


@pytest.fixture
def ctx():
    beans = SimpleBeanRegistry()
    beans.register("db", Database())
    store = PropertyStore(
        {"feature": {"on": True, "level": "3", "name": "fast"}, "empty": ""}
    )
    return EvaluationContext(store, beans, profiles=("dev", "Local"))


def test_empty_conditional_is_true(ctx):
    assert Conditional().matches(ctx) is True


def test_property_and_missing_property(ctx):
    assert Conditional().on_property("feature.on").matches(ctx)
    assert Conditional().on_property("feature").matches(ctx)
    assert not Conditional().on_property("nope").matches(ctx)
    assert Conditional().on_missing_property("nope").matches(ctx)
    assert not Conditional().on_missing_property("empty").matches(ctx)


@pytest.mark.parametrize(
    "has_x,has_y,expected",
    [(True, False, True), (True, True, False), (False, False, False), (False, True, False)],
)
def test_property_and_missing_property_chain(has_x, has_y, expected):
    values = {}
    if has_x:
        values["x"] = "1"
    if has_y:
        values["y"] = "1"
    cond = Conditional().on_property("x").and_().on_missing_property("y")
    assert cond.matches(EvaluationContext(PropertyStore(values))) is expected


def test_property_value_equality(ctx):
    assert Conditional().on_property_value("feature.name", "fast").matches(ctx)
    assert not Conditional().on_property_value("feature.name", "slow").matches(ctx)
    assert Conditional().on_property_value("feature.on", True).matches(ctx)
    assert Conditional().on_property_value("feature.level", 3).matches(ctx)
    assert not Conditional().on_property_value("absent", "").matches(ctx)


def test_property_value_expression(ctx):
    assert Conditional().on_property_value("feature.level", "expr:int(value) > 2").matches(ctx)
    assert not Conditional().on_property_value("feature.level", "expr:value == '4'").matches(ctx)
    with pytest.raises(ConfigExpressionError):
        Conditional().on_property_value("feature.level", "expr:value").matches(ctx)


def test_bean_conditions(ctx):
    assert Conditional().on_bean("db").matches(ctx)
    assert Conditional().on_bean(Database).matches(ctx)
    assert not Conditional().on_bean(Cache).matches(ctx)
    assert Conditional().on_missing_bean("cache").matches(ctx)
    assert not Conditional().on_missing_bean(Database).matches(ctx)


def test_bean_conditions_without_registry():
    ctx = EvaluationContext(PropertyStore())
    assert Conditional().on_missing_bean("db").matches(ctx)
    assert not Conditional().on_bean("db").matches(ctx)


def test_expression_condition(ctx):
    assert Conditional().on_expression("has('feature.on') and prop('feature.level') == '3'").matches(ctx)
    assert Conditional().on_expression("props['feature.name'] == 'fast'").matches(ctx)
    assert Conditional().on_expression("'dev' in profiles").matches(ctx)
    assert Conditional().on_expression("prop('absent', 'd') == 'd'").matches(ctx)
    with pytest.raises(ConfigExpressionError):
        Conditional().on_expression("prop('feature.level')").matches(ctx)


def test_profile_condition_case_insensitive(ctx):
    assert Conditional().on_profile("DEV").matches(ctx)
    assert Conditional().on_profile("local").matches(ctx)
    assert not Conditional().on_profile("prod").matches(ctx)


def test_function_and_nested_conditions(ctx):
    assert Conditional().on_matches(lambda c: c.properties.has("feature")).matches(ctx)
    inner = Conditional().on_property("nope").or_().on_profile("dev")
    assert Conditional().on_condition(inner).matches(ctx)
    assert not Conditional().on_condition_not(inner).matches(ctx)
    assert Conditional().on_condition_not(PropertyCondition("nope")).matches(ctx)


def test_or_operator(ctx):
    assert Conditional().on_property("nope").or_().on_property("feature").matches(ctx)
    assert not Conditional().on_property("nope").or_().on_property("nada").matches(ctx)


def test_left_fold_order_without_precedence(ctx):
    # (true or false) and false == false, while true or (false and false) would be true
    cond = (
        Conditional()
        .on_property("feature")
        .or_()
        .on_property("nope")
        .and_()
        .on_property("nada")
    )
    assert cond.matches(ctx) is False


def test_default_operator_is_and(ctx):
    cond = Conditional().on_property("feature").on_property("nope")
    assert cond.matches(ctx) is False


def test_short_circuit_skips_unneeded_conditions(ctx):
    calls = []

    def record(c):
        calls.append(1)
        return True

    Conditional().on_property("nope").and_().on_matches(record).matches(ctx)
    Conditional().on_property("feature").or_().on_matches(record).matches(ctx)
    assert calls == []


def test_malformed_conditionals(ctx):
    with pytest.raises(ConfigExpressionError):
        Conditional().and_()
    with pytest.raises(ConfigExpressionError):
        Conditional().on_property("x").and_().or_()
    with pytest.raises(ConfigExpressionError):
        Conditional().on_property("x").or_().matches(ctx)
    with pytest.raises(ConfigExpressionError):
        Conditional().on_condition("not a condition")  # type: ignore[arg-type]
    with pytest.raises(ConfigExpressionError):
        Conditional().on_matches(42)  # type: ignore[arg-type]


def test_missing_property_condition_direct(ctx):
    assert MissingPropertyCondition("nope").matches(ctx)
