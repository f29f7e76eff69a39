import pytest

from config_bind.exceptions import ConfigNotFoundError, ConfigSyntaxError
from config_bind.resolver import PlaceholderResolver, find_placeholder
from config_bind.store import PropertyStore
from config_bind.tags import BindTarget


@pytest.fixture
def resolver(store):
    return PlaceholderResolver(store)


@pytest.mark.parametrize("s", ["", "plain", "a $ b", "{x}", "$ {y}"])
def test_resolve_string_without_placeholder_is_identity(resolver, s):
    assert resolver.resolve_string(s) == s


def test_find_placeholder_is_leftmost_outermost():
    s = "x${a:=${b}}y${c}"
    assert find_placeholder(s) == (1, 10)
    assert find_placeholder("none") == (-1, -1)


def test_find_placeholder_unbalanced():
    with pytest.raises(ConfigSyntaxError):
        find_placeholder("${a")
    with pytest.raises(ConfigSyntaxError):
        find_placeholder("x ${a:=${b}")


def test_resolve_string_expands_stored_values(resolver):
    assert resolver.resolve_string("http://${server.host}:${server.port}/") == (
        "http://localhost:8080/"
    )


def test_resolve_string_uses_default_when_absent(resolver):
    assert resolver.resolve_string("${missing:=fallback}") == "fallback"
    assert resolver.resolve_string("${missing:=}") == ""


def test_resolve_string_nested_default(resolver):
    assert resolver.resolve_string("${missing:=${server.port}}") == "8080"


def test_resolve_string_many_placeholders():
    resolver = PlaceholderResolver(PropertyStore({"v": "x"}))
    assert resolver.resolve_string("-".join(["${v}"] * 1500)) == "-".join(["x"] * 1500)


def test_resolve_string_missing_without_default(resolver):
    with pytest.raises(ConfigNotFoundError):
        resolver.resolve_string("${missing}")


def test_resolve_target_expands_value_recursively(resolver):
    target = BindTarget().bind_tag("${app.greeting}")
    assert resolver.resolve(target) == "hello demo"


def test_resolve_target_empty_value_exists():
    resolver = PlaceholderResolver(PropertyStore({"empty": ""}))
    assert resolver.resolve(BindTarget().bind_tag("${empty}")) == ""
    assert resolver.resolve(BindTarget().bind_tag("${empty:=d}")) == "d"


def test_resolve_detects_circular_references():
    resolver = PlaceholderResolver(PropertyStore({"a": "${b}", "b": "${a}"}))
    with pytest.raises(ConfigSyntaxError) as exc:
        resolver.resolve_string("${a}")
    assert "circular" in str(exc.value)
