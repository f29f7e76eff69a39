from dataclasses import dataclass
from typing import List

import pytest

from config_bind import AppContext
from config_bind.exceptions import (
    ConfigLockedError,
    ConfigNotFoundError,
    ConfigTornDownError,
    ConfigValidationError,
)
from config_bind.shapes import prop


@dataclass
class Http:
    port: int = prop("${http.port:=8080}", min="1")
    hosts: List[str] = prop("${http.hosts:=localhost}")


class Metrics:
    pass


@pytest.fixture
def ctx():
    c = AppContext({"http": {"port": "9000"}, "app": {"profiles": {"active": "dev, test"}}})
    yield c
    c.close()


def test_context_property_access(ctx):
    assert ctx.get_property("http.port") == "9000"
    assert ctx.has_property("http")
    assert "http.port" in ctx
    assert ctx["http.port"] == "9000"
    with pytest.raises(ConfigNotFoundError):
        ctx["missing"]


def test_context_set_and_update(ctx):
    ctx.set_property("a.b", 1)
    ctx.update({"c": {"d": [1, 2]}})
    assert ctx.get_property("a.b") == "1"
    assert ctx.bind(List[int], "${c.d}") == [1, 2]


def test_context_bind_dataclass(ctx):
    assert ctx.bind(Http) == Http(port=9000, hosts=["localhost"])


def test_context_profiles(ctx):
    assert ctx.profiles == ["dev", "test"]
    assert AppContext().profiles == []


def test_context_register_validator_and_converter(ctx):
    ctx.register_validator("even", lambda tag, v: v % 2 == 0)

    @dataclass
    class Even:
        n: int = prop("${n:=3}", even="")

    with pytest.raises(ConfigValidationError):
        ctx.bind(Even)

    ctx.register_converter(Metrics, lambda s: Metrics())
    assert isinstance(ctx.bind(Metrics, "${m:=x}"), Metrics)


def test_context_register_splitter(ctx):
    ctx.register_splitter("pipe", lambda s: s.split("|"))
    ctx.set_property("list", "a|b")
    assert ctx.bind(List[str], "${list}||pipe") == ["a", "b"]


def test_context_beans(ctx):
    m = Metrics()
    ctx.register_bean("metrics", m)
    assert ctx.has_bean("metrics")
    assert ctx.has_bean(Metrics)
    assert ctx.find_beans(Metrics) == [m]
    assert not ctx.has_bean("other")


def test_context_refresh_runs_configers_in_order(ctx):
    calls = []
    ctx.register_bean("metrics", Metrics())
    ctx.configer("second", lambda: calls.append("second")).after("first")
    ctx.configer("first", lambda port: calls.append(port), "${http.port}").on_bean(Metrics)
    ctx.configer("prod_only", lambda: calls.append("prod")).on_profile("prod")
    ctx.configer("dev_only", lambda: calls.append("dev")).on_profile("DEV")

    executed = ctx.refresh()

    assert executed == ["first", "second", "dev_only"]
    assert calls == ["9000", "second", "dev"]
    assert ctx.refreshed


def test_context_refresh_locks_registration(ctx):
    ctx.refresh()
    with pytest.raises(ConfigLockedError):
        ctx.refresh()
    with pytest.raises(ConfigLockedError):
        ctx.configer("late", lambda: None)
    with pytest.raises(ConfigLockedError):
        ctx.register_splitter("late", lambda s: [s])
    ctx.set_property("still.writable", "yes")
    assert ctx.get_property("still.writable") == "yes"


def test_context_close_and_with_block():
    with AppContext({"a": "1"}) as c:
        assert c.get_property("a") == "1"
    assert c.torn_down
    with pytest.raises(ConfigTornDownError):
        c.get_property("a")
    with pytest.raises(ConfigTornDownError):
        c.refresh()


def test_context_load_environ(ctx):
    ctx.load_environ("MYAPP_", {"MYAPP_HTTP_HOSTS": "a,b", "OTHER": "x"})
    assert ctx.bind(Http).hosts == ["a", "b"]
    assert not ctx.has_property("other")


def test_context_load_application_files(tmp_path):
    conf = tmp_path / "conf"
    conf.mkdir()
    (conf / "application.yaml").write_text("http:\n  port: 7000\n", encoding="utf-8")
    (conf / "application.properties").write_text("http.hosts=x,y\n", encoding="utf-8")
    with AppContext({"app": {"config": {"locations": str(conf)}}}) as c:
        found = c.load_application_files()
        assert {p.name for p in found} == {"application.yaml", "application.properties"}
        assert c.bind(Http) == Http(port=7000, hosts=["x", "y"])


def test_context_repr(ctx):
    assert "AppContext" in repr(ctx)
