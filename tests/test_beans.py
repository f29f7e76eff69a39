import pytest

from config_bind.beans import BeanRegistryProtocol, SimpleBeanRegistry
from config_bind.exceptions import ConfigDuplicateError, ConfigRegistrationError


class Base:
    pass


class Child(Base):
    pass


def test_register_and_find_by_name_and_type():
    beans = SimpleBeanRegistry()
    base, child = Base(), Child()
    beans.register("base", base)
    beans.register("child", child)
    assert beans.find("child") == [child]
    assert beans.find("nope") == []
    assert beans.find(Base) == [base, child]
    assert beans.find(Child) == [child]
    assert isinstance(beans, BeanRegistryProtocol)
    assert "base" in beans and len(beans) == 2
    assert list(beans) == ["base", "child"]


def test_register_duplicates_and_bad_names():
    beans = SimpleBeanRegistry()
    beans.register("a", 1)
    with pytest.raises(ConfigDuplicateError):
        beans.register("a", 2)
    beans.register("a", 3, override=True)
    assert beans.find("a") == [3]
    with pytest.raises(ConfigRegistrationError):
        beans.register(" ", 1)


def test_find_rejects_bad_selector():
    with pytest.raises(ConfigRegistrationError):
        SimpleBeanRegistry().find(42)  # type: ignore[arg-type]
