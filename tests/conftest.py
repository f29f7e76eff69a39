# python
import pytest

from config_bind.binder import TypeBinder
from config_bind.registries import default_registries
from config_bind.store import PropertyStore


@pytest.fixture
def store():
    return PropertyStore(
        {
            "server": {"host": "localhost", "port": 8080, "debug": True},
            "app": {"name": "demo", "greeting": "hello ${app.name}"},
        }
    )


@pytest.fixture
def registries():
    return default_registries()


@pytest.fixture
def binder(store, registries):
    return TypeBinder(store, registries)


@pytest.fixture
def make_binder(registries):
    def _make(values):
        return TypeBinder(PropertyStore(values), registries)

    return _make
