from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from config_bind.exceptions import ConfigSourceError
from config_bind.shapes import prop
from config_bind.store.manager import PropertyStore

logger = logging.getLogger("config_bind.loaders")
logger.addHandler(logging.NullHandler())

__all__ = [
    "YamlFileLoader",
    "TomlFileLoader",
    "PropertiesFileLoader",
    "EnvironLoader",
    "loader_for",
    "load_file",
    "FileResourceLocator",
    "load_application_files",
    "load_yaml",
    "load_toml",
    "load_properties",
    "load_environ",
    "SUPPORTED_SUFFIXES",
]

SUPPORTED_SUFFIXES = (".properties", ".yaml", ".yml", ".toml")


class YamlFileLoader:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> Mapping[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigSourceError(f"Cannot read {self.path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigSourceError(f"Invalid YAML syntax in {self.path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigSourceError(
                f"YAML root of {self.path} must be a mapping, got {type(data).__name__}"
            )
        return data

    def __repr__(self) -> str:
        return f"YamlFileLoader({str(self.path)!r})"


class TomlFileLoader:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> Mapping[str, Any]:
        try:
            with self.path.open("rb") as f:
                return tomllib.load(f)
        except OSError as e:
            raise ConfigSourceError(f"Cannot read {self.path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigSourceError(f"Invalid TOML syntax in {self.path}: {e}") from e

    def __repr__(self) -> str:
        return f"TomlFileLoader({str(self.path)!r})"


class PropertiesFileLoader:
    """
    Java-style ``.properties`` reader.

    Lines hold ``key=value`` or ``key: value``; ``#`` and ``!`` start comments and a
    trailing backslash continues the value on the next line.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> Mapping[str, Any]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigSourceError(f"Cannot read {self.path}: {e}") from e
        return parse_properties(text)

    def __repr__(self) -> str:
        return f"PropertiesFileLoader({str(self.path)!r})"


def parse_properties(text: str) -> Dict[str, str]:
    out: Dict[str, str] = {}
    pending = ""
    for raw in text.splitlines():
        line = raw.strip() if not pending else raw.lstrip()
        if not pending and (not line or line[0] in "#!"):
            continue
        if line.endswith("\\"):
            pending += line[:-1]
            continue
        line = pending + line
        pending = ""
        seps = [i for i in (line.find("="), line.find(":")) if i >= 0]
        if not seps:
            out[line.strip()] = ""
            continue
        i = min(seps)
        out[line[:i].strip()] = line[i + 1 :].strip()
    if pending:
        raise ConfigSourceError(f"Dangling line continuation: {pending!r}")
    return out


class EnvironLoader:
    """
    Map prefixed environment variables onto dotted keys.

    ``APP_SERVER_PORT=80`` with prefix ``APP_`` becomes ``server.port=80``.
    """

    def __init__(self, prefix: str = "APP_", environ: Optional[Mapping[str, str]] = None) -> None:
        self.prefix = prefix
        self.environ = os.environ if environ is None else environ

    def load(self) -> Mapping[str, Any]:
        out: Dict[str, str] = {}
        for name in sorted(self.environ):
            if not name.startswith(self.prefix) or name == self.prefix:
                continue
            key = name[len(self.prefix) :].lower().replace("_", ".")
            out[key] = self.environ[name]
        logger.debug("EnvironLoader prefix=%r matched=%d", self.prefix, len(out))
        return out


def loader_for(path: Path | str):
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return YamlFileLoader(p)
    if suffix == ".toml":
        return TomlFileLoader(p)
    if suffix == ".properties":
        return PropertiesFileLoader(p)
    raise ConfigSourceError(f"Unsupported property file format: {p.suffix!r}")


def load_file(store: PropertyStore, path: Path | str) -> None:
    store.load(loader_for(path))
    logger.info("Loaded properties from %s", path)


def load_yaml(store: PropertyStore, path: Path | str) -> None:
    store.load(YamlFileLoader(path))


def load_toml(store: PropertyStore, path: Path | str) -> None:
    store.load(TomlFileLoader(path))


def load_properties(store: PropertyStore, path: Path | str) -> None:
    store.load(PropertiesFileLoader(path))


def load_environ(
    store: PropertyStore, prefix: str = "APP_", environ: Optional[Mapping[str, str]] = None
) -> None:
    store.load(EnvironLoader(prefix, environ))


@dataclass
class FileResourceLocator:
    """Finds property files across the configured locations, in location order."""

    config_locations: List[str] = prop(
        "${app.config.locations:=config/}", default_factory=lambda: ["config/"]
    )

    def locate(self, filename: str) -> List[Path]:
        found: List[Path] = []
        for location in self.config_locations:
            candidate = Path(location) / filename
            if candidate.is_file():
                found.append(candidate)
        return found


def load_application_files(
    store: PropertyStore, locator: FileResourceLocator, name: str = "application"
) -> List[Path]:
    """Load every ``<name><suffix>`` file the locator finds; later files override earlier ones."""
    loaded: List[Path] = []
    for suffix in SUPPORTED_SUFFIXES:
        for path in locator.locate(name + suffix):
            load_file(store, path)
            loaded.append(path)
    return loaded
