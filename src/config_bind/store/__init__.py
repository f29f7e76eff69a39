from config_bind.store.adaptors import PropertyLoaderProtocol, PropertySourceProtocol
from config_bind.store.loaders import (
    EnvironLoader,
    FileResourceLocator,
    PropertiesFileLoader,
    TomlFileLoader,
    YamlFileLoader,
    load_application_files,
    load_environ,
    load_file,
    load_properties,
    load_toml,
    load_yaml,
    loader_for,
)
from config_bind.store.manager import PropertyStore

__all__ = [
    "PropertyStore",
    "PropertySourceProtocol",
    "PropertyLoaderProtocol",
    "YamlFileLoader",
    "TomlFileLoader",
    "PropertiesFileLoader",
    "EnvironLoader",
    "FileResourceLocator",
    "load_file",
    "loader_for",
    "load_application_files",
    "load_yaml",
    "load_toml",
    "load_properties",
    "load_environ",
]
