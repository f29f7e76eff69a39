"""
config_bind: typed property binding and ordered, conditional configers.

- Loads properties from YAML, TOML, .properties files and the environment into one store.
- Expands ${key:=default} placeholders and binds values into dataclasses, lists and dicts.
- Converts and validates every bound value through explicit, per-context registries.
- Orders configers by before/after constraints and gates each on composable conditions.
"""

from __future__ import annotations

from config_bind.beans import BeanRegistryProtocol, SimpleBeanRegistry
from config_bind.binder import TypeBinder
from config_bind.conditions import (
    ConditionContextProtocol,
    Conditional,
    EvaluationContext,
)
from config_bind.configer import Configer
from config_bind.context import AppContext
from config_bind.exceptions import (
    ConfigBindError,
    ConfigConflictError,
    ConfigConversionError,
    ConfigCycleError,
    ConfigDuplicateError,
    ConfigError,
    ConfigExpressionError,
    ConfigLockedError,
    ConfigNotFoundError,
    ConfigRegistrationError,
    ConfigSourceError,
    ConfigSyntaxError,
    ConfigTornDownError,
    ConfigUnsupportedError,
    ConfigValidationError,
)
from config_bind.expressions import ExpressionEvaluatorProtocol, SimpleEvalEvaluator
from config_bind.graph import ConfigerGraph, sort_configers
from config_bind.registries import Registries, default_registries
from config_bind.resolver import PlaceholderResolver
from config_bind.shapes import describe, prop
from config_bind.store import (
    FileResourceLocator,
    PropertySourceProtocol,
    PropertyStore,
    load_application_files,
    load_environ,
    load_file,
    load_properties,
    load_toml,
    load_yaml,
)
from config_bind.tags import ParsedTag, parse_tag
from config_bind.validation import ValidatorProtocol

__all__ = [
    "AppContext",
    "PropertyStore",
    "PropertySourceProtocol",
    "PlaceholderResolver",
    "TypeBinder",
    "Registries",
    "default_registries",
    "describe",
    "prop",
    "ParsedTag",
    "parse_tag",
    "Conditional",
    "EvaluationContext",
    "ConditionContextProtocol",
    "Configer",
    "ConfigerGraph",
    "sort_configers",
    "BeanRegistryProtocol",
    "SimpleBeanRegistry",
    "ExpressionEvaluatorProtocol",
    "SimpleEvalEvaluator",
    "ValidatorProtocol",
    "FileResourceLocator",
    "load_file",
    "load_yaml",
    "load_toml",
    "load_properties",
    "load_environ",
    "load_application_files",
    "ConfigError",
    "ConfigBindError",
    "ConfigNotFoundError",
    "ConfigSyntaxError",
    "ConfigConversionError",
    "ConfigUnsupportedError",
    "ConfigValidationError",
    "ConfigCycleError",
    "ConfigConflictError",
    "ConfigSourceError",
    "ConfigDuplicateError",
    "ConfigRegistrationError",
    "ConfigExpressionError",
    "ConfigLockedError",
    "ConfigTornDownError",
]
