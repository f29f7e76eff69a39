from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple


class ConfigError(Exception):
    """Base config exception."""


class ConfigBindError(ConfigError):
    """Raised when a property cannot be bound to its target."""

    def __init__(
        self, message: str, *, key: Optional[str] = None, path: Optional[str] = None
    ) -> None:
        self.detail = message
        self.key = key
        self.path = path
        msg = message
        if path:
            msg = f"bind {path} error: {message}"
        if key is not None:
            msg += f" (key: {key!r})"
        super().__init__(msg)


class ConfigNotFoundError(ConfigBindError):
    """Raised when a required property is absent and no default applies."""


class ConfigSyntaxError(ConfigBindError):
    """Raised for malformed tags or unbalanced placeholder braces."""


class ConfigConversionError(ConfigBindError):
    """Raised when a string cannot be converted to the target type."""

    def __init__(
        self,
        message: str,
        *,
        target_type: object = None,
        key: Optional[str] = None,
        path: Optional[str] = None,
    ) -> None:
        self.target_type = target_type
        super().__init__(message, key=key, path=path)


class ConfigUnsupportedError(ConfigBindError):
    """Raised when the target shape cannot be bound, or carries a disallowed default."""


class ConfigValidationError(ConfigError):
    """Raised when validation fails for one or more bound values."""

    def __init__(
        self,
        errors: Dict[str, str],
        key: str | None = None,
        value: object | None = None,
        path: str | None = None,
    ) -> None:
        self.errors = errors
        self.key = key
        self.value = value
        self.path = path
        msg = f"Validation errors: {errors}"
        if key is not None and value is not None:
            msg += f" (key: {key}, value: {value})"
        super().__init__(msg)


class ConfigCycleError(ConfigError):
    """Raised when configer precedence constraints form a cycle."""

    def __init__(self, chain: Iterable[str]) -> None:
        self.chain: Tuple[str, ...] = tuple(chain)
        super().__init__(f"found cycle config: {' -> '.join(self.chain)}")


class ConfigConflictError(ConfigError):
    """Raised when a key would be both a leaf value and a container."""


class ConfigSourceError(ConfigError):
    """Raised when a property source cannot be read or parsed."""


class ConfigDuplicateError(ConfigError):
    """Raised when attempting to register a duplicate entry."""


class ConfigRegistrationError(ConfigError):
    """Raised when a converter, splitter, validator or configer cannot be registered."""


class ConfigExpressionError(ConfigError):
    """Raised when an expression cannot be evaluated or a condition is malformed."""


class ConfigLockedError(ConfigError):
    """Raised when attempting registration after the context has been refreshed."""


class ConfigTornDownError(ConfigError):
    """Raised if operations are attempted after teardown."""
