from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional

from config_bind.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from config_bind.registries.validators import ValidatorRegistry

logger = logging.getLogger("config_bind.validation")
logger.addHandler(logging.NullHandler())


class FieldValidator:
    """Runs every registered validator named by a field's validator tags."""

    def __init__(self, registry: ValidatorRegistry) -> None:
        self._registry = registry

    def validate_value(
        self,
        tags: Mapping[str, str],
        value: Any,
        *,
        key: Optional[str] = None,
        path: str = "",
    ) -> None:
        if not tags:
            return
        wanted = {name.strip().lower(): content for name, content in tags.items()}
        for name, fn in self._registry.items():
            if name not in wanted:
                continue
            content = wanted[name]
            try:
                ok = fn(content, value)
            except ConfigValidationError as exc:
                logger.error("Validation error for %s: %s", path, exc.errors)
                raise ConfigValidationError(exc.errors, key, value, path) from exc
            except Exception as exc:
                logger.error("Validator %r failed for %s: %s", name, path, exc)
                raise ConfigValidationError(
                    {path: f"validator {name!r} on {content!r} raised: {exc}"}, key, value, path
                ) from exc
            if ok is False:
                logger.error("Validation failed on %s=%r for %s", name, content, path)
                raise ConfigValidationError(
                    {path: f"validate failed on {name}={content!r} for value {value!r}"},
                    key,
                    value,
                    path,
                )
        for name in wanted:
            if not self._registry.has(name):
                logger.debug("No validator registered for tag %r at %s", name, path)
