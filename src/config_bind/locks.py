from __future__ import annotations

import logging

from .exceptions import ConfigLockedError

logger = logging.getLogger("config_bind.locks")
logger.addHandler(logging.NullHandler())


class LockGuard:
    """One-way registration lock: open during startup, closed once refreshed."""

    def __init__(self) -> None:
        self._locked = False
        self._reason = ""

    def lock(self, reason: str = "refreshed") -> None:
        self._locked = True
        self._reason = reason
        logger.debug("Registration locked: %s", reason)

    def ensure_unlocked(self, action: str) -> None:
        if self._locked:
            logger.error("Cannot %s: context already %s", action, self._reason)
            raise ConfigLockedError(f"cannot {action}: context already {self._reason}")

    def is_locked(self) -> bool:
        return self._locked
