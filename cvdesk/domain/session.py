"""Operator session with an explicit load/sign-in/sign-out lifecycle.

The session is persisted through a ``StoragePort`` and handed to the app
controller, which only wires workflows for an authenticated gate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .ports import StoragePort, validation_error

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    username: str


class SessionGate:
    """Owns the current ``AuthSession`` and its persisted copy."""

    def __init__(self, storage: StoragePort) -> None:
        self._storage = storage
        self._session: Optional[AuthSession] = None

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def load(self) -> Optional[AuthSession]:
        """Restore a persisted session; unreadable payloads are discarded."""
        try:
            payload = self._storage.load_session()
        except (OSError, ValueError) as exc:
            LOGGER.warning("Discarding unreadable session: %s", exc)
            payload = None
        username = ""
        if isinstance(payload, dict):
            user = payload.get("user")
            if isinstance(user, dict):
                username = str(user.get("username") or "").strip()
        self._session = AuthSession(username) if username else None
        return self._session

    def sign_in(self, username: str) -> AuthSession:
        normalized = (username or "").strip()
        if not normalized:
            raise validation_error("USERNAME_REQUIRED", "Username is required.")
        self._session = AuthSession(normalized)
        self._storage.save_session({"user": {"username": normalized}})
        LOGGER.info("Signed in as %s", normalized)
        return self._session

    def sign_out(self) -> None:
        self._session = None
        self._storage.clear_session()


__all__ = ["AuthSession", "SessionGate"]
