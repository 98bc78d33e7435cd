"""Session accessors that supply bearer tokens to the data client."""

from __future__ import annotations

import os
from typing import Protocol


class Session(Protocol):
    """Capability passed to the data client for authentication."""

    def get_token(self) -> str | None:
        """Return the current bearer token, or None when logged out."""

    def invalidate(self) -> None:
        """Drop the current token after the backend rejected it."""


class StaticSession:
    """In-memory token holder."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token.strip() if token else None

    def get_token(self) -> str | None:
        return self._token or None

    def invalidate(self) -> None:
        self._token = None


class EnvSession:
    """Read the token from an environment variable on every call."""

    def __init__(self, variable: str = "STOCKVIEW_TOKEN") -> None:
        self.variable = variable
        self._invalidated = False

    def get_token(self) -> str | None:
        if self._invalidated:
            return None
        value = os.getenv(self.variable, "").strip()
        return value or None

    def invalidate(self) -> None:
        self._invalidated = True
