"""Application settings read from the environment."""

import os
from typing import Optional


class Settings:
    DATABASE_URL: Optional[str]
    HOST: str
    PORT: int
    DB_CONNECT_TIMEOUT: float

    def __init__(self):
        # An empty DATABASE_URL is treated the same as an unset one
        self.DATABASE_URL = os.getenv("DATABASE_URL") or None
        self.HOST = os.getenv("HOST", "0.0.0.0")
        self.PORT = self._number("PORT", "3000", int)
        self.DB_CONNECT_TIMEOUT = self._number("DB_CONNECT_TIMEOUT", "5", float)
        self._validate()

    @staticmethod
    def _number(name, default, cast):
        raw = os.getenv(name, default)
        try:
            return cast(raw)
        except ValueError:
            raise RuntimeError(f"{name} must be a number, got {raw!r}")

    def _validate(self):
        if not 0 < self.PORT < 65536:
            raise RuntimeError(f"PORT must be between 1 and 65535, got {self.PORT}")
        if self.DB_CONNECT_TIMEOUT <= 0:
            raise RuntimeError("DB_CONNECT_TIMEOUT must be positive")


def get_settings() -> Settings:
    """Read a fresh Settings object from the current environment."""
    return Settings()
