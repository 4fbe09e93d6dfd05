"""Custom exception hierarchy for txchain."""

from __future__ import annotations

from pathlib import Path


class TxchainError(Exception):
    """Base error for the txchain package."""


class ConfigError(TxchainError):
    """Raised when a configuration file fails validation."""

    def __init__(self, path: Path, message: str):
        self.path = Path(path)
        self.message = message
        super().__init__(f"{self.path.name}: {self.message}")
