"""Exceptions raised by the resource pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ResminError(Exception):
    """Base class for fatal pipeline failures."""


class ConfigurationError(ResminError):
    """Raised for invalid configuration values such as a malformed pattern."""


class ResourceIOError(ResminError):
    """Raised when a source cannot be read or an output cannot be written."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class MinificationError(ResminError):
    """Raised when a minifier strategy fails on its input."""

    def __init__(self, message: str, path: Optional[Path] = None, kind: str = "") -> None:
        super().__init__(message)
        self.path = path
        self.kind = kind
