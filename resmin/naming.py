"""Content-addressed filename generation."""

from __future__ import annotations

import hashlib
import re
from typing import Optional, Tuple

from .errors import ConfigurationError

NAME_TOKEN = "[name]"
EXT_TOKEN = "[ext]"
HASH_TOKEN = "[hash]"
DIGEST_LENGTH = 32

_SIZED_HASH_PATTERN = re.compile(r"\[hash:([^\]]*)\]")
_DECIMAL_PATTERN = re.compile(r"[0-9]+")


def content_digest(content: bytes) -> str:
    """Return the lowercase MD5 hex digest of ``content``.

    MD5 only feeds filename entropy here; it is not used for integrity.
    """
    return hashlib.md5(content, usedforsecurity=False).hexdigest()


def split_basename(basename: str) -> Tuple[str, str]:
    """Split a basename at its last dot into ``(name, ext)``."""
    name, dot, ext = basename.rpartition(".")
    if not dot:
        return basename, ""
    return name, ext


def _sized_hash_token(text: str) -> Optional[Tuple[str, int]]:
    """Find the first ``[hash:N]`` token and return it with its parsed size."""
    match = _SIZED_HASH_PATTERN.search(text)
    if match is None:
        return None
    raw_size = match.group(1)
    if not _DECIMAL_PATTERN.fullmatch(raw_size):
        raise ConfigurationError(
            f"Hash length in {match.group(0)!r} must be a positive integer"
        )
    size = int(raw_size)
    if size == 0:
        raise ConfigurationError(f"Hash length in {match.group(0)!r} must be positive")
    if size > DIGEST_LENGTH:
        raise ConfigurationError(
            f"Hash length in {match.group(0)!r} exceeds the digest length ({DIGEST_LENGTH})"
        )
    return match.group(0), size


def validate_pattern(pattern: str) -> str:
    """Check that ``pattern`` can be interpolated; return it unchanged."""
    if not pattern:
        raise ConfigurationError("Filename pattern must not be empty")
    if "/" in pattern or "\\" in pattern:
        raise ConfigurationError(
            f"Filename pattern {pattern!r} must produce a basename, not a path"
        )
    if HASH_TOKEN not in pattern:
        _sized_hash_token(pattern)
    return pattern


def mint_filename(basename: str, content: bytes, pattern: str) -> str:
    """Interpolate ``pattern`` for a minified resource.

    ``[name]`` and ``[ext]`` come from the original basename. A ``[hash]``
    token takes the full digest of ``content``; otherwise the first
    ``[hash:N]`` form found takes its first N hex characters. Only one hash
    form is substituted per pattern.
    """
    name, ext = split_basename(basename)
    minted = pattern.replace(NAME_TOKEN, name).replace(EXT_TOKEN, ext)

    if HASH_TOKEN in minted:
        return minted.replace(HASH_TOKEN, content_digest(content))

    sized = _sized_hash_token(minted)
    if sized is not None:
        token, size = sized
        minted = minted.replace(token, content_digest(content)[:size])
    return minted
