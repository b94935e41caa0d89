"""Original-to-minted basename registry and HTML reference rewriting."""

from __future__ import annotations

import logging
import re
import threading
from types import MappingProxyType
from typing import Dict, Mapping, Optional

logger = logging.getLogger("resmin")


class RewriteRegistry:
    """Mapping from original basenames to minted basenames.

    Entries are recorded while leaf assets are minified. Once sealed the
    registry is read-only and can be handed to HTML rewriting.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, str] = {}
        self._lock = threading.Lock()
        self._sealed = False

    def record(self, original: str, minted: str) -> None:
        with self._lock:
            if self._sealed:
                raise RuntimeError(f"Cannot record {original!r}: registry is sealed")
            previous = self._entries.get(original)
            if previous is not None and previous != minted:
                logger.warning(
                    "Duplicate resource name %s: %s replaces %s",
                    original,
                    minted,
                    previous,
                )
            self._entries[original] = minted

    def lookup(self, original: str) -> Optional[str]:
        return self._entries.get(original)

    def snapshot(self) -> Mapping[str, str]:
        """Return a read-only copy of the current entries."""
        with self._lock:
            return MappingProxyType(dict(self._entries))

    def seal(self) -> None:
        with self._lock:
            self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, original: object) -> bool:
        return original in self._entries


def rewrite_html(text: str, registry: Mapping[str, str]) -> str:
    """Replace every registered original basename in ``text``.

    This is plain substring substitution, not HTML parsing: matches inside
    text content or unrelated attributes are rewritten as well. Longer
    basenames take precedence over shorter ones they contain, and replaced
    text is not scanned again.
    """
    if not registry:
        return text
    originals = sorted(registry, key=lambda name: (-len(name), name))
    pattern = re.compile("|".join(re.escape(name) for name in originals))
    return pattern.sub(lambda match: registry[match.group(0)], text)
