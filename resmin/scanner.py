"""Source tree enumeration and resource classification."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AbstractSet, Iterator

from .config import MinifyConfig
from .errors import ResourceIOError
from .models import Resource, ResourceKind

logger = logging.getLogger("resmin")

_KINDS_BY_EXTENSION = {
    "html": ResourceKind.HTML,
    "css": ResourceKind.CSS,
    "js": ResourceKind.JS,
}


def extension_of(basename: str) -> str:
    """Return the lowercased text after the last dot, or an empty string."""
    _, dot, ext = basename.rpartition(".")
    return ext.lower() if dot else ""


def classify(basename: str, excluded: AbstractSet[str]) -> ResourceKind:
    """Classify a file by exclusion list first, then by extension."""
    if basename in excluded:
        return ResourceKind.EXCLUDED
    return _KINDS_BY_EXTENSION.get(extension_of(basename), ResourceKind.OTHER)


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


def scan_resources(config: MinifyConfig) -> Iterator[Resource]:
    """Yield every regular file under the source directory as a Resource.

    Files are visited in sorted order. When the target directory sits inside
    the source directory its contents are left out of the scan.
    """
    source = config.source_directory
    if not source.is_dir():
        raise ResourceIOError(f"Source directory does not exist: {source}", source)

    target = config.target_directory
    skip_target = target != source and _is_within(target, source)

    try:
        candidates = sorted(source.rglob("*"))
    except OSError as exc:
        raise ResourceIOError(f"Failed to list {source}: {exc}", source) from exc

    for path in candidates:
        if not path.is_file():
            continue
        if skip_target and _is_within(path, target):
            continue
        basename = path.name
        kind = classify(basename, config.exclude_resources)
        if kind is ResourceKind.EXCLUDED:
            logger.info("Skip resource: %s", basename)
        yield Resource(
            source_path=path,
            relative_path=path.relative_to(source),
            basename=basename,
            extension=extension_of(basename),
            kind=kind,
        )
