"""Writing minified resources into the mirrored target tree."""

from __future__ import annotations

import logging
from pathlib import Path

from .config import MinifyConfig
from .errors import ResourceIOError
from .models import Resource

logger = logging.getLogger("resmin")


def output_path(config: MinifyConfig, resource: Resource, basename: str) -> Path:
    """Mirror the resource's directory under the target and append ``basename``."""
    return config.target_directory / resource.relative_path.parent / basename


def read_resource(resource: Resource) -> bytes:
    try:
        return resource.source_path.read_bytes()
    except OSError as exc:
        raise ResourceIOError(
            f"Failed to read {resource.source_path}: {exc}", resource.source_path
        ) from exc


def emit(config: MinifyConfig, resource: Resource, basename: str, content: bytes) -> Path:
    """Write ``content`` for ``resource`` under ``basename``, overwriting any file."""
    destination = output_path(config, resource, basename)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(content)
    except OSError as exc:
        raise ResourceIOError(f"Failed to write {destination}: {exc}", destination) from exc
    logger.debug("Wrote %s (%d bytes)", destination, len(content))
    return destination
