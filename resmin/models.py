"""Data models used throughout the resource pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping


class ResourceKind(enum.Enum):
    """Classification assigned to each scanned file."""

    HTML = "html"
    CSS = "css"
    JS = "js"
    OTHER = "other"
    EXCLUDED = "excluded"


@dataclass(frozen=True)
class Resource:
    """A single file found under the source directory."""

    source_path: Path
    relative_path: Path
    basename: str
    extension: str
    kind: ResourceKind


@dataclass(frozen=True)
class MintedArtifact:
    """Minified content of a leaf asset along with its minted basename."""

    resource: Resource
    minted_basename: str
    minted_bytes: bytes


@dataclass
class PipelineResult:
    """Outputs and timing details for a pipeline run."""

    assets: List[Path] = field(default_factory=list)
    pages: List[Path] = field(default_factory=list)
    registry: Mapping[str, str] = field(default_factory=dict)
    skipped: int = 0
    ignored: int = 0
    asset_seconds: float = 0.0
    page_seconds: float = 0.0

    @property
    def outputs(self) -> List[Path]:
        return [*self.assets, *self.pages]
