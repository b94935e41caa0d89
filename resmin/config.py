"""Configuration objects and constants for the resource pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, Optional

from .errors import ConfigurationError
from .naming import validate_pattern

DEFAULT_FILENAME_PATTERN = "[name]-[hash:6].min.[ext]"
DEFAULT_OUTPUT_DIR = "dist"
PATTERN_ENV_VAR = "RESMIN_FILENAME_PATTERN"


@dataclass(frozen=True)
class MinifyConfig:
    """Settings that control scanning, naming and output of a run."""

    source_directory: Path
    target_directory: Path
    filename_pattern: str = DEFAULT_FILENAME_PATTERN
    exclude_resources: FrozenSet[str] = field(default_factory=frozenset)
    workers: int = 1

    def __post_init__(self) -> None:
        validate_pattern(self.filename_pattern)
        if self.workers < 1:
            raise ConfigurationError(f"workers must be at least 1, got {self.workers}")
        if not isinstance(self.exclude_resources, frozenset):
            object.__setattr__(self, "exclude_resources", frozenset(self.exclude_resources))


def build_config(
    source_directory: Path,
    target_directory: Path,
    filename_pattern: Optional[str] = None,
    exclude_resources: Iterable[str] = (),
    workers: int = 1,
) -> MinifyConfig:
    """Resolve paths and build a validated configuration."""
    return MinifyConfig(
        source_directory=Path(source_directory).expanduser().resolve(),
        target_directory=Path(target_directory).expanduser().resolve(),
        filename_pattern=filename_pattern or DEFAULT_FILENAME_PATTERN,
        exclude_resources=frozenset(name.strip() for name in exclude_resources if name.strip()),
        workers=workers,
    )
