"""Shared fixtures for building source trees and fake minifiers."""

from pathlib import Path

import pytest

from resmin.config import MinifyConfig
from resmin.minifiers import Minifiers, identity


def write_tree(root: Path, files: dict) -> None:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)


def upper(content: bytes) -> bytes:
    return content.upper()


@pytest.fixture
def source_dir(tmp_path):
    path = tmp_path / "src"
    path.mkdir()
    return path


@pytest.fixture
def target_dir(tmp_path):
    return tmp_path / "out"


@pytest.fixture
def make_config(source_dir, target_dir):
    def _make(**overrides):
        return MinifyConfig(source_directory=source_dir, target_directory=target_dir, **overrides)

    return _make


@pytest.fixture
def fake_minifiers():
    """Identity for assets so digests are predictable; HTML is left as-is."""
    return Minifiers(css=identity, js=identity, html=identity)
