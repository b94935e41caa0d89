"""Two-phase orchestration: minify leaf assets, then rewrite HTML pages."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

from .config import MinifyConfig
from .emitter import emit, read_resource
from .errors import MinificationError
from .minifiers import Minifiers, default_minifiers
from .models import MintedArtifact, PipelineResult, Resource, ResourceKind
from .naming import mint_filename
from .registry import RewriteRegistry, rewrite_html
from .scanner import scan_resources

logger = logging.getLogger("resmin")

T = TypeVar("T")

_LEAF_KINDS = (ResourceKind.CSS, ResourceKind.JS)


class ResourcePipeline:
    """Minifies a source tree into the target tree for one configuration.

    Leaf assets (CSS, JS) are handled first and registered under their minted
    names. HTML pages are queued and only processed after every leaf asset has
    been registered, so each page sees the complete registry.
    """

    def __init__(self, config: MinifyConfig, minifiers: Optional[Minifiers] = None) -> None:
        self.config = config
        self.minifiers = minifiers or default_minifiers()
        self.registry = RewriteRegistry()

    def _minify(self, resource: Resource, content: bytes) -> bytes:
        strategy = self.minifiers.for_kind(resource.kind)
        try:
            return strategy(content)
        except Exception as exc:  # noqa: BLE001
            raise MinificationError(
                f"Failed to minify {resource.kind.name} resource {resource.relative_path}: {exc}",
                resource.source_path,
                resource.kind.name,
            ) from exc

    def mint(self, resource: Resource) -> MintedArtifact:
        """Read and minify a leaf asset and compute its minted basename."""
        logger.info("Minify %s resource: %s", resource.kind.name, resource.basename)
        minified = self._minify(resource, read_resource(resource))
        minted_basename = mint_filename(
            resource.basename, minified, self.config.filename_pattern
        )
        return MintedArtifact(resource, minted_basename, minified)

    def emit_asset(self, resource: Resource) -> Tuple[MintedArtifact, Path]:
        """Mint and write a leaf asset without registering it."""
        artifact = self.mint(resource)
        destination = emit(
            self.config, resource, artifact.minted_basename, artifact.minted_bytes
        )
        return artifact, destination

    def register(self, artifact: MintedArtifact) -> None:
        original = artifact.resource.basename
        self.registry.record(original, artifact.minted_basename)
        logger.debug("Registered %s -> %s", original, artifact.minted_basename)

    def process_asset(self, resource: Resource) -> Path:
        artifact, destination = self.emit_asset(resource)
        self.register(artifact)
        return destination

    def process_page(self, resource: Resource) -> Path:
        logger.info("Minify HTML resource: %s", resource.basename)
        minified = self._minify(resource, read_resource(resource))
        try:
            text = minified.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MinificationError(
                f"Minified HTML resource {resource.relative_path} is not valid UTF-8",
                resource.source_path,
                resource.kind.name,
            ) from exc
        rewritten = rewrite_html(text, self.registry.snapshot())
        return emit(self.config, resource, resource.basename, rewritten.encode("utf-8"))

    def _map(self, func: Callable[[Resource], T], resources: Iterable[Resource]) -> List[T]:
        if self.config.workers == 1:
            return [func(resource) for resource in resources]
        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            return list(executor.map(func, resources))

    def run(self) -> PipelineResult:
        result = PipelineResult()
        pages: List[Resource] = []
        assets: List[Resource] = []

        asset_start = time.perf_counter()
        for resource in scan_resources(self.config):
            if resource.kind is ResourceKind.EXCLUDED:
                result.skipped += 1
            elif resource.kind is ResourceKind.HTML:
                pages.append(resource)
            elif resource.kind in _LEAF_KINDS:
                if self.config.workers == 1:
                    result.assets.append(self.process_asset(resource))
                else:
                    assets.append(resource)
            else:
                result.ignored += 1
                logger.debug("Ignoring resource: %s", resource.relative_path)
        # registered in scan order
        for artifact, destination in self._map(self.emit_asset, assets):
            self.register(artifact)
            result.assets.append(destination)
        self.registry.seal()
        result.asset_seconds = time.perf_counter() - asset_start
        logger.debug(
            "Registered %d asset(s) in %.2fs", len(self.registry), result.asset_seconds
        )

        page_start = time.perf_counter()
        result.pages.extend(self._map(self.process_page, pages))
        result.page_seconds = time.perf_counter() - page_start
        logger.debug("Rewrote %d page(s) in %.2fs", len(pages), result.page_seconds)

        result.registry = self.registry.snapshot()
        return result


def run_pipeline(config: MinifyConfig, minifiers: Optional[Minifiers] = None) -> PipelineResult:
    """Run a full minification pass for ``config``."""
    return ResourcePipeline(config, minifiers).run()
