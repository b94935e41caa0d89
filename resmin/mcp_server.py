"""MCP server exposing the resource minifier as a tool."""

from __future__ import annotations

import logging
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from .config import DEFAULT_FILENAME_PATTERN, build_config
from .models import PipelineResult
from .pipeline import run_pipeline

logger = logging.getLogger("resmin.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="resmin")


def format_result(result: PipelineResult) -> str:
    """Render a run summary as plain text."""
    lines = [
        f"Minified {len(result.assets)} asset(s) and {len(result.pages)} page(s); "
        f"skipped {result.skipped}."
    ]
    if result.registry:
        lines.append("")
        lines.append("Renamed resources:")
        for original, minted in sorted(result.registry.items()):
            lines.append(f"- {original} -> {minted}")
    if result.outputs:
        lines.append("")
        lines.append("Written files:")
        lines.extend(f"- {path}" for path in result.outputs)
    return "\n".join(lines) + "\n"


@mcp.tool()
def minify_resources(
    source_directory: str,
    target_directory: str,
    filename_pattern: str = DEFAULT_FILENAME_PATTERN,
    exclude_resources: Optional[List[str]] = None,
) -> str:
    """Minify CSS, JS and HTML under a directory and rewrite HTML references."""

    config = build_config(
        source_directory,
        target_directory,
        filename_pattern=filename_pattern,
        exclude_resources=exclude_resources or (),
    )
    result = run_pipeline(config)
    return format_result(result)


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
