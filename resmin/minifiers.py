"""Minifier strategies for CSS, JavaScript and HTML resources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import minify_html
import rcssmin
import rjsmin

from .models import ResourceKind

Minifier = Callable[[bytes], bytes]

ENCODING = "utf-8"


def minify_css(content: bytes) -> bytes:
    return rcssmin.cssmin(content.decode(ENCODING)).encode(ENCODING)


def minify_js(content: bytes) -> bytes:
    return rjsmin.jsmin(content.decode(ENCODING)).encode(ENCODING)


def minify_html_document(content: bytes) -> bytes:
    """Collapse whitespace between tags and minify inline styles and scripts."""
    minified = minify_html.minify(
        content.decode(ENCODING),
        minify_css=True,
        minify_js=True,
    )
    return minified.encode(ENCODING)


def identity(content: bytes) -> bytes:
    return content


@dataclass(frozen=True)
class Minifiers:
    """One strategy per minifiable resource kind."""

    css: Minifier
    js: Minifier
    html: Minifier

    def for_kind(self, kind: ResourceKind) -> Minifier:
        if kind is ResourceKind.CSS:
            return self.css
        if kind is ResourceKind.JS:
            return self.js
        if kind is ResourceKind.HTML:
            return self.html
        raise ValueError(f"No minifier for {kind.name} resources")


def default_minifiers() -> Minifiers:
    return Minifiers(css=minify_css, js=minify_js, html=minify_html_document)


def identity_minifiers() -> Minifiers:
    """Strategies that copy content through unchanged."""
    return Minifiers(css=identity, js=identity, html=identity)
