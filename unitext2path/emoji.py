"""Emoji artwork retrieval.

Artwork is looked up by Twemoji file name and fetched ahead of layout.
The assembler only ever sees parsed artwork (the children of the root
``<svg>`` element), never URLs.
"""

from __future__ import annotations

import copy
import hashlib
import logging
import urllib.error
import urllib.request
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from unitext2path.exceptions import EmojiFetchError
from unitext2path.svg.document import local_name, svg_tag
from unitext2path.text.scripts import VS16, ZWJ

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

logger = logging.getLogger(__name__)

TWEMOJI_BASE_URL = "https://cdn.jsdelivr.net/gh/twitter/twemoji@14.0.2/assets/svg/"


class EmojiSource(Protocol):
    """Artwork collaborator: returns SVG markup for a cluster or raises EmojiFetchError."""

    def __call__(self, cluster: str) -> str: ...


def twemoji_name(cluster: str) -> str:
    """Twemoji file stem for a cluster.

    Code points are written as lowercase hex joined by ``-``. The emoji
    variation selector is dropped unless the sequence is joined with ZWJ.

    Examples:
        >>> twemoji_name("\\U0001F600")
        '1f600'
        >>> twemoji_name("#\\ufe0f\\u20e3")
        '23-20e3'
    """
    if ZWJ not in cluster:
        cluster = cluster.replace(VS16, "")
    return "-".join(f"{ord(ch):x}" for ch in cluster)


def _qualify(element: Element) -> None:
    for el in element.iter():
        if isinstance(el.tag, str) and not el.tag.startswith("{"):
            el.tag = svg_tag(el.tag)


def parse_artwork(markup: str, cluster: str = "") -> list[Element]:
    """Children of the artwork's root ``<svg>``, all in the SVG namespace.

    Raises:
        EmojiFetchError: The markup is not a parseable SVG document.
    """
    try:
        root = ET.fromstring(markup)
    except ET.ParseError as e:
        raise EmojiFetchError(cluster, f"invalid artwork: {e}") from e
    except DefusedXmlException as e:
        raise EmojiFetchError(cluster, f"unsafe artwork: {e}") from e
    if local_name(root.tag) != "svg":
        raise EmojiFetchError(cluster, f"artwork root is <{local_name(root.tag)}>")
    children = [copy.deepcopy(child) for child in root]
    for child in children:
        _qualify(child)
    return children


class TwemojiSource:
    """Fetches Twemoji SVG artwork over HTTP, with an optional on-disk cache."""

    # Default timeout for requests (seconds)
    DEFAULT_TIMEOUT = 10

    # Twemoji files are a few kilobytes
    MAX_SIZE = 512 * 1024

    def __init__(
        self,
        base_url: str = TWEMOJI_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        cache_dir: Path | None = None,
    ) -> None:
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self.cache_dir = cache_dir

    def url_for(self, cluster: str) -> str:
        return f"{self.base_url}{twemoji_name(cluster)}.svg"

    def __call__(self, cluster: str) -> str:
        """Return the artwork markup for ``cluster``.

        Raises:
            EmojiFetchError: The request failed or returned no SVG.
        """
        url = self.url_for(cluster)
        cached = self._get_cached(url)
        if cached:
            return cached

        req = urllib.request.Request(
            url,
            headers={"Accept": "image/svg+xml, application/xml, text/xml, */*"},
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                content = response.read(self.MAX_SIZE + 1)
        except urllib.error.HTTPError as e:
            raise EmojiFetchError(cluster, f"HTTP {e.code} for {url}") from e
        except urllib.error.URLError as e:
            raise EmojiFetchError(cluster, str(e.reason)) from e
        except OSError as e:
            raise EmojiFetchError(cluster, str(e)) from e

        if len(content) > self.MAX_SIZE:
            raise EmojiFetchError(cluster, f"artwork larger than {self.MAX_SIZE} bytes")
        markup = content.decode("utf-8", errors="replace")
        if "<svg" not in markup:
            raise EmojiFetchError(cluster, "response is not SVG")

        self._cache_content(url, markup)
        return markup

    def _cache_path(self, url: str) -> Path:
        digest = hashlib.sha256(url.encode()).hexdigest()[:16]
        return self.cache_dir / f"{digest}.svg"

    def _get_cached(self, url: str) -> str | None:
        if not self.cache_dir:
            return None
        cache_file = self._cache_path(url)
        if cache_file.exists():
            try:
                return cache_file.read_text(encoding="utf-8")
            except OSError:
                return None
        return None

    def _cache_content(self, url: str, markup: str) -> None:
        if not self.cache_dir:
            return
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            self._cache_path(url).write_text(markup, encoding="utf-8")
        except OSError as e:
            logger.debug("Emoji cache write failed: %s", e)
