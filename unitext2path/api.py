"""High-level API for unitext2path.

Example:
    >>> from unitext2path import TextNode, TextRenderer
    >>> renderer = TextRenderer()
    >>> [rendered] = renderer.render([TextNode("Hello مرحبا 👋", x=10, y=50, font_size=24)])
    >>> rendered.to_string()  # doctest: +SKIP
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from unitext2path.concurrency import CancelToken, run_batch
from unitext2path.config import Config
from unitext2path.emoji import EmojiSource, TwemojiSource, parse_artwork
from unitext2path.exceptions import EmojiFetchError, InvalidInputError, Text2PathError
from unitext2path.fonts.cache import FontBytesLoader, FontCache
from unitext2path.fonts.handle import FontHandle
from unitext2path.fonts.loaders import ChainedFontLoader, DirectoryFontLoader, GoogleFontsLoader
from unitext2path.fonts.resolver import FontResolver, ResolvedFonts
from unitext2path.shaping.bidi import resolve, visual_order
from unitext2path.shaping.harfbuzz import ShapingEngine
from unitext2path.shaping.substitution import build_substitution_table
from unitext2path.svg.assembler import Artwork, PathAssembler, RenderedText
from unitext2path.svg.document import (
    extract_embedded_font,
    extract_font_features,
    find_text_elements,
    parse_svg_string,
    replace_element,
    text_node_from_element,
    to_string,
)
from unitext2path.text.graphemes import segment
from unitext2path.text.node import TextNode
from unitext2path.text.runs import LINE_BREAK, TextRun, segment_runs, visual_runs
from unitext2path.text.scripts import ScriptTable, classify

logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = "_text2path"


@dataclass
class ConversionResult:
    """Result of converting one SVG file."""

    success: bool
    input_path: Path | None = None
    output_path: Path | None = None
    text_count: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class _Plan:
    """Resources one render() call needs, gathered before any loading."""

    weights: set[int] = field(default_factory=set)
    scripts: set[tuple[str, int]] = field(default_factory=set)
    emoji: dict[str, None] = field(default_factory=dict)


def build_font_loader(config: Config) -> FontBytesLoader:
    """Local directories first, then Google Fonts when remote fonts are allowed."""
    loaders: list[FontBytesLoader] = []
    if config.font_dirs:
        loaders.append(DirectoryFontLoader(config.font_dirs))
    if config.remote_fonts:
        loaders.append(GoogleFontsLoader(timeout=config.request_timeout, cache_dir=config.font_cache_dir))
    return ChainedFontLoader(loaders)


class TextRenderer:
    """Renders styled text nodes to positioned SVG path fragments.

    One renderer owns one font cache; share the renderer (it is safe to
    call from several threads) to share loaded fonts between renders.

    Args:
        config: Settings; defaults to ``Config()``.
        font_cache: Cache to use instead of creating one from ``font_loader``.
        font_loader: Font-byte collaborator; built from ``config`` if omitted.
        emoji_source: Artwork collaborator; Twemoji over HTTP if omitted.
        script_table: Script table; ``config.script_table()`` if omitted.
    """

    def __init__(
        self,
        config: Config | None = None,
        font_cache: FontCache | None = None,
        font_loader: FontBytesLoader | None = None,
        emoji_source: EmojiSource | None = None,
        script_table: ScriptTable | None = None,
    ) -> None:
        self.config = config or Config()
        self.table = script_table if script_table is not None else self.config.script_table()
        if font_cache is None:
            font_cache = FontCache(font_loader or build_font_loader(self.config))
        self.font_cache = font_cache
        self.resolver = FontResolver(self.font_cache, self.table, self.config.fallback_family)
        if emoji_source is None and self.config.enable_emoji:
            cache_dir = self.config.font_cache_dir / "emoji" if self.config.font_cache_dir else None
            emoji_source = TwemojiSource(
                self.config.emoji_base_url,
                timeout=self.config.request_timeout,
                cache_dir=cache_dir,
            )
        self.emoji_source = emoji_source

    # ------------------------------------------------------------------
    # Text nodes
    # ------------------------------------------------------------------

    def render(
        self,
        nodes: Sequence[TextNode],
        primary_font: bytes | None = None,
        timeout: float | None = None,
    ) -> list[RenderedText]:
        """Lay out and assemble every node.

        All fonts and emoji artwork the nodes need are fetched in one
        concurrent batch before layout starts.

        Args:
            nodes: Text nodes to render.
            primary_font: Document-embedded font bytes, tried before script
                and fallback fonts.
            timeout: Seconds allowed for the resource batch; defaults to
                ``config.timeout``.

        Returns:
            One RenderedText per node, in input order.

        Raises:
            InvalidInputError: ``nodes`` is not a sequence of valid TextNodes.
            RenderTimeoutError: The resource batch did not finish in time.
        """
        nodes = self._validate(nodes)
        if primary_font is not None and not isinstance(primary_font, (bytes, bytearray)):
            raise InvalidInputError(
                "primary_font must be bytes",
                details={"type": type(primary_font).__name__},
            )
        if not nodes:
            return []

        started = time.monotonic()
        token = CancelToken(self.config.timeout if timeout is None else timeout)
        plan = self._plan(nodes)
        primary, fallbacks, scripts, artwork = self._load_resources(plan, primary_font, token)

        substitutions: dict[tuple[str, ...], dict[int, int]] = {}
        results = []
        for node in nodes:
            fonts = ResolvedFonts(
                primary=primary,
                fallback=fallbacks.get(node.font_weight),
                scripts={tag: font for (tag, weight), font in scripts.items() if weight == node.font_weight},
            )
            features = tuple(node.features)
            table = {}
            if primary is not None and features:
                if features not in substitutions:
                    substitutions[features] = build_substitution_table(primary, features)
                table = substitutions[features]
            assembler = PathAssembler(
                ShapingEngine(features, table),
                self.table,
                precision=self.config.precision,
                emoji_placeholder=self.config.emoji_placeholder,
            )
            results.append(
                assembler.assemble(
                    self.layout_runs(node.text, fonts),
                    node.x,
                    node.y,
                    node.font_size,
                    fill=node.fill,
                    anchor=node.anchor,
                    artwork=artwork,
                )
            )

        logger.info(
            "Rendered %d text node(s) in %.3fs (%d font loads so far)",
            len(nodes),
            time.monotonic() - started,
            self.font_cache.load_count,
        )
        return results

    def render_node(
        self,
        node: TextNode,
        primary_font: bytes | None = None,
        timeout: float | None = None,
    ) -> RenderedText:
        return self.render([node], primary_font, timeout)[0]

    def layout_runs(self, text: str, fonts: ResolvedFonts) -> list[TextRun]:
        """Text runs of ``text`` in display order, lines separated by line breaks."""
        runs: list[TextRun] = []
        for index, line in enumerate(text.split("\n")):
            if index:
                runs.append(LINE_BREAK)
            for bidi_run in visual_order(resolve(line)):
                segmented = segment_runs(bidi_run, fonts, self.table, enable_emoji=self.config.enable_emoji)
                runs.extend(visual_runs(segmented, bidi_run.direction))
        return runs

    def _validate(self, nodes: Any) -> list[TextNode]:
        if isinstance(nodes, TextNode):
            nodes = [nodes]
        if isinstance(nodes, (str, bytes)) or not isinstance(nodes, Iterable):
            raise InvalidInputError(
                "nodes must be a sequence of TextNode",
                details={"type": type(nodes).__name__},
            )
        nodes = list(nodes)
        for index, node in enumerate(nodes):
            if not isinstance(node, TextNode):
                raise InvalidInputError(
                    "nodes must be a sequence of TextNode",
                    details={"index": index, "type": type(node).__name__},
                )
            node.validate()
        return nodes

    def _plan(self, nodes: Iterable[TextNode]) -> _Plan:
        plan = _Plan()
        for node in nodes:
            plan.weights.add(node.font_weight)
            for cluster in segment(node.text):
                info = classify(cluster, self.table)
                if info.is_emoji and self.config.enable_emoji:
                    if self.emoji_source is not None:
                        plan.emoji.setdefault(cluster)
                elif info.script and self.config.enable_international_fonts:
                    if self.table.families(info.script):
                        plan.scripts.add((info.script, node.font_weight))
        return plan

    def _load_resources(
        self,
        plan: _Plan,
        primary_font: bytes | None,
        token: CancelToken,
    ) -> tuple[
        FontHandle | None,
        dict[int, FontHandle | None],
        dict[tuple[str, int], FontHandle | None],
        dict[str, Artwork | None],
    ]:
        tasks: dict[tuple, Any] = {}
        if primary_font:
            tasks[("primary",)] = functools.partial(FontResolver.load_primary, bytes(primary_font))
        for weight in sorted(plan.weights):
            tasks[("fallback", weight)] = functools.partial(self.resolver.load_fallback, weight, token)
        for tag, weight in sorted(plan.scripts):
            tasks[("script", tag, weight)] = functools.partial(self.resolver.load_script, tag, weight, token)
        for cluster in plan.emoji:
            tasks[("emoji", cluster)] = functools.partial(self._fetch_emoji, cluster, token)

        logger.debug(
            "Resource batch: %d script font(s), %d fallback weight(s), %d emoji",
            len(plan.scripts),
            len(plan.weights),
            len(plan.emoji),
        )
        futures = run_batch(tasks, token, self.config.max_workers)

        primary = None
        fallbacks: dict[int, FontHandle | None] = {}
        scripts: dict[tuple[str, int], FontHandle | None] = {}
        artwork: dict[str, Artwork | None] = {}
        for key, future in futures.items():
            # tasks recover from their own load failures; anything left is fatal
            result = future.result()
            if key[0] == "primary":
                primary = result
            elif key[0] == "fallback":
                fallbacks[key[1]] = result
            elif key[0] == "script":
                scripts[(key[1], key[2])] = result
            else:
                artwork[key[1]] = result
        return primary, fallbacks, scripts, artwork

    def _fetch_emoji(self, cluster: str, token: CancelToken) -> Artwork | None:
        token.raise_if_cancelled()
        try:
            return parse_artwork(self.emoji_source(cluster), cluster)
        except EmojiFetchError as e:
            logger.warning("%s", e)
            return None
        except Exception as e:
            logger.warning("%s", EmojiFetchError(cluster, str(e) or type(e).__name__))
            return None

    # ------------------------------------------------------------------
    # SVG documents
    # ------------------------------------------------------------------

    def convert_string(self, svg: str, timeout: float | None = None) -> str:
        """Replace every ``<text>`` element of an SVG document with paths.

        Raises:
            SVGParseError: The document cannot be parsed.
            RenderTimeoutError: Resource loading did not finish in time.
        """
        return self._convert(svg, timeout)[0]

    def _convert(self, svg: str, timeout: float | None) -> tuple[str, int]:
        root = parse_svg_string(svg)
        features = extract_font_features(root)
        primary_font = extract_embedded_font(root)
        pairs = find_text_elements(root)
        nodes = [text_node_from_element(element, features) for _parent, element in pairs]

        rendered = self.render(nodes, primary_font, timeout)
        for (parent, element), result in zip(pairs, rendered):
            if element.get("id"):
                result.element.set("id", element.get("id"))
            replace_element(parent, element, result.element)
        return to_string(root), len(pairs)

    def convert_file(
        self,
        input_path: Path | str,
        output_path: Path | str | None = None,
        timeout: float | None = None,
    ) -> ConversionResult:
        """Convert an SVG file; errors are reported in the result, not raised."""
        input_path = Path(input_path)
        if output_path is None:
            output_path = input_path.with_name(f"{input_path.stem}{OUTPUT_SUFFIX}.svg")
        output_path = Path(output_path)
        result = ConversionResult(success=False, input_path=input_path, output_path=output_path)

        try:
            svg = input_path.read_text(encoding="utf-8")
        except OSError as e:
            result.errors.append(f"Cannot read {input_path}: {e}")
            return result

        try:
            converted, result.text_count = self._convert(svg, timeout)
        except Text2PathError as e:
            result.errors.append(str(e))
            return result

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(converted, encoding="utf-8")
        except OSError as e:
            result.errors.append(f"Cannot write {output_path}: {e}")
            return result

        result.success = True
        logger.info("Converted %d text element(s): %s -> %s", result.text_count, input_path, output_path)
        return result
