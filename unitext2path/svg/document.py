"""SVG document handling: parsing, text extraction, element replacement.

Parsing goes through defusedxml so untrusted documents cannot trigger
entity expansion or external fetches.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from io import StringIO
from pathlib import Path
from typing import TYPE_CHECKING
from xml.etree.ElementTree import ElementTree
from xml.etree.ElementTree import register_namespace as _register_namespace

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from unitext2path.exceptions import SVGParseError
from unitext2path.text.node import ANCHOR_ALIASES, ANCHORS, TextNode

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

NAMESPACES = {
    "": SVG_NS,
    "xlink": XLINK_NS,
    "inkscape": "http://www.inkscape.org/namespaces/inkscape",
    "sodipodi": "http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd",
}

DEFAULT_FONT_SIZE = 16.0

WEIGHT_NAMES = {
    "thin": 100,
    "extralight": 200,
    "light": 300,
    "normal": 400,
    "regular": 400,
    "medium": 500,
    "semibold": 600,
    "bold": 700,
    "extrabold": 800,
    "black": 900,
}

_TRANSLATE_RE = re.compile(r"translate\(\s*([-+\d.eE]+)(?:[\s,]+([-+\d.eE]+))?\s*\)")
_NUMBER_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")
_EMBEDDED_FONT_RE = re.compile(
    r"src:\s*url\(\s*['\"]?data:(?:font/(?:truetype|woff2?|opentype|ttf|otf)"
    r"|application/(?:x-font-ttf|x-font-truetype|font-woff2?|vnd\.ms-opentype|octet-stream))"
    r"(?:;[^;,)]+)*;base64,([A-Za-z0-9+/=\s]+)['\"]?\s*\)"
)
_FEATURE_BLOCK_RE = re.compile(r"font-feature-settings\s*:\s*([^;}]+)")
_FEATURE_TAG_RE = re.compile(r"[\"']([A-Za-z0-9]{4})[\"']\s+(?:on|1)\b")


def svg_tag(name: str) -> str:
    """Qualified tag name in the SVG namespace."""
    return f"{{{SVG_NS}}}{name}"


def local_name(tag: str) -> str:
    """Tag without its ``{namespace}`` prefix."""
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def register_namespaces() -> None:
    """Serialize SVG as the default namespace instead of ``ns0:``."""
    for prefix, uri in NAMESPACES.items():
        _register_namespace(prefix, uri)


def parse_svg_string(svg: str) -> Element:
    """Parse an SVG document and return its root element.

    Raises:
        SVGParseError: The markup is not well-formed or the root is not ``<svg>``.
    """
    if not isinstance(svg, str) or not svg.strip():
        raise SVGParseError("Empty SVG document")
    try:
        root = ET.fromstring(svg)
    except ET.ParseError as e:
        raise SVGParseError(f"Failed to parse SVG: {e}") from e
    except DefusedXmlException as e:
        raise SVGParseError(f"Unsafe or invalid SVG: {e}") from e
    if local_name(root.tag) != "svg":
        raise SVGParseError(f"Root element is <{local_name(root.tag)}>, expected <svg>")
    return root


def parse_svg(path: Path | str) -> ElementTree:
    """Parse an SVG file.

    Raises:
        SVGParseError: The file cannot be read or parsed.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SVGParseError(f"Cannot read {path}: {e}", details={"path": str(path)}) from e
    root = parse_svg_string(content)
    return ElementTree(root)


def to_string(root: Element, xml_declaration: bool = False) -> str:
    """Serialize an element tree back to SVG markup."""
    register_namespaces()
    buffer = StringIO()
    ElementTree(root).write(buffer, encoding="unicode", xml_declaration=xml_declaration)
    return buffer.getvalue()


def find_text_elements(root: Element) -> list[tuple[Element, Element]]:
    """All ``<text>`` elements as ``(parent, text)`` pairs, in document order.

    Text nested inside another text element is not reported separately.
    """
    found: list[tuple[Element, Element]] = []

    def walk(element: Element) -> None:
        for child in element:
            if local_name(child.tag) == "text":
                found.append((element, child))
            else:
                walk(child)

    walk(root)
    return found


def parse_style(style: str | None) -> dict[str, str]:
    """Inline ``style`` attribute as a property dict."""
    props: dict[str, str] = {}
    if not style:
        return props
    for decl in style.split(";"):
        if ":" in decl:
            name, _, value = decl.partition(":")
            props[name.strip().lower()] = value.strip()
    return props


def parse_length(value: str | None, default: float) -> float:
    """Leading number of an SVG length (``12``, ``12.5px``); ``default`` otherwise."""
    if value is None:
        return default
    match = _NUMBER_RE.match(value)
    return float(match.group(1)) if match else default


def parse_font_weight(value: str | None) -> int:
    if not value:
        return 400
    value = value.strip().lower().replace("-", "")
    if value in WEIGHT_NAMES:
        return WEIGHT_NAMES[value]
    try:
        weight = int(float(value))
    except ValueError:
        return 400
    return weight if 1 <= weight <= 1000 else 400


def parse_translate(transform: str | None) -> tuple[float, float]:
    if not transform:
        return 0.0, 0.0
    match = _TRANSLATE_RE.search(transform)
    if not match:
        return 0.0, 0.0
    tx = float(match.group(1))
    ty = float(match.group(2)) if match.group(2) is not None else 0.0
    return tx, ty


def element_text(element: Element) -> str:
    """Character data of an element with nested ``<tspan>`` markup flattened."""
    return "".join(element.itertext())


def text_node_from_element(element: Element, features: tuple[str, ...] = ()) -> TextNode:
    """Build a TextNode from a ``<text>`` element's attributes and style.

    Inline ``style`` properties override presentation attributes. A
    ``translate()`` in ``transform`` is folded into the anchor point.
    """
    style = parse_style(element.get("style"))

    def prop(name: str) -> str | None:
        return style.get(name) or element.get(name)

    x = parse_length(element.get("x"), 0.0)
    y = parse_length(element.get("y"), 0.0)
    tx, ty = parse_translate(element.get("transform"))

    font_size = parse_length(prop("font-size"), DEFAULT_FONT_SIZE)
    if font_size <= 0:
        font_size = DEFAULT_FONT_SIZE
    anchor = (prop("text-anchor") or "start").strip()
    if anchor not in ANCHORS and anchor not in ANCHOR_ALIASES:
        anchor = "start"

    return TextNode(
        text=element_text(element).strip(),
        x=x + tx,
        y=y + ty,
        font_size=font_size,
        fill=prop("fill") or "black",
        font_weight=parse_font_weight(prop("font-weight")),
        text_anchor=anchor,
        features=features,
    )


def _style_sources(root: Element) -> list[str]:
    sources = []
    for el in root.iter():
        if local_name(el.tag) == "style" and el.text:
            sources.append(el.text)
        style_attr = el.get("style")
        if style_attr:
            sources.append(style_attr)
    return sources


def extract_embedded_font(root: Element) -> bytes | None:
    """Bytes of the first base64 font in an ``@font-face`` rule, if any."""
    for css in _style_sources(root):
        match = _EMBEDDED_FONT_RE.search(css)
        if not match:
            continue
        try:
            return base64.b64decode("".join(match.group(1).split()), validate=True)
        except (binascii.Error, ValueError) as e:
            logger.warning("Embedded font is not valid base64: %s", e)
    return None


def extract_font_features(root: Element) -> tuple[str, ...]:
    """OpenType tags switched on by ``font-feature-settings``, first seen first."""
    tags: list[str] = []
    for css in _style_sources(root):
        for block in _FEATURE_BLOCK_RE.finditer(css):
            for tag in _FEATURE_TAG_RE.findall(block.group(1)):
                if tag not in tags:
                    tags.append(tag)
    return tuple(tags)


def replace_element(parent: Element, old: Element, new: Element) -> None:
    """Put ``new`` where ``old`` was, keeping the tail text."""
    index = list(parent).index(old)
    new.tail = old.tail
    parent.remove(old)
    parent.insert(index, new)
