"""Exception hierarchy for unitext2path.

Failures scoped to one cluster or one run (font loads, shaping, emoji
artwork) are recoverable and are normally caught inside the renderer.
Malformed input, unparseable documents, configuration errors and batch
timeouts propagate to the caller.
"""

from __future__ import annotations

from typing import Any


class Text2PathError(Exception):
    """Base class for all unitext2path errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        extra = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({extra})"


class FontLoadError(Text2PathError):
    """A candidate font could not be fetched or parsed."""

    def __init__(self, family: str, weight: int, reason: str = "") -> None:
        super().__init__(
            f"Failed to load font '{family}' w={weight}",
            details={"reason": reason} if reason else None,
        )
        self.family = family
        self.weight = weight
        self.reason = reason


class ShapingError(Text2PathError):
    """The shaper rejected a run."""

    def __init__(self, family: str, text: str, reason: str = "") -> None:
        super().__init__(
            f"Shaping failed for {text[:20]!r} with font '{family}'",
            details={"reason": reason} if reason else None,
        )
        self.family = family
        self.text = text
        self.reason = reason


class EmojiFetchError(Text2PathError):
    """Artwork for an emoji cluster could not be retrieved."""

    def __init__(self, cluster: str, reason: str = "") -> None:
        super().__init__(
            f"Failed to fetch emoji artwork for {cluster!r}",
            details={"reason": reason} if reason else None,
        )
        self.cluster = cluster
        self.reason = reason


class RemoteResourceError(Text2PathError):
    """A network request made by a collaborator adapter failed."""

    def __init__(
        self,
        url: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        merged = dict(details or {})
        if status_code is not None:
            merged["status_code"] = status_code
        super().__init__(f"Failed to fetch remote resource: {url}", details=merged)
        self.url = url
        self.status_code = status_code


class InvalidInputError(Text2PathError):
    """Top-level input is malformed; no layout is attempted."""


class SVGParseError(Text2PathError):
    """An SVG document could not be parsed."""


class RenderTimeoutError(Text2PathError):
    """Font or emoji batches did not finish before the deadline."""

    def __init__(self, timeout: float | None) -> None:
        super().__init__(
            f"Render aborted: resource batch exceeded {timeout}s",
            details={"timeout": timeout},
        )
        self.timeout = timeout


class ConfigError(Text2PathError):
    """Configuration file or values are invalid."""
