"""Styled text input for the renderer."""

from __future__ import annotations

import math
from dataclasses import dataclass

from unitext2path.exceptions import InvalidInputError

ANCHORS = ("start", "middle", "end")
ANCHOR_ALIASES = {"center": "middle"}


@dataclass(frozen=True)
class TextNode:
    """One run of styled text placed at an anchor point.

    ``x``/``y`` are the anchor in output units (baseline at ``y``);
    ``features`` are OpenType feature tags requested for shaping.
    """

    text: str
    x: float = 0.0
    y: float = 0.0
    font_size: float = 16.0
    fill: str = "black"
    font_weight: int = 400
    text_anchor: str = "start"
    features: tuple[str, ...] = ()

    @property
    def anchor(self) -> str:
        return ANCHOR_ALIASES.get(self.text_anchor, self.text_anchor)

    def validate(self) -> None:
        """Reject nodes the layout pass cannot place.

        Raises:
            InvalidInputError: A field has the wrong type or an unusable value.
        """
        if not isinstance(self.text, str):
            raise InvalidInputError(
                "text must be a string",
                details={"type": type(self.text).__name__},
            )
        for name in ("x", "y", "font_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidInputError(f"{name} must be a finite number", details={name: value})
        if self.font_size <= 0:
            raise InvalidInputError("font_size must be positive", details={"font_size": self.font_size})
        if isinstance(self.font_weight, bool) or not isinstance(self.font_weight, int) or not 1 <= self.font_weight <= 1000:
            raise InvalidInputError(
                "font_weight must be an integer between 1 and 1000",
                details={"font_weight": self.font_weight},
            )
        if self.anchor not in ANCHORS:
            raise InvalidInputError(
                f"text_anchor must be one of {', '.join(ANCHORS)}",
                details={"text_anchor": self.text_anchor},
            )
