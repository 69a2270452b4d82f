"""Script-to-font resolution with candidate chains."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from unitext2path.exceptions import FontLoadError
from unitext2path.fonts.cache import FontCache
from unitext2path.fonts.handle import FontHandle
from unitext2path.text.scripts import DEFAULT_SCRIPT_TABLE, ScriptTable

if TYPE_CHECKING:
    from unitext2path.concurrency import CancelToken

logger = logging.getLogger(__name__)

PRIMARY_FAMILY = "<embedded>"
RETRY_WEIGHT = 400


@dataclass
class ResolvedFonts:
    """Fonts available to one layout pass at one weight."""

    primary: FontHandle | None = None
    fallback: FontHandle | None = None
    scripts: dict[str, FontHandle | None] = field(default_factory=dict)

    def script_font(self, tag: str | None) -> FontHandle | None:
        return self.scripts.get(tag) if tag else None


class FontResolver:
    """Maps script tags to candidate families and loads them through the cache.

    A failed candidate moves on to the next family in the chain; when every
    candidate fails at the requested weight the chain is tried once more at
    weight 400. An exhausted chain yields None ("no font"), which callers
    treat as a signal to render native-text fallback.
    """

    def __init__(
        self,
        cache: FontCache,
        table: ScriptTable = DEFAULT_SCRIPT_TABLE,
        fallback_family: str | None = "Noto+Sans",
    ) -> None:
        self.cache = cache
        self.table = table
        self.fallback_family = fallback_family

    def resolve_family(self, script: str | None) -> tuple[str, ...] | None:
        """Candidate families for a script tag, best first."""
        return self.table.families(script)

    def load(self, family: str, weight: int, token: CancelToken | None = None) -> FontHandle:
        return self.cache.get(family, weight, token)

    def load_chain(
        self,
        families: Iterable[str],
        weight: int,
        token: CancelToken | None = None,
    ) -> FontHandle | None:
        families = tuple(families)
        for attempt_weight in dict.fromkeys((weight, RETRY_WEIGHT)):
            for family in families:
                try:
                    return self.load(family, attempt_weight, token)
                except FontLoadError as e:
                    logger.warning("%s", e)
        if families:
            logger.warning("No font could be loaded from %s", ", ".join(families))
        return None

    def load_script(self, script: str, weight: int, token: CancelToken | None = None) -> FontHandle | None:
        families = self.resolve_family(script)
        if not families:
            return None
        return self.load_chain(families, weight, token)

    def load_fallback(self, weight: int, token: CancelToken | None = None) -> FontHandle | None:
        if not self.fallback_family:
            return None
        return self.load_chain((self.fallback_family,), weight, token)

    @staticmethod
    def load_primary(data: bytes | None, weight: int = 400) -> FontHandle | None:
        """Parse document-embedded font bytes; None if absent or unreadable."""
        if not data:
            return None
        try:
            return FontHandle.from_bytes(data, PRIMARY_FAMILY, weight)
        except FontLoadError as e:
            logger.warning("Embedded font unusable: %s", e)
            return None
