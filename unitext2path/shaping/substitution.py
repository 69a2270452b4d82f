"""Single-substitution table for stylistic alternates of the primary font."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from unitext2path.fonts.handle import FontHandle

logger = logging.getLogger(__name__)

SINGLE_SUBSTITUTION = 1
EXTENSION_SUBSTITUTION = 7


def build_substitution_table(font: FontHandle, feature_tags: Iterable[str]) -> dict[int, int]:
    """Map default glyph ids to alternates for the requested GSUB features.

    Only single (one-to-one) substitution lookups are read, including ones
    wrapped in extension lookups. Contextual and ligature lookups are left to
    the shaper. When two features substitute the same glyph, the feature
    requested first wins.
    """
    gsub = font.gsub
    tags = list(dict.fromkeys(t.strip() for t in feature_tags if t.strip()))
    if not tags or gsub is None or gsub.FeatureList is None or gsub.LookupList is None:
        return {}

    table: dict[int, int] = {}
    for tag in tags:
        for record in gsub.FeatureList.FeatureRecord:
            if record.FeatureTag != tag:
                continue
            for index in record.Feature.LookupListIndex:
                lookup = gsub.LookupList.Lookup[index]
                for subtable in lookup.SubTable:
                    lookup_type = lookup.LookupType
                    if lookup_type == EXTENSION_SUBSTITUTION:
                        lookup_type = subtable.ExtensionLookupType
                        subtable = subtable.ExtSubTable
                    if lookup_type != SINGLE_SUBSTITUTION:
                        continue
                    for source, target in subtable.mapping.items():
                        table.setdefault(font.glyph_id(source), font.glyph_id(target))

    logger.debug("Substitution table for %s: %d entries from %s", font.family, len(table), tags)
    return table
