"""Rule-based proximity scoring for free-text Ghanaian locations.

Scores two location strings in [0, 1] from the static gazetteer in
``config.ghana_locations``. Rules are evaluated in a fixed order and the
first one that fires decides the score. The matcher's combined score is
calibrated against these constants.
"""
from __future__ import annotations

import logging
import re

from config.ghana_locations import MAJOR_CITIES, NEARBY_REGIONS, REGION_TOWNS

logger = logging.getLogger(__name__)

SCORE_MISSING = 0.1
SCORE_EXACT = 1.0
SCORE_CONTAINS = 0.9
SCORE_SAME_TOWN = 0.95
SCORE_SAME_REGION = 0.7
SCORE_NEARBY_REGION = 0.5
SCORE_COMMON_WORDS = 0.4
SCORE_NO_MATCH = 0.1

COMMON_WORD_RATIO = 0.3
MIN_TOKEN_LENGTH = 3

_TOKEN_SPLIT = re.compile(r"[\s,]+")


def _normalize(location: str | None) -> str:
    return (location or "").strip().lower()


def _in_region(location: str, region: str, towns: tuple[str, ...]) -> bool:
    return location == region or any(town in location for town in towns)


def _first_town(location: str, towns: tuple[str, ...]) -> str | None:
    return next((town for town in towns if town in location), None)


def resolve_region(location: str) -> str | None:
    """Return the region a normalized location resolves to.

    Towns are matched as substrings, so a location can fall in several
    regions; the last one in table order wins.
    """
    found = None
    for region, towns in REGION_TOWNS.items():
        if _in_region(location, region, towns):
            found = region
    return found


def are_adjacent(region_a: str, region_b: str) -> bool:
    """Adjacency is undirected: either region listing the other is enough."""
    return (
        region_b in NEARBY_REGIONS.get(region_a, ())
        or region_a in NEARBY_REGIONS.get(region_b, ())
    )


def tokenize(location: str) -> list[str]:
    return [t for t in _TOKEN_SPLIT.split(location) if len(t) >= MIN_TOKEN_LENGTH]


def common_word_ratio(location_a: str, location_b: str) -> float:
    """Share of tokens of ``location_a`` also found in ``location_b``.

    Relative to the longer token list; 0.0 when either side has no tokens.
    """
    words_a = tokenize(location_a)
    words_b = tokenize(location_b)
    if not words_a or not words_b:
        return 0.0
    common = [w for w in words_a if w in words_b]
    return len(common) / max(len(words_a), len(words_b))


def location_similarity(location_a: str | None, location_b: str | None) -> float:
    """Score how close two free-text locations are.

    Args:
        location_a: Patient location, e.g. "Accra, Greater Accra"
        location_b: Caregiver location

    Returns:
        One of the ``SCORE_*`` constants
    """
    loc_a = _normalize(location_a)
    loc_b = _normalize(location_b)

    if not loc_a or not loc_b:
        return SCORE_MISSING

    if loc_a == loc_b:
        return SCORE_EXACT

    if loc_a in loc_b or loc_b in loc_a:
        return SCORE_CONTAINS

    # Same region, possibly the same town within it
    for region, towns in REGION_TOWNS.items():
        if _in_region(loc_a, region, towns) and _in_region(loc_b, region, towns):
            town_a = _first_town(loc_a, towns)
            town_b = _first_town(loc_b, towns)
            if town_a and town_b and town_a == town_b:
                return SCORE_SAME_TOWN
            return SCORE_SAME_REGION

    city_a = _first_town(loc_a, tuple(MAJOR_CITIES))
    city_b = _first_town(loc_b, tuple(MAJOR_CITIES))
    if city_a and city_b:
        if city_a == city_b:
            return SCORE_SAME_TOWN
        if MAJOR_CITIES[city_a] == MAJOR_CITIES[city_b]:
            return SCORE_SAME_REGION

    region_a = resolve_region(loc_a)
    region_b = resolve_region(loc_b)
    if region_a and region_b:
        if region_a == region_b:
            return SCORE_SAME_REGION
        if are_adjacent(region_a, region_b):
            return SCORE_NEARBY_REGION

    if common_word_ratio(loc_a, loc_b) >= COMMON_WORD_RATIO:
        return SCORE_COMMON_WORDS

    return SCORE_NO_MATCH
