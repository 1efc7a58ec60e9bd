"""
Rule-based entity extractor.

Maps a free-text query onto an EntitySet with fixed vocabularies and a
handful of price patterns. It is the safety net when the LLM extractor is
unavailable and the base layer the LLM result is merged onto.

All keyword matching is word-boundary anchored, so "red" does not match
"shredded" and "men" does not match "women".
"""

import re
from typing import Dict, Iterable, List, Optional, Tuple

from core.logging import get_logger
from search.models import EntitySet
from search.vocabulary import (
    BARE_PRICE_PATTERN,
    CATEGORIES,
    COLORS,
    DISCOUNT_KEYWORDS,
    FABRICS,
    GENDER_PRIORITY,
    GENDER_SYNONYMS,
    MAX_PRICE_PHRASES,
    NOVELTY_KEYWORDS,
    PRICE_RANGE_PATTERN,
    STYLES,
)

logger = get_logger(__name__)


# ============================================================================
# Pattern builders
# ============================================================================

def _build_keyword_pattern(keywords: Iterable[str]) -> re.Pattern:
    """Compile one regex matching any keyword at word boundaries.

    Longest keywords go first so "womens" is tried before "women".
    """
    sorted_kws = sorted(set(keywords), key=len, reverse=True)
    alternation = "|".join(re.escape(kw) for kw in sorted_kws)
    return re.compile(r"\b(?:" + alternation + r")\b", re.IGNORECASE)


def _build_vocab_patterns(values: Iterable[str]) -> List[Tuple[str, re.Pattern]]:
    return [(value, _build_keyword_pattern([value])) for value in values]


_COLOR_PATTERNS = _build_vocab_patterns(COLORS)
_FABRIC_PATTERNS = _build_vocab_patterns(FABRICS)
_STYLE_PATTERNS = _build_vocab_patterns(STYLES)
_CATEGORY_PATTERNS = [
    (singular, _build_keyword_pattern([singular, plural]))
    for singular, plural in CATEGORIES
]
_GENDER_PATTERNS: Dict[str, re.Pattern] = {
    gender: _build_keyword_pattern(GENDER_SYNONYMS[gender])
    for gender in GENDER_PRIORITY
}
_NOVELTY_PATTERN = _build_keyword_pattern(NOVELTY_KEYWORDS)
_DISCOUNT_PATTERN = _build_keyword_pattern(DISCOUNT_KEYWORDS)

_MAX_PRICE_PATTERNS = [re.compile(p, re.IGNORECASE) for p in MAX_PRICE_PHRASES]
_PRICE_RANGE_PATTERN = re.compile(PRICE_RANGE_PATTERN)
_BARE_PRICE_PATTERN = re.compile(BARE_PRICE_PATTERN)


# ============================================================================
# Field matchers
# ============================================================================

def _first_match(text: str, patterns: List[Tuple[str, re.Pattern]]) -> Optional[str]:
    for value, pattern in patterns:
        if pattern.search(text):
            return value
    return None


def _extract_gender(text: str) -> Optional[str]:
    for gender in GENDER_PRIORITY:
        if _GENDER_PATTERNS[gender].search(text):
            return gender
    return None


def _extract_price(text: str) -> Dict[str, int]:
    """Price bounds from the first matching pattern, in priority order."""
    for pattern in _MAX_PRICE_PATTERNS:
        match = pattern.search(text)
        if match:
            return {"max_price": int(match.group(1))}

    match = _PRICE_RANGE_PATTERN.search(text)
    if match:
        return {"min_price": int(match.group(1)), "max_price": int(match.group(2))}

    match = _BARE_PRICE_PATTERN.search(text)
    if match:
        return {"max_price": int(match.group(1))}

    return {}


# ============================================================================
# Extractor
# ============================================================================

def extract_entities(query: str) -> EntitySet:
    """
    Extract a best-effort EntitySet from a raw query. Never raises.

    Examples:
        "red silk kurta for women under 5000"
            -> color=red, fabric=silk, category=kurta, gender=Female, max_price=5000
        "mens kurtas" -> category=kurta, gender=Male
    """
    text = (query or "").strip().lower()
    if not text:
        return EntitySet()

    fields: Dict[str, object] = {
        "color": _first_match(text, _COLOR_PATTERNS),
        "fabric": _first_match(text, _FABRIC_PATTERNS),
        "category": _first_match(text, _CATEGORY_PATTERNS),
        "style": _first_match(text, _STYLE_PATTERNS),
        "gender": _extract_gender(text),
    }
    fields.update(_extract_price(text))
    if _NOVELTY_PATTERN.search(text):
        fields["is_new"] = True
    if _DISCOUNT_PATTERN.search(text):
        fields["has_discount"] = True

    entities = EntitySet(**{k: v for k, v in fields.items() if v is not None})
    logger.debug("Rule-based extraction", query=query, entities=entities.to_filters())
    return entities
