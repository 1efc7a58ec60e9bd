"""
Relevance Reranker.

Re-orders a page of already-filtered products by how well each one matches
the extracted entities. The store query guarantees every row satisfies the
filters; this pass only decides which of them come first.

Scoring is additive and per record (no cross-record normalization):

    color      record.color contains entity color        +3
    fabric     record.fabric contains entity fabric      +3
    category   record.category contains entity category  +4
    gender     record.gender equals entity gender        +2
    style      record.style contains entity style        +2
    style      record.name contains entity style         +1
    novelty    record.is_new is the novelty marker       +0.5
    discount   record.discount > 0                       +0.5

Ties keep the store's order (most recently scraped first).
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from core.logging import get_logger
from search.models import EntitySet
from search.vocabulary import NOVELTY_MARKER, RELEVANCE_WEIGHTS

logger = get_logger(__name__)


@dataclass
class RankedResult:
    """A record with its transient relevance annotations."""
    record: Dict[str, Any]
    score: float = 0.0
    match_count: int = 0


def _contains(value: Any, term: Optional[str]) -> bool:
    if not term or not isinstance(value, str):
        return False
    return term.lower() in value.lower()


def _as_number(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


class RelevanceReranker:
    """Score and stably sort product rows against an EntitySet."""

    def __init__(
        self,
        weights: Optional[Mapping[str, float]] = None,
        novelty_marker: str = NOVELTY_MARKER,
    ):
        self._weights = dict(RELEVANCE_WEIGHTS)
        if weights:
            self._weights.update(weights)
        self._novelty_marker = novelty_marker

    def score(self, record: Dict[str, Any], entities: EntitySet) -> RankedResult:
        w = self._weights
        result = RankedResult(record=record)

        def hit(weight_key: str, counts: bool = True) -> None:
            result.score += w[weight_key]
            if counts:
                result.match_count += 1

        if _contains(record.get("color"), entities.color):
            hit("color")
        if _contains(record.get("fabric"), entities.fabric):
            hit("fabric")
        if _contains(record.get("category"), entities.category):
            hit("category")
        if entities.gender and record.get("gender") == entities.gender:
            hit("gender")
        if entities.style:
            if _contains(record.get("style"), entities.style):
                hit("style")
            if _contains(record.get("name"), entities.style):
                hit("style_in_name", counts=False)

        is_new = record.get("is_new")
        if is_new is True or is_new == self._novelty_marker:
            hit("is_new", counts=False)
        if _as_number(record.get("discount")) > 0:
            hit("discount", counts=False)

        return result

    def rerank(self, records: List[Dict[str, Any]], entities: EntitySet) -> List[Dict[str, Any]]:
        """
        Return ``records`` sorted by descending relevance.

        The sort is stable, so equal scores keep their input order. The
        returned rows are the input dicts, without score annotations.
        """
        if not records:
            return []

        scored = [self.score(record, entities) for record in records]
        ordered = sorted(scored, key=lambda r: r.score, reverse=True)

        logger.debug(
            "Reranked results",
            count=len(ordered),
            top_score=ordered[0].score,
            top_matches=ordered[0].match_count,
        )
        return [r.record for r in ordered]
