"""
Natural-language search pipeline.

    raw query
      -> EntityPlanner (LLM, merged over rule-based entities)
      -> ProductStore (filtered, paginated, most recent first)
      -> RelevanceReranker (additive match score, stable sort)
      -> NLPSearchResponse

Stages run sequentially; extraction must finish before the store is queried.
An extraction failure degrades to rule-based entities inside the planner.
A store failure (StoreQueryError) propagates to the caller.
"""

import threading
import time
from typing import Optional

from core.logging import get_logger
from search.entity_planner import EntityPlanner, get_entity_planner
from search.models import NLPSearchResponse, SearchQuery
from search.product_store import ProductStore, get_product_store
from search.reranker import RelevanceReranker

logger = get_logger(__name__)


class NLPSearchService:
    """Interpret a free-text query, fetch matching products and rank them."""

    def __init__(
        self,
        planner: Optional[EntityPlanner] = None,
        store: Optional[ProductStore] = None,
        reranker: Optional[RelevanceReranker] = None,
    ):
        self._planner = planner
        self._store = store
        self._reranker = reranker or RelevanceReranker()

    @property
    def planner(self) -> EntityPlanner:
        if self._planner is None:
            self._planner = get_entity_planner()
        return self._planner

    @property
    def store(self) -> ProductStore:
        if self._store is None:
            self._store = get_product_store()
        return self._store

    def search(self, request: SearchQuery) -> NLPSearchResponse:
        """
        Run the full pipeline for one request.

        Raises:
            StoreQueryError: the product query failed.
        """
        t_start = time.perf_counter()

        entities = self.planner.extract(request.query)
        t_extract = time.perf_counter()

        page = self.store.search(entities, limit=request.limit, offset=request.offset)
        t_store = time.perf_counter()

        results = self._reranker.rerank(page.records, entities)
        t_end = time.perf_counter()

        logger.info(
            "NLP search completed",
            query=request.query,
            entities=entities.to_filters(),
            total=page.total,
            returned=len(results),
            extract_ms=round((t_extract - t_start) * 1000, 1),
            store_ms=round((t_store - t_extract) * 1000, 1),
            rank_ms=round((t_end - t_store) * 1000, 1),
        )

        return NLPSearchResponse(
            query=request.query,
            entities=entities,
            total=page.total,
            returned=len(results),
            results=results,
        )


# =============================================================================
# Singleton
# =============================================================================

_service: Optional[NLPSearchService] = None
_service_lock = threading.Lock()


def get_nlp_search_service() -> NLPSearchService:
    """Get or create the NLPSearchService singleton (thread-safe)."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = NLPSearchService()
    return _service
