"""
Search API Routes.

Provides natural-language product search, popular searches and
search-bar suggestions. Search endpoints are public.

NOTE: Routes use `def` (not `async def`) because the underlying clients
(Supabase, OpenAI) are synchronous. FastAPI runs sync handlers in a
thread pool, so a slow completion call does not block the event loop.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from core.logging import get_logger
from search.analytics import SearchAnalytics, get_search_analytics
from search.autocomplete import AutocompleteService, get_autocomplete_service
from search.models import (
    NLPSearchResponse,
    PopularSearchesResponse,
    SearchErrorResponse,
    SearchQuery,
    SuggestionsResponse,
)
from search.nlp_search import NLPSearchService, get_nlp_search_service

logger = get_logger(__name__)

SEARCH_PREFIX = "/api/search"

router = APIRouter(prefix=SEARCH_PREFIX, tags=["Search"])


# =============================================================================
# Natural-language Search
# =============================================================================

@router.post(
    "/nlp",
    response_model=NLPSearchResponse,
    responses={
        400: {"model": SearchErrorResponse, "description": "Missing, blank or invalid query"},
        503: {"model": SearchErrorResponse, "description": "Product store unavailable"},
    },
    summary="Natural-language product search",
)
def nlp_search(
    request: SearchQuery,
    service: NLPSearchService = Depends(get_nlp_search_service),
    analytics: SearchAnalytics = Depends(get_search_analytics),
):
    """
    Search products with a free-text query such as
    "red silk kurta for women under 5000".

    The query is interpreted into entities (color, fabric, category, gender,
    style, price bounds, new / sale flags), matched against in-stock
    products and ordered by relevance.

    A successful search with no matches returns `success: true` and an empty
    `results` list. A store failure returns 503 with `success: false`.
    """
    if not request.query.strip():
        return JSONResponse(
            status_code=400,
            content=SearchErrorResponse(error="Query is required").model_dump(exclude_none=True),
        )

    analytics.track_search(request.query)
    return service.search(request)


# =============================================================================
# Popular Searches
# =============================================================================

@router.get(
    "/popular",
    response_model=PopularSearchesResponse,
    summary="Most searched queries of the last 30 days",
)
def popular_searches(
    limit: int = Query(3, ge=1, le=20),
    analytics: SearchAnalytics = Depends(get_search_analytics),
) -> PopularSearchesResponse:
    return PopularSearchesResponse(searches=analytics.popular_searches(limit=limit))


# =============================================================================
# Suggestions
# =============================================================================

@router.get(
    "/suggestions",
    response_model=SuggestionsResponse,
    summary="Search-bar suggestions for a partial query",
)
def suggestions(
    q: str = Query("", max_length=200, description="Partial query"),
    limit: int = Query(5, ge=1, le=20),
    service: AutocompleteService = Depends(get_autocomplete_service),
) -> SuggestionsResponse:
    return service.suggest(q, limit=limit)
