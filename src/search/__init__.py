"""
Natural-language Search Module.

Provides:
- extract_entities: rule-based query interpretation (fixed vocabularies)
- EntityPlanner: LLM entity extraction merged over the rule-based result
- ProductStore: filtered, paginated Supabase product query
- RelevanceReranker: additive relevance scoring with stable ordering
- NLPSearchService: the end-to-end pipeline
- SearchAnalytics / AutocompleteService: search history and suggestions
"""

from search.analytics import SearchAnalytics, get_search_analytics
from search.autocomplete import AutocompleteService, get_autocomplete_service
from search.entity_extractor import extract_entities
from search.entity_planner import EntityPlanner, ExtractionError, get_entity_planner
from search.models import EntitySet, NLPSearchResponse, ProductRecord, SearchQuery
from search.nlp_search import NLPSearchService, get_nlp_search_service
from search.product_store import ProductStore, StoreQueryError, build_predicates, get_product_store
from search.reranker import RelevanceReranker

__all__ = [
    "AutocompleteService",
    "EntityPlanner",
    "EntitySet",
    "ExtractionError",
    "NLPSearchResponse",
    "NLPSearchService",
    "ProductRecord",
    "ProductStore",
    "RelevanceReranker",
    "SearchAnalytics",
    "SearchQuery",
    "StoreQueryError",
    "build_predicates",
    "extract_entities",
    "get_autocomplete_service",
    "get_entity_planner",
    "get_nlp_search_service",
    "get_product_store",
    "get_search_analytics",
]
