"""
Autocomplete Service.

Suggests product names, categories, brands and "fabric category" /
"color category" phrases for a partial query, from in-stock products.
"""

import threading
from typing import Any, Dict, List, Optional

from config.settings import Settings, get_settings
from core.logging import get_logger
from search.models import SuggestionsResponse

logger = get_logger(__name__)

MIN_QUERY_LENGTH = 2
_SUGGESTION_COLUMNS = ("name", "category", "brand", "fabric", "color")


def _matches(value: Any, needle: str) -> bool:
    return isinstance(value, str) and needle in value.lower()


def _suggestions_from_rows(rows: List[Dict[str, Any]], needle: str, limit: int) -> List[str]:
    # dict keys keep insertion order and de-duplicate
    seen: Dict[str, None] = {}
    for row in rows:
        category = row.get("category") or ""
        for column in ("name", "category", "brand"):
            if _matches(row.get(column), needle):
                seen.setdefault(row[column], None)
        for column in ("fabric", "color"):
            if _matches(row.get(column), needle):
                seen.setdefault(f"{row[column]} {category}".strip().lower(), None)
    return list(seen)[:limit]


class AutocompleteService:
    """Product-table backed suggestions for the search bar."""

    def __init__(self, supabase: Any = None, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self._supabase = supabase
        self._table = settings.products_table

    @property
    def supabase(self):
        if self._supabase is None:
            from config.database import get_supabase_client
            self._supabase = get_supabase_client()
        return self._supabase

    def suggest(self, query: str, limit: int = 5) -> SuggestionsResponse:
        """
        Get up to ``limit`` suggestions for ``query``.

        Queries shorter than two characters return no suggestions. Rows are
        over-fetched (3x limit) because several rows collapse into the same
        suggestion.
        """
        text = (query or "").strip()
        if len(text) < MIN_QUERY_LENGTH:
            return SuggestionsResponse(query=query, suggestions=[])

        needle = text.lower()
        term = text.replace("%", "").replace("_", "")
        for ch in ",()":
            term = term.replace(ch, "")
        term = term.strip()
        if not term:
            return SuggestionsResponse(query=query, suggestions=[])
        expression = ",".join(f"{col}.ilike.%{term}%" for col in _SUGGESTION_COLUMNS)

        try:
            result = (
                self.supabase.table(self._table)
                .select(", ".join(_SUGGESTION_COLUMNS))
                .eq("in_stock", True)
                .or_(expression)
                .limit(limit * 3)
                .execute()
            )
        except Exception as e:
            logger.warning("Autocomplete query failed", query=query, error=str(e))
            return SuggestionsResponse(query=query, suggestions=[])

        suggestions = _suggestions_from_rows(result.data or [], needle, limit)
        return SuggestionsResponse(query=query, suggestions=suggestions)


# =============================================================================
# Singleton
# =============================================================================

_service: Optional[AutocompleteService] = None
_service_lock = threading.Lock()


def get_autocomplete_service() -> AutocompleteService:
    """Get or create the AutocompleteService singleton (thread-safe)."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = AutocompleteService()
    return _service
