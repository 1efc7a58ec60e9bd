"""
Search Analytics Tracking.

Records searched queries in Supabase and derives the "popular searches"
list shown under the search bar. Failures here never break a search.
"""

import threading
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional

from config.settings import Settings, get_settings
from core.logging import get_logger

logger = get_logger(__name__)


# Shown until enough distinct queries have been recorded.
DEFAULT_POPULAR_SEARCHES = [
    "embroidered lawn suit",
    "blue silk kurta",
    "bridal lehenga under 10000",
]


class SearchAnalytics:
    """
    Track search queries for the popular-searches list.

    Table:
    - search_history: one row per searched query (query, searched_at)
    """

    def __init__(self, supabase: Any = None, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self._supabase = supabase
        self._table = settings.search_history_table
        self._window_days = settings.popular_searches_window_days

    @property
    def supabase(self):
        if self._supabase is None:
            from config.database import get_supabase_client
            self._supabase = get_supabase_client()
        return self._supabase

    # =========================================================================
    # Search Events
    # =========================================================================

    def track_search(self, query: str) -> None:
        """Record a searched query (trimmed, lower-cased). Blank queries are skipped."""
        normalized = (query or "").strip().lower()
        if not normalized:
            return
        try:
            self.supabase.table(self._table).insert({
                "query": normalized,
                "searched_at": datetime.now(timezone.utc).isoformat(),
            }).execute()
        except Exception as e:
            logger.warning("Failed to track search", query=normalized, error=str(e))

    # =========================================================================
    # Popular Searches
    # =========================================================================

    def popular_searches(self, limit: int = 3) -> List[str]:
        """
        Most frequent queries of the last N days, most frequent first.

        Falls back to DEFAULT_POPULAR_SEARCHES when the history is
        unavailable or holds fewer than ``limit`` distinct queries.
        """
        since = datetime.now(timezone.utc) - timedelta(days=self._window_days)
        try:
            result = (
                self.supabase.table(self._table)
                .select("query")
                .gte("searched_at", since.isoformat())
                .order("searched_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.warning("Failed to load popular searches", error=str(e))
            return list(DEFAULT_POPULAR_SEARCHES)

        counts = Counter(row.get("query") for row in (result.data or []) if row.get("query"))
        # Counter.most_common keeps first-seen order among equal counts.
        top = [query for query, _ in counts.most_common(limit)]
        if len(top) < limit:
            return list(DEFAULT_POPULAR_SEARCHES)
        return top


# =============================================================================
# Singleton
# =============================================================================

_analytics: Optional[SearchAnalytics] = None
_analytics_lock = threading.Lock()


def get_search_analytics() -> SearchAnalytics:
    """Get or create the SearchAnalytics singleton (thread-safe)."""
    global _analytics
    if _analytics is None:
        with _analytics_lock:
            if _analytics is None:
                _analytics = SearchAnalytics()
    return _analytics
