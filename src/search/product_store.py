"""
Product store query builder.

Translates an EntitySet into PostgREST predicates on the ProductCard table
and runs one paginated, count-returning query through supabase-py.

Filter semantics:
- in_stock = true, always
- gender: exact match
- min_price / max_price: inclusive range on price
- color / fabric / category: case-insensitive contains, ANDed
- style: contains on style OR category OR name
- is_new: exact match on the novelty marker
- has_discount: discount > 0

Results come back most recently scraped first.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional

from config.settings import Settings, get_settings
from core.logging import get_logger
from search.models import EntitySet
from search.vocabulary import NOVELTY_MARKER

logger = get_logger(__name__)


class StoreQueryError(Exception):
    """The product query failed; the search request cannot be served."""
    pass


class Predicate(NamedTuple):
    """One supabase-py filter call: ``query.<method>(column, value)``.

    ``or_`` predicates carry the whole PostgREST OR expression in ``value``
    and leave ``column`` empty.
    """
    method: str
    column: str
    value: Any


@dataclass
class StorePage:
    records: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0


# ============================================================================
# Predicate translation
# ============================================================================

_SUBSTRING_FIELDS = ("color", "fabric", "category")
_STYLE_COLUMNS = ("style", "category", "name")


def _like_term(value: str) -> str:
    """Strip LIKE wildcards so a term only matches literally."""
    return value.replace("%", "").replace("_", "").strip()


def _or_term(value: str) -> str:
    """Strip characters that would break a PostgREST OR expression."""
    for ch in ",()":
        value = value.replace(ch, "")
    return _like_term(value)


def build_predicates(entities: EntitySet) -> List[Predicate]:
    """Translate entities into the filter list for the products query."""
    predicates = [Predicate("eq", "in_stock", True)]

    if entities.gender:
        predicates.append(Predicate("eq", "gender", entities.gender))
    if entities.min_price is not None:
        predicates.append(Predicate("gte", "price", entities.min_price))
    if entities.max_price is not None:
        predicates.append(Predicate("lte", "price", entities.max_price))

    for name in _SUBSTRING_FIELDS:
        raw = getattr(entities, name)
        term = _like_term(raw) if raw else ""
        if term:
            predicates.append(Predicate("ilike", name, f"%{term}%"))

    style = _or_term(entities.style) if entities.style else ""
    if style:
        expression = ",".join(f"{col}.ilike.%{style}%" for col in _STYLE_COLUMNS)
        predicates.append(Predicate("or_", "", expression))

    if entities.is_new:
        predicates.append(Predicate("eq", "is_new", NOVELTY_MARKER))
    if entities.has_discount:
        predicates.append(Predicate("gt", "discount", 0))

    return predicates


def _apply(query, predicate: Predicate):
    if predicate.method == "or_":
        return query.or_(predicate.value)
    return getattr(query, predicate.method)(predicate.column, predicate.value)


# ============================================================================
# Store
# ============================================================================

class ProductStore:
    """Read-only access to the product catalog."""

    def __init__(self, client: Any = None, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self._client = client
        self._table = settings.products_table
        self._recency_column = settings.products_recency_column

    @property
    def client(self):
        if self._client is None:
            from config.database import get_supabase_client
            self._client = get_supabase_client()
        return self._client

    def search(self, entities: EntitySet, limit: int = 20, offset: int = 0) -> StorePage:
        """
        Run the filtered, paginated products query.

        Args:
            entities: Merged entities to filter on.
            limit: Page size.
            offset: Zero-based index of the first row.

        Returns:
            StorePage with the page rows and the pre-pagination match count.

        Raises:
            StoreQueryError: on any client or query failure.
        """
        predicates = build_predicates(entities)
        try:
            query = self.client.table(self._table).select("*", count="exact")
            for predicate in predicates:
                query = _apply(query, predicate)
            result = (
                query.order(self._recency_column, desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
        except Exception as e:
            logger.error(
                "Product query failed",
                table=self._table,
                filters=entities.to_filters(),
                error=str(e),
            )
            raise StoreQueryError(f"Product query failed: {e}") from e

        records = result.data or []
        total = result.count if result.count is not None else len(records)
        logger.debug(
            "Product query completed",
            predicates=len(predicates),
            returned=len(records),
            total=total,
        )
        return StorePage(records=records, total=total)


# ============================================================================
# Singleton
# ============================================================================

_store: Optional[ProductStore] = None
_store_lock = threading.Lock()


def get_product_store() -> ProductStore:
    """Get or create the ProductStore singleton (thread-safe)."""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = ProductStore()
    return _store
