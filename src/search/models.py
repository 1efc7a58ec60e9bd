"""
Pydantic models for the search API.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator


Gender = Literal["Male", "Female"]


# ============================================================================
# Query Interpretation
# ============================================================================

class EntitySet(BaseModel):
    """
    Structured interpretation of a free-text query.

    Every field is optional; an absent field leaves that attribute
    unconstrained. Instances are frozen once built.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    color: Optional[str] = None
    fabric: Optional[str] = None
    category: Optional[str] = None
    gender: Optional[Gender] = None
    style: Optional[str] = None
    min_price: Optional[int] = Field(None, ge=0, description="Inclusive lower price bound")
    max_price: Optional[int] = Field(None, ge=0, description="Inclusive upper price bound")
    is_new: Optional[bool] = None
    has_discount: Optional[bool] = None

    @model_validator(mode="before")
    @classmethod
    def order_price_bounds(cls, data: Any) -> Any:
        """Swap inverted price bounds ("5000-2000" means 2000..5000)."""
        if isinstance(data, dict):
            low, high = data.get("min_price"), data.get("max_price")
            if low is not None and high is not None and low > high:
                data = {**data, "min_price": high, "max_price": low}
        return data

    def to_filters(self) -> Dict[str, Any]:
        """Return only the constrained fields."""
        return self.model_dump(exclude_none=True)

    @property
    def is_empty(self) -> bool:
        return not self.to_filters()


# ============================================================================
# Request Models
# ============================================================================

class SearchQuery(BaseModel):
    """Request body for natural-language search."""

    model_config = ConfigDict(frozen=True)

    query: str = Field(..., max_length=500, description="Free-text search query")
    limit: int = Field(20, ge=1, le=100, description="Results per page")
    offset: int = Field(0, ge=0, description="Zero-based result offset")


# ============================================================================
# Response Models
# ============================================================================

# A ProductCard row exactly as the store returned it (id, name, brand, price,
# category, fabric, color, style, gender, is_new, discount, in_stock,
# Scraped_at, image_url, ...). The catalog owns the columns; search only reads
# and reorders rows.
ProductRecord = Dict[str, Any]


class NLPSearchResponse(BaseModel):
    """Successful search. An empty ``results`` list means no products matched."""

    success: bool = True
    query: str
    entities: EntitySet
    total: int = Field(..., ge=0, description="Matches before pagination")
    returned: int = Field(..., ge=0)
    results: List[ProductRecord] = Field(
        default_factory=list,
        description="Catalog rows, most relevant first, columns unchanged",
    )

    @field_serializer("entities")
    def serialize_entities(self, entities: EntitySet) -> Dict[str, Any]:
        return entities.to_filters()


class SearchErrorResponse(BaseModel):
    """Failed search; the client shows a "search unavailable" state."""

    success: bool = False
    error: str
    details: Optional[str] = None


class PopularSearchesResponse(BaseModel):
    searches: List[str]


class SuggestionsResponse(BaseModel):
    query: str
    suggestions: List[str]
