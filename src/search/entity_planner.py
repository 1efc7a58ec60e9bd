"""
LLM-based entity extraction for natural-language search.

Sends the raw query to an OpenAI chat completion with a fixed instruction
prompt and parses the JSON reply into search entities. The result is laid
over the rule-based extraction (search.entity_extractor): the LLM wins per
field, fields only the rules found are kept.

Falls back to the rule-based entities alone when:
- OpenAI API key is not configured or the feature flag is off
- The query is blank
- The completion call fails or times out
- The reply is not a JSON object or does not match ExtractedEntities

The completion call is never retried.
"""

import json
import re
import threading
import time
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from config.settings import Settings, get_settings
from core.logging import get_logger
from search.entity_extractor import extract_entities
from search.models import EntitySet, Gender
from search.vocabulary import CATEGORIES, GENDER_SYNONYMS

logger = get_logger(__name__)


class ExtractionError(Exception):
    """The completion endpoint was unreachable or returned an unusable reply."""
    pass


# =============================================================================
# Reply Schema
# =============================================================================

_PLURAL_TO_SINGULAR = {plural: singular for singular, plural in CATEGORIES}

_GENDER_LOOKUP = {
    synonym: gender
    for gender, synonyms in GENDER_SYNONYMS.items()
    for synonym in synonyms
}


class ExtractedEntities(BaseModel):
    """Schema the completion reply must satisfy. Unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore")

    color: Optional[str] = None
    fabric: Optional[str] = None
    category: Optional[str] = None
    gender: Optional[Gender] = None
    style: Optional[str] = None
    min_price: Optional[int] = Field(None, ge=0)
    max_price: Optional[int] = Field(None, ge=0)
    is_new: Optional[bool] = None
    has_discount: Optional[bool] = None

    @field_validator("color", "fabric", "category", "style", mode="before")
    @classmethod
    def normalize_term(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    @field_validator("category", mode="after")
    @classmethod
    def singular_category(cls, v):
        if v is None:
            return v
        return _PLURAL_TO_SINGULAR.get(v, v)

    @field_validator("gender", mode="before")
    @classmethod
    def normalize_gender(cls, v):
        if isinstance(v, str):
            key = v.strip().lower()
            if not key:
                return None
            return _GENDER_LOOKUP.get(key, v.strip().capitalize())
        return v

    @field_validator("min_price", "max_price", mode="before")
    @classmethod
    def round_price(cls, v):
        if isinstance(v, float):
            return int(round(v))
        return v


# =============================================================================
# System Prompt
# =============================================================================

_SYSTEM_PROMPT = """You are the search assistant of a Pakistani fashion store. Read a shopper's search query and extract the product attributes it mentions.

Return a JSON object that may contain these keys:
- color: one color named in the query (red, blue, black, white, green, pink, maroon, navy, beige, cream, golden, silver, mustard, ...)
- fabric: one fabric named in the query (cotton, silk, chiffon, lawn, linen, wool, velvet, satin, organza, denim, leather, suede, polyester, rayon, lycra, ...)
- category: one product type, in singular form (dress, kurta, kameez, shalwar, shirt, trouser, pant, jeans, dupatta, shawl, jacket, coat, blazer, skirt, top, blouse, ...)
- gender: "Male" or "Female"
- style: one style keyword (elegant, casual, formal, party, wedding, traditional, modern, vintage, chic, minimalist, luxury, festive, printed, embroidered, plain, summer, winter, ...)
- min_price: lower price bound as a number
- max_price: upper price bound as a number ("under X", "below X", "less than X", "up to X", or a bare amount)
- is_new: true when the query asks for new, latest, fresh or recent items
- has_discount: true when the query asks for sale, discount, offer or deal items

GENDER:
- men, mens, men's, man, boy, boys, male, gents -> "Male"
- women, womens, women's, woman, girl, girls, female, ladies -> "Female"

RULES:
1. Only extract attributes that appear in the query. Omit a key rather than guess.
2. One value per key. Never return lists.
3. Plural product types become singular (kurtas -> kurta, dresses -> dress).
4. Return ONLY the JSON object. No markdown, no explanation.

Examples:
"red silk kurta for women under 5000" -> {"color":"red","fabric":"silk","category":"kurta","gender":"Female","max_price":5000}
"mens kurta" -> {"category":"kurta","gender":"Male"}
"elegant black dress" -> {"color":"black","category":"dress","style":"elegant"}
"men casual shirts under 3000" -> {"gender":"Male","category":"shirt","style":"casual","max_price":3000}
"blue denim jeans for boys" -> {"color":"blue","fabric":"denim","category":"jeans","gender":"Male"}
"womens printed kurtas" -> {"category":"kurta","style":"printed","gender":"Female"}"""

# First flat {...} object inside a reply that may carry surrounding prose.
_JSON_OBJECT = re.compile(r"\{[^{}]*\}")


# =============================================================================
# Parsing / Merging
# =============================================================================

def parse_extraction(raw: Optional[str]) -> ExtractedEntities:
    """
    Parse a completion reply into ExtractedEntities.

    Raises:
        ExtractionError: empty reply, invalid JSON, non-object JSON,
            or a schema mismatch (e.g. a list where one value is expected).
    """
    content = (raw or "").strip()
    if not content:
        raise ExtractionError("Completion returned an empty reply")

    match = _JSON_OBJECT.search(content)
    candidate = match.group(0) if match else content
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Completion reply is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ExtractionError(f"Completion reply is a {type(data).__name__}, expected an object")

    try:
        return ExtractedEntities.model_validate(data)
    except ValidationError as e:
        raise ExtractionError(f"Completion reply does not match schema: {e}") from e


def merge_entities(base: EntitySet, overlay: ExtractedEntities) -> EntitySet:
    """
    Lay the LLM entities over the rule-based ones.

    Step 1 takes every field of ``base``; step 2 overwrites each field the
    overlay set. Fields the overlay left unset keep the base value.
    """
    merged = base.to_filters()
    for field, value in overlay.model_dump(exclude_none=True).items():
        merged[field] = value
    return EntitySet(**merged)


# =============================================================================
# Entity Planner
# =============================================================================

class EntityPlanner:
    """Extract search entities with an OpenAI chat model, backed by rules."""

    def __init__(
        self,
        client: Any = None,
        settings: Optional[Settings] = None,
        fallback: Callable[[str], EntitySet] = extract_entities,
    ):
        settings = settings or get_settings()
        self._client = client
        self._client_lock = threading.Lock()
        self._api_key = settings.openai_api_key
        self._model = settings.entity_extractor_model
        self._timeout = settings.entity_extractor_timeout_seconds
        self._temperature = settings.entity_extractor_temperature
        self._max_tokens = settings.entity_extractor_max_tokens
        self._enabled = settings.entity_extractor_enabled and (
            client is not None or bool(self._api_key)
        )
        self._fallback = fallback

    @property
    def client(self):
        """Lazy-load OpenAI client."""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    from openai import OpenAI
                    self._client = OpenAI(
                        api_key=self._api_key,
                        timeout=self._timeout,
                        max_retries=0,
                    )
        return self._client

    @property
    def enabled(self) -> bool:
        return self._enabled

    def extract(self, query: str) -> EntitySet:
        """
        Extract entities for ``query``. Never raises on LLM failure.

        Returns the rule-based entities unchanged when the LLM is skipped or
        fails, otherwise the rule-based entities overlaid with the LLM's.
        """
        base = self._fallback(query)

        if not self._enabled:
            logger.debug("Entity planner disabled (no API key or feature flag off)")
            return base
        if not query or not query.strip():
            return base

        t_start = time.time()
        try:
            extracted = self._complete(query)
        except ExtractionError as e:
            logger.warning(
                "Entity extraction failed, falling back to rules",
                query=query,
                error=str(e),
                latency_ms=int((time.time() - t_start) * 1000),
            )
            return base

        merged = merge_entities(base, extracted)
        logger.info(
            "Entity planner extracted entities",
            query=query,
            llm_entities=extracted.model_dump(exclude_none=True),
            rule_entities=base.to_filters(),
            entities=merged.to_filters(),
            latency_ms=int((time.time() - t_start) * 1000),
        )
        return merged

    def _complete(self, query: str) -> ExtractedEntities:
        try:
            response = self.client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": _SYSTEM_PROMPT},
                    {"role": "user", "content": f'Extract attributes from: "{query}"'},
                ],
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
            raw = response.choices[0].message.content
        except Exception as e:
            raise ExtractionError(f"Completion request failed: {e}") from e

        return parse_extraction(raw)


# =============================================================================
# Singleton
# =============================================================================

_planner: Optional[EntityPlanner] = None
_planner_lock = threading.Lock()


def get_entity_planner() -> EntityPlanner:
    """Get or create the EntityPlanner singleton (thread-safe)."""
    global _planner
    if _planner is None:
        with _planner_lock:
            if _planner is None:
                _planner = EntityPlanner()
    return _planner
