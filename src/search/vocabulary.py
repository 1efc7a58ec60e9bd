"""
Fixed vocabularies and weights for search query interpretation.

Order matters: the rule-based extractor walks each tuple front to back and
keeps the first hit, so earlier entries win when a query names two values
of the same kind ("red and black kurta" -> red).
"""

from typing import Dict, Tuple


# ============================================================================
# Attribute vocabularies
# ============================================================================

COLORS: Tuple[str, ...] = (
    "red", "blue", "black", "white", "green", "yellow", "pink", "purple",
    "orange", "brown", "grey", "gray", "beige", "cream", "navy", "maroon",
    "golden", "silver", "teal", "turquoise", "coral", "olive", "mustard",
)

FABRICS: Tuple[str, ...] = (
    "cotton", "silk", "chiffon", "lawn", "linen", "wool", "velvet",
    "satin", "organza", "denim", "leather", "suede", "polyester", "rayon", "lycra",
)

# (singular, plural) surface forms; the singular is the stored value.
CATEGORIES: Tuple[Tuple[str, str], ...] = (
    ("dress", "dresses"),
    ("kurta", "kurtas"),
    ("kameez", "kameez"),
    ("shirt", "shirts"),
    ("trouser", "trousers"),
    ("pant", "pants"),
    ("jeans", "jeans"),
    ("jacket", "jackets"),
    ("coat", "coats"),
    ("skirt", "skirts"),
    ("top", "tops"),
    ("blouse", "blouses"),
    ("dupatta", "dupattas"),
    ("shawl", "shawls"),
)

STYLES: Tuple[str, ...] = (
    "elegant", "casual", "formal", "party", "wedding", "traditional",
    "modern", "vintage", "chic", "minimalist", "luxury", "festive",
    "printed", "embroidered", "plain", "summer", "winter",
)


# ============================================================================
# Gender
# ============================================================================

MALE = "Male"
FEMALE = "Female"

GENDER_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    MALE: ("men", "man", "boy", "boys", "mens", "men's", "gents", "male"),
    FEMALE: ("women", "woman", "girl", "girls", "womens", "women's", "ladies", "female"),
}

# When a query carries synonyms from both sets, the first gender listed here
# wins ("shirts for men and women" -> Male).
GENDER_PRIORITY: Tuple[str, ...] = (MALE, FEMALE)


# ============================================================================
# Price phrases
# ============================================================================

# Tried in order; the first pattern that matches decides the price bounds.
MAX_PRICE_PHRASES: Tuple[str, ...] = (
    r"under\s+(\d+)",
    r"below\s+(\d+)",
    r"less\s+than\s+(\d+)",
    r"up\s+to\s+(\d+)",
)
PRICE_RANGE_PATTERN = r"(\d+)\s*-\s*(\d+)"
BARE_PRICE_PATTERN = r"(\d{3,5})"


# ============================================================================
# Flags
# ============================================================================

NOVELTY_KEYWORDS: Tuple[str, ...] = ("new", "latest", "fresh", "recent")
DISCOUNT_KEYWORDS: Tuple[str, ...] = ("sale", "discount", "offer", "deal")

# Value of the catalog's ``is_new`` column for newly added products.
NOVELTY_MARKER = "New"


# ============================================================================
# Relevance weights
# ============================================================================

RELEVANCE_WEIGHTS: Dict[str, float] = {
    "color": 3.0,
    "fabric": 3.0,
    "category": 4.0,
    "gender": 2.0,
    "style": 2.0,
    "style_in_name": 1.0,
    "is_new": 0.5,
    "discount": 0.5,
}
