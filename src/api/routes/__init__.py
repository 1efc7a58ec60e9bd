"""
Route modules for the API.
"""

from api.routes import health
from api.routes import search

__all__ = ["health", "search"]
