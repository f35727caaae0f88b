"""
Recipe domain package: query models and the cached access service.
"""

from .models import CacheTTLPolicy, RecipeQuery, estimate_total_pages, is_success, unwrap_payload
from .service import RecipeService

__all__ = [
    "CacheTTLPolicy",
    "RecipeQuery",
    "RecipeService",
    "estimate_total_pages",
    "is_success",
    "unwrap_payload",
]
