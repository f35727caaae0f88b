"""
Adapters package for the recipe service.

Contains the HTTP client wrapper for the remote recipe API. The adapter
encapsulates:

- Base URL and request shapes
- Retry policy (reads only) and circuit breaker
- Error handling that maps to shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .recipe_api_client import RecipeApiClient

__all__ = [
    "RecipeApiClient",
]
