"""
Recipe access service: cached reads and invalidating writes.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Sequence

from shared.logging import get_logger
from shared.metrics import MetricsCollector

from service_recipes.app.adapters.recipe_api_client import RecipeApiClient
from service_recipes.app.caching.ttl_cache import TTLCache
from service_recipes.app.recipes.models import (
    DETAIL_NAMESPACE,
    LIST_NAMESPACE,
    CacheTTLPolicy,
    QueryParams,
    detail_key,
    normalize_params,
    unwrap_payload,
)


_MISSING = object()


class RecipeService:
    """Coordinates the TTL cache and the recipe API for every recipe operation.

    Reads consult the cache under a key derived from their parameters and,
    on a miss (or when ``skip_cache`` is set), fetch from the API and store
    the response. Writes always go to the API; after a successful write the
    affected recipe key and every listing key are evicted. API errors
    propagate unchanged and are never cached.

    Concurrent identical reads are not de-duplicated: each one that misses
    fetches and writes the cache on its own, the last write winning.
    """

    def __init__(
        self,
        api_client: RecipeApiClient,
        cache: TTLCache,
        *,
        ttl_policy: Optional[CacheTTLPolicy] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self.api = api_client
        self.cache = cache
        self.ttl_policy = ttl_policy or CacheTTLPolicy()
        self.metrics = metrics
        self.logger = get_logger("recipes.service")

    async def get_recipes(self, params: QueryParams = None, *, skip_cache: bool = False) -> Any:
        """List recipes, filtered/sorted/paged by ``params``.

        Accepts a mapping or a ``RecipeQuery`` with any of ``page``, ``limit``,
        ``category``, ``difficulty``, ``sort_by``, ``order`` and ``search``.
        Results with a search term are cached for the (shorter) search TTL.
        """
        query = normalize_params(params)
        cache_key = self.cache.generate_key(LIST_NAMESPACE, query)
        cache_type = "search" if query.get("search") else "list"

        if not skip_cache:
            cached = self._read(cache_key, cache_type)
            if cached is not _MISSING:
                return cached

        response = await self.api.list_recipes(query)

        self.cache.set(cache_key, response, self.ttl_policy.for_listing(query))
        return response

    async def get_recipe_by_id(self, recipe_id: Any, *, skip_cache: bool = False) -> Any:
        """Fetch one recipe, cached for the detail TTL."""
        cache_key = detail_key(recipe_id)

        if not skip_cache:
            cached = self._read(cache_key, "detail")
            if cached is not _MISSING:
                return cached

        response = await self.api.fetch_recipe(recipe_id)

        self.cache.set(cache_key, response, self.ttl_policy.detail)
        return response

    async def get_recipes_by_ids(self, recipe_ids: Sequence[Any]) -> List[Dict[str, Any]]:
        """Fetch several recipes concurrently, e.g. a user's favorites.

        Returns the recipe payloads in input order, skipping ids whose fetch
        failed or whose payload carries no ``id``.
        """
        results = await asyncio.gather(
            *(self.get_recipe_by_id(recipe_id) for recipe_id in recipe_ids),
            return_exceptions=True,
        )

        recipes: List[Dict[str, Any]] = []
        for recipe_id, outcome in zip(recipe_ids, results):
            if isinstance(outcome, Exception):
                self.logger.warning("Skipping unavailable recipe", recipe_id=recipe_id, error=str(outcome))
                continue
            payload = unwrap_payload(outcome)
            if isinstance(payload, Mapping) and payload.get("id"):
                recipes.append(dict(payload))
            else:
                self.logger.warning("Skipping recipe without payload", recipe_id=recipe_id)
        return recipes

    async def create_recipe(self, recipe_data: Mapping[str, Any]) -> Any:
        """Create a recipe; every cached listing is evicted."""
        response = await self.api.create_recipe(recipe_data)

        # No recipe key to evict yet, but the new recipe may belong to any listing
        self._invalidate_listings()
        return response

    async def update_recipe(self, recipe_id: Any, recipe_data: Mapping[str, Any]) -> Any:
        """Replace a recipe (all fields required)."""
        response = await self.api.replace_recipe(recipe_id, recipe_data)
        self._invalidate_recipe(recipe_id)
        return response

    async def patch_recipe(self, recipe_id: Any, partial_data: Mapping[str, Any]) -> Any:
        """Update only the given fields of a recipe."""
        response = await self.api.update_recipe_fields(recipe_id, partial_data)
        self._invalidate_recipe(recipe_id)
        return response

    async def delete_recipe(self, recipe_id: Any) -> Any:
        response = await self.api.remove_recipe(recipe_id)
        self._invalidate_recipe(recipe_id)
        return response

    def clear_cache(self) -> int:
        """Evict every recipe listing and detail entry."""
        removed = self.cache.invalidate_prefix(DETAIL_NAMESPACE)
        self.logger.info("Cleared recipe cache", removed=removed)
        return removed

    def get_cache_stats(self) -> Dict[str, int]:
        return self.cache.get_stats()

    def _read(self, cache_key: str, cache_type: str) -> Any:
        cached = self.cache.get(cache_key, _MISSING)
        hit = cached is not _MISSING
        self.logger.debug("Cache hit" if hit else "Cache miss", key=cache_key, cache_type=cache_type)
        self._count("cache_hits_total" if hit else "cache_misses_total", cache_type=cache_type)
        return cached

    def _invalidate_recipe(self, recipe_id: Any) -> None:
        self.cache.invalidate(detail_key(recipe_id))
        self._count("cache_invalidations_total", scope="detail")
        self._invalidate_listings()

    def _invalidate_listings(self) -> None:
        removed = self.cache.invalidate_prefix(LIST_NAMESPACE)
        self._count("cache_invalidations_total", scope="listing")
        self.logger.info("Invalidated recipe listings", prefix=LIST_NAMESPACE, removed=removed)

    def _count(self, metric_name: str, **labels) -> None:
        if not self.metrics:
            return
        try:
            self.metrics.increment_counter(metric_name, **labels)
        except Exception as exc:  # pragma: no cover - metrics failures should never break reads or writes
            self.logger.debug("Failed to record cache metrics", error=str(exc))
