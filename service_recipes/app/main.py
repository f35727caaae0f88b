"""
Wiring for the recipe access service.

Every collaborator is constructed explicitly so that callers (and tests)
own the cache lifecycle instead of sharing module-level state.
"""

from dataclasses import asdict
from typing import Optional

from shared.circuit_breaker import CircuitBreaker
from shared.config import RecipeClientConfig, get_config
from shared.logging import configure_logging, get_logger
from shared.metrics import MetricsCollector
from shared.retry import RetryConfig

from service_recipes.app.adapters.recipe_api_client import RecipeApiClient
from service_recipes.app.caching.ttl_cache import TTLCache
from service_recipes.app.recipes.models import CacheTTLPolicy
from service_recipes.app.recipes.service import RecipeService


SERVICE_NAME = "recipes"


def create_cache(config: RecipeClientConfig) -> TTLCache:
    """Create an empty cache sized and timed from configuration."""
    return TTLCache(
        default_ttl=config.default_ttl_seconds,
        max_entries=config.cache_max_entries,
    )


def create_api_client(
    config: RecipeClientConfig,
    metrics: Optional[MetricsCollector] = None,
) -> RecipeApiClient:
    """Create the recipe API client with configured retries and circuit breaker."""
    return RecipeApiClient(
        config.api_base_url,
        timeout=config.request_timeout,
        retry_config=RetryConfig(
            max_attempts=config.retry_max_attempts,
            base_delay=config.retry_base_delay,
            max_delay=5.0,
        ),
        circuit_breaker=CircuitBreaker(
            failure_threshold=config.circuit_failure_threshold,
            recovery_timeout=config.circuit_recovery_timeout,
            name="recipe_api",
        ),
        metrics=metrics,
    )


def create_recipe_service(
    config: Optional[RecipeClientConfig] = None,
    *,
    cache: Optional[TTLCache] = None,
    api_client: Optional[RecipeApiClient] = None,
    metrics: Optional[MetricsCollector] = None,
) -> RecipeService:
    """Create a recipe service, building any collaborator not supplied."""
    config = config or get_config()
    configure_logging(SERVICE_NAME, config.log_level)
    logger = get_logger(f"{SERVICE_NAME}.main")

    metrics = metrics or MetricsCollector(SERVICE_NAME)
    service = RecipeService(
        api_client or create_api_client(config, metrics),
        cache if cache is not None else create_cache(config),
        ttl_policy=CacheTTLPolicy.from_config(config),
        metrics=metrics,
    )

    logger.info(
        "Recipe service created",
        env=config.env,
        api_base_url=config.api_base_url,
        ttl_policy=asdict(service.ttl_policy),
        cache_max_entries=config.cache_max_entries,
    )
    return service
