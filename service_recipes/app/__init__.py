"""
Recipe access service package.

Mediates every recipe read and write against the remote recipe API:
- Caching: in-memory TTL cache in front of network reads
- Invalidation: every mutation evicts the entity key and all listings
- Resilience: retries for idempotent reads and a circuit breaker

Structure:
- app.main: explicit wiring of cache, transport and service.
- app.caching: TTL cache store.
- app.adapters: HTTP client for the remote recipe API.
- app.recipes: query models and the recipe access service.
"""
