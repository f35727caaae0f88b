"""
Shared utilities for the recipe access client.

This package aggregates common building blocks consumed by the service
packages:

- config: Client configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- retry: Retry decorators for idempotent calls
- circuit_breaker: Resilient external call protection

Any cross-service logic should live here to avoid import cycles across
service packages. Do not import from service_* packages into shared/.
"""
