"""
HTTP client for the remote recipe API.
"""

import time
from typing import Any, Dict, Mapping, Optional

import httpx

from shared.circuit_breaker import CircuitBreaker
from shared.errors import ExternalServiceError, RecipeAPIError, RecipeNotFoundError
from shared.logging import get_logger, get_request_id
from shared.metrics import MetricsCollector
from shared.retry import RetryConfig, RetryError, call_with_retry


RECIPES_PATH = "/api/v1/recipes"


class _ServerError(Exception):
    """5xx response, raised inside the breaker so it counts as a failure."""

    def __init__(self, response: httpx.Response):
        super().__init__(f"status {response.status_code}")
        self.response = response


class RecipeApiClient:
    """Client for the recipe REST API.

    Responses are returned verbatim (decoded JSON, ``None`` for an empty
    body, raw text when the body is not JSON). GET requests are retried on
    transport errors; writes are sent exactly once.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        retry_config: Optional[RetryConfig] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.logger = get_logger("recipes.api_client")
        self.metrics = metrics
        self.transport = transport

        self.retry_config = retry_config or RetryConfig(
            max_attempts=3,
            base_delay=0.5,
            max_delay=5.0,
            exponential_base=2.0,
            jitter=True
        )
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=5,
            recovery_timeout=30.0,
            name="recipe_api"
        )

    async def list_recipes(self, params: Optional[Mapping[str, Any]] = None) -> Any:
        """GET /api/v1/recipes"""
        return await self.request("GET", RECIPES_PATH, params=params)

    async def fetch_recipe(self, recipe_id: Any) -> Any:
        """GET /api/v1/recipes/{id}"""
        return await self.request("GET", f"{RECIPES_PATH}/{recipe_id}")

    async def create_recipe(self, data: Mapping[str, Any]) -> Any:
        """POST /api/v1/recipes"""
        return await self.request("POST", RECIPES_PATH, json=data)

    async def replace_recipe(self, recipe_id: Any, data: Mapping[str, Any]) -> Any:
        """PUT /api/v1/recipes/{id}"""
        return await self.request("PUT", f"{RECIPES_PATH}/{recipe_id}", json=data)

    async def update_recipe_fields(self, recipe_id: Any, data: Mapping[str, Any]) -> Any:
        """PATCH /api/v1/recipes/{id}"""
        return await self.request("PATCH", f"{RECIPES_PATH}/{recipe_id}", json=data)

    async def remove_recipe(self, recipe_id: Any) -> Any:
        """DELETE /api/v1/recipes/{id}"""
        return await self.request("DELETE", f"{RECIPES_PATH}/{recipe_id}")

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Send one API call through the circuit breaker (and retries for GET)."""
        url = f"{self.base_url}{path}"

        async def _send() -> httpx.Response:
            return await self.circuit_breaker.call(self._send_once, method, url, params, json)

        try:
            if method == "GET":
                response = await call_with_retry(
                    _send,
                    exceptions=(httpx.TransportError,),
                    config=self.retry_config,
                    name=f"recipe_api.{method.lower()}",
                )
            else:
                response = await _send()
        except _ServerError as exc:
            response = exc.response
        except RetryError as exc:
            self.logger.error("Recipe API unreachable", method=method, url=url, attempts=exc.attempts)
            raise ExternalServiceError(
                service="recipe_api",
                message=str(exc.last_exception),
                details={"method": method, "url": url, "attempts": exc.attempts}
            ) from exc
        except httpx.HTTPError as exc:
            self.logger.error("Recipe API transport error", method=method, url=url, error=str(exc))
            raise ExternalServiceError(
                service="recipe_api",
                message=str(exc),
                details={"method": method, "url": url}
            ) from exc

        if response.is_success:
            return self._decode(response)

        self.logger.error(
            "Recipe API request failed",
            method=method,
            url=url,
            status_code=response.status_code,
            response=response.text
        )
        details = {"method": method, "url": url, "body": response.text}
        if response.status_code == 404:
            raise RecipeNotFoundError(details=details)
        raise RecipeAPIError(
            response.status_code,
            message=f"Unexpected status {response.status_code}",
            details=details
        )

    async def _send_once(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, Any]],
        json: Optional[Mapping[str, Any]],
    ) -> httpx.Response:
        headers: Dict[str, str] = {"Accept": "application/json"}
        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id

        start = time.perf_counter()
        status = "error"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(
                    method,
                    url,
                    params=dict(params) if params else None,
                    json=dict(json) if json is not None else None,
                    headers=headers,
                )
            status = str(response.status_code)
        finally:
            self._record_request(method, status, time.perf_counter() - start)

        self.logger.debug("Recipe API response", method=method, url=url, status_code=response.status_code)
        if response.status_code >= 500:
            raise _ServerError(response)
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def _record_request(self, method: str, status: str, duration: float) -> None:
        if not self.metrics:
            return
        try:
            self.metrics.record_api_request(method, status, duration)
        except Exception as exc:  # pragma: no cover - metrics failures should never break requests
            self.logger.debug("Failed to record API metrics", error=str(exc))
