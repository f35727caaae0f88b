"""
Query, TTL-policy and response-envelope models for the recipe API.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from shared.config import RecipeClientConfig


LIST_NAMESPACE = "recipes"
DETAIL_NAMESPACE = "recipe"


def detail_key(recipe_id: Any) -> str:
    """Cache key of a single recipe, e.g. ``"recipe:42"``."""
    return f"{DETAIL_NAMESPACE}:{recipe_id}"


class RecipeQuery(BaseModel):
    """Typed builder for ``GET /api/v1/recipes`` query parameters."""

    model_config = ConfigDict(extra="forbid")

    page: Optional[int] = Field(default=None, ge=1)
    limit: Optional[int] = Field(default=None, ge=1)
    category: Optional[Literal["makanan", "minuman"]] = None
    difficulty: Optional[Literal["mudah", "sedang", "sulit"]] = None
    sort_by: Optional[str] = None
    order: Optional[Literal["asc", "desc"]] = None
    search: Optional[str] = None

    def to_params(self) -> Dict[str, Any]:
        """Query parameters with unset fields dropped."""
        return self.model_dump(exclude_none=True)


QueryParams = Union[RecipeQuery, Mapping[str, Any], None]


def normalize_params(params: QueryParams) -> Dict[str, Any]:
    """Plain dict of query parameters; ``None`` values mean "not specified"."""
    if params is None:
        return {}
    if isinstance(params, RecipeQuery):
        return params.to_params()
    return {name: value for name, value in params.items() if value is not None}


@dataclass(frozen=True)
class CacheTTLPolicy:
    """Seconds each kind of read stays cached."""

    list: float = 300.0
    detail: float = 600.0
    search: float = 180.0

    @classmethod
    def from_config(cls, config: RecipeClientConfig) -> "CacheTTLPolicy":
        return cls(
            list=config.list_ttl_seconds,
            detail=config.detail_ttl_seconds,
            search=config.search_ttl_seconds,
        )

    def for_listing(self, params: Mapping[str, Any]) -> float:
        """Search TTL when a search term is present, list TTL otherwise."""
        return self.search if params.get("search") else self.list


# Envelope helpers. The API wraps payloads as {"success": bool, "data": ..., ...};
# responses are cached unvalidated, so these only read the conventional fields.

def is_success(response: Any) -> bool:
    return isinstance(response, Mapping) and bool(response.get("success"))


def unwrap_payload(response: Any) -> Any:
    if isinstance(response, Mapping):
        return response.get("data")
    return None


def estimate_total_pages(response: Any, page: int, limit: int) -> int:
    """Page count for a listing response.

    Uses ``total`` when the API reports it. Otherwise a full page implies at
    least one more page, and a short page after the first one is the last.
    """
    limit = max(1, limit)
    total = response.get("total") if isinstance(response, Mapping) else None
    try:
        total = int(total) if total is not None else 0
    except (TypeError, ValueError):
        total = 0
    if total > 0:
        return max(1, math.ceil(total / limit))

    items = unwrap_payload(response) or []
    if len(items) == limit:
        return page + 1
    if page > 1:
        return page
    return 1
