"""
Shared error handling for the recipe access client.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class RecipeClientException(Exception):
    """Base exception for the recipe access client."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class ExternalServiceError(RecipeClientException):
    """External service errors (connection failures, timeouts, open circuit)."""

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)


class RecipeAPIError(ExternalServiceError):
    """Non-2xx response from the recipe API."""

    def __init__(self, status_code: int, message: str = "Unexpected response", details: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        details = dict(details or {})
        details.setdefault("status_code", status_code)
        super().__init__("recipe_api", message, details)
        self.code = "RECIPE_API_ERROR"


class RecipeNotFoundError(RecipeAPIError):
    """The requested recipe does not exist."""

    def __init__(self, message: str = "Recipe not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(404, message, details)
        self.code = "RECIPE_NOT_FOUND"
