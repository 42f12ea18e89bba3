"""Pipeline exceptions, error categories, and the structured tool error model.

The exception classes describe why a pipeline stage degraded. None of them
reach an analysis caller: the orchestrator catches them and moves on to the
next strategy. Tools use :func:`make_tool_error` for anything unexpected.
"""

from __future__ import annotations

from enum import Enum

import httpx
from pydantic import BaseModel


class PipelineError(Exception):
    """Base class for recoverable pipeline failures."""


class DetectionAmbiguous(PipelineError):
    """Input matched no detection rule; callers map this to ``unknown``."""


class ExtractionFailed(PipelineError):
    """A content extractor could not produce content."""


class StrategyError(PipelineError):
    """A generation strategy failed; the next strategy should be tried."""


class RemoteServiceUnavailable(StrategyError):
    """The analysis service is disabled, unconfigured, or unreachable."""


class RemoteServiceError(StrategyError):
    """The analysis service answered with a non-2xx status or a bad payload."""


class ModelUnavailable(StrategyError):
    """No model credential is configured."""


class ModelResponseMalformed(StrategyError):
    """The model response could not be turned into a title and description."""


class PersistenceUnavailable(PipelineError):
    """The remote portfolio store is unreachable or rejected a write."""


class ErrorCategory(str, Enum):
    """Categories of errors for diagnostics."""

    URL_INVALID = "URL_INVALID"
    API_PERMISSION_DENIED = "API_PERMISSION_DENIED"
    API_QUOTA_EXCEEDED = "API_QUOTA_EXCEEDED"
    API_INVALID_ARGUMENT = "API_INVALID_ARGUMENT"
    NETWORK_ERROR = "NETWORK_ERROR"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    ANALYSIS_SERVICE_ERROR = "ANALYSIS_SERVICE_ERROR"
    MODEL_RESPONSE_INVALID = "MODEL_RESPONSE_INVALID"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    PORTFOLIO_NOT_FOUND = "PORTFOLIO_NOT_FOUND"
    UNKNOWN = "UNKNOWN"


class ToolError(BaseModel):
    """Structured error returned from any tool."""

    success: bool = False
    error: str
    category: str
    hint: str
    retryable: bool = False
    retry_after_seconds: int | None = None


def categorize_error(error: Exception) -> tuple[ErrorCategory, str]:
    """Map an exception to an ErrorCategory + human-readable hint."""
    if isinstance(error, (TimeoutError, httpx.TimeoutException, httpx.NetworkError)):
        return (
            ErrorCategory.NETWORK_ERROR,
            "Request timed out or connection failed — try again or check connectivity",
        )
    if isinstance(error, FileNotFoundError):
        return (ErrorCategory.FILE_NOT_FOUND, "File not found — check the path")
    if isinstance(error, (RemoteServiceUnavailable, RemoteServiceError)):
        return (
            ErrorCategory.ANALYSIS_SERVICE_ERROR,
            "Analysis service failed — check PORTFLOW_ANALYSIS_SERVICE_URL",
        )
    if isinstance(error, ModelResponseMalformed):
        return (
            ErrorCategory.MODEL_RESPONSE_INVALID,
            "Model reply was not valid JSON with title and description",
        )
    if isinstance(error, PersistenceUnavailable):
        return (
            ErrorCategory.STORAGE_UNAVAILABLE,
            "Remote portfolio store unreachable — check WEAVIATE_URL",
        )

    s = str(error).lower()
    if "portfolio not found" in s:
        return (ErrorCategory.PORTFOLIO_NOT_FOUND, "No portfolio published under that slug")
    if "403" in s or "permission" in s:
        return (ErrorCategory.API_PERMISSION_DENIED, "API key lacks permission for this model")
    if "429" in s or "quota" in s or "resource_exhausted" in s:
        return (ErrorCategory.API_QUOTA_EXCEEDED, "Rate limit hit — wait and retry")
    if "too large" in s:
        return (ErrorCategory.FILE_TOO_LARGE, "File exceeds the upload size limit")
    if "url" in s and ("invalid" in s or "scheme" in s):
        return (ErrorCategory.URL_INVALID, "Provide an absolute http(s) URL")
    if "400" in s or isinstance(error, ValueError):
        return (ErrorCategory.API_INVALID_ARGUMENT, "Bad request — check input format")
    if "timeout" in s or "timed out" in s:
        return (ErrorCategory.NETWORK_ERROR, "Request timed out — try again or check connectivity")

    return (ErrorCategory.UNKNOWN, str(error))


def make_tool_error(error: Exception, fallback: dict | None = None) -> dict:
    """Create a serialisable ToolError dict from an exception.

    Args:
        error: The exception to describe.
        fallback: Optional best-effort payload attached under ``fallback``.
    """
    cat, hint = categorize_error(error)
    retryable = cat in {
        ErrorCategory.API_QUOTA_EXCEEDED,
        ErrorCategory.NETWORK_ERROR,
        ErrorCategory.STORAGE_UNAVAILABLE,
    }
    payload = ToolError(
        error=str(error) or type(error).__name__,
        category=cat.value,
        hint=hint,
        retryable=retryable,
        retry_after_seconds=60 if cat == ErrorCategory.API_QUOTA_EXCEEDED else None,
    ).model_dump(mode="json")
    if fallback is not None:
        payload["fallback"] = fallback
    return payload
