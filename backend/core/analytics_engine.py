"""
Thin httpx wrapper around the analytics engine's JSON API.
Every failure is raised as AnalyticsEngineError carrying an HTTP status and a
user-facing message.
"""
from typing import Any

import httpx
from loguru import logger

from core import config
from core.config import ENGINE_TIMEOUT_SECONDS

HTTP_STATUS_MESSAGES: dict[int, str] = {
    400: "Invalid request. Please check your input.",
    401: "Authentication with the analytics engine failed.",
    403: "You don't have permission to perform this action.",
    404: "Resource not found.",
    408: "Request timeout. Please try again.",
    422: "Invalid request data. Please check your input and try again.",
    429: "Too many requests. Please wait before trying again.",
    500: "Internal server error. Please try again later.",
    502: "Service temporarily unavailable. Please try again.",
    503: "Service is under maintenance. Please try again later.",
    504: "Request timeout. The service took too long to respond.",
}


class AnalyticsEngineError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response) -> str:
    """Prefer the engine's own detail/message, then the status table."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("detail", "message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return HTTP_STATUS_MESSAGES.get(
        response.status_code, f"Request failed with status {response.status_code}."
    )


def _request(
    method: str,
    path: str,
    payload: dict[str, Any] | None = None,
    timeout: float = ENGINE_TIMEOUT_SECONDS,
) -> Any:
    base_url = config.ANALYTICS_ENGINE_URL
    if not base_url:
        raise AnalyticsEngineError(503, "Analytics engine is not configured.")

    try:
        with httpx.Client(base_url=base_url, timeout=timeout) as client:
            response = client.request(method, path, json=payload)
            response.raise_for_status()
            return response.json()
    except httpx.TimeoutException:
        logger.error(f"Analytics engine timed out after {timeout}s: {method} {path}")
        raise AnalyticsEngineError(504, HTTP_STATUS_MESSAGES[504])
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        logger.error(f"Analytics engine returned {status}: {method} {path}")
        raise AnalyticsEngineError(status, _error_message(exc.response))
    except httpx.TransportError as exc:
        logger.error(f"Analytics engine unreachable: {method} {path} ({exc})")
        raise AnalyticsEngineError(502, HTTP_STATUS_MESSAGES[502])
    except ValueError:
        logger.error(f"Analytics engine sent a non-JSON body: {method} {path}")
        raise AnalyticsEngineError(502, "Analytics engine returned an invalid response.")


def get(path: str, timeout: float = ENGINE_TIMEOUT_SECONDS) -> Any:
    return _request("GET", path, timeout=timeout)


def post(
    path: str,
    payload: dict[str, Any],
    timeout: float = ENGINE_TIMEOUT_SECONDS,
) -> Any:
    return _request("POST", path, payload=payload, timeout=timeout)
