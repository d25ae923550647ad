from typing import Optional

import httpx


class YouTubeAPIError(RuntimeError):
    """Raised when a Data API call fails at the HTTP or transport level."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, reason: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason or message
        super().__init__(message)


def error_reason(response: httpx.Response) -> str:
    """
    Extract the human-readable reason from a Data API error body.

    Falls back to the HTTP reason phrase when the body is not the usual
    {"error": {"message": ..., "errors": [{"reason": ...}]}} shape.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            details = error.get("errors") or []
            reason = None
            if details and isinstance(details[0], dict):
                reason = details[0].get("reason")
            message = error.get("message")
            if message and reason:
                return f"{message} ({reason})"
            if message or reason:
                return str(message or reason)

    return f"HTTP {response.status_code} {response.reason_phrase}".strip()
