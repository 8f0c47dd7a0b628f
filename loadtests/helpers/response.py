"""Response error extraction for load test observability.

Parses Storefront API error responses into human-readable messages.
Every error body has the shape ``{"error": {"field": ["msg", ...]}, "code": "ErrorClass"}``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    """
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if "error" in body:
        error = body["error"]
        code = body.get("code", "Error")
        if isinstance(error, dict):
            messages = []
            for field, problems in error.items():
                problems = problems if isinstance(problems, list) else [problems]
                messages.extend(f"{field}: {problem}" for problem in problems)
            return f"{code}: " + " | ".join(messages)
        return f"{code}: {error}"

    return str(body)[:300]


def error_code(response: Response) -> str | None:
    """The error class name carried by an error response, if any."""
    try:
        return response.json().get("code")
    except ValueError:
        return None
