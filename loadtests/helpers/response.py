"""Response error extraction for load test observability.

Turns storefront API error bodies into one readable line. Three shapes occur:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "..."}]}
- Access checks (401/403) and plain HTTP errors: {"detail": "msg"}
- Domain failures (400/404/409): {"error": {"field": ["msg", ...]}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response

MAX_DETAIL_LENGTH = 300


def _messages(value) -> str:
    if isinstance(value, list):
        return "; ".join(str(v) for v in value)
    return str(value)


def extract_error_detail(response: Response) -> str:
    """Return a compact error description for Locust failure messages and log lines."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:MAX_DETAIL_LENGTH] or "(empty response body)"

    if not isinstance(body, dict):
        return str(body)[:MAX_DETAIL_LENGTH]

    detail = body.get("detail")
    if isinstance(detail, list):
        parts = []
        for err in detail:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)
    if detail is not None:
        return str(detail)

    error = body.get("error")
    if isinstance(error, dict):
        return " | ".join(f"{field}: {_messages(msgs)}" for field, msgs in error.items())
    if error is not None:
        return str(error)

    return str(body)[:MAX_DETAIL_LENGTH]
