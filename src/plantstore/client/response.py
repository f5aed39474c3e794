"""Helpers for reading :class:`httpx.Response` bodies.

:func:`extract_response_data` decodes a body for callers of the plant
facade, and :func:`error_detail` pulls the server's human-readable message
out of an error response so it can be carried on the raised exception.
"""

from __future__ import annotations

from typing import Any

import httpx


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    Tries JSON first and falls back to the raw text. Returns ``None`` for
    responses with no content (e.g. ``204 No Content`` after a delete).
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def json_object(response: httpx.Response) -> dict[str, Any]:
    """Return the body as a JSON object, or an empty dict if it is not one."""
    data = extract_response_data(response)
    return data if isinstance(data, dict) else {}


def error_detail(response: httpx.Response) -> str:
    """Return ``HTTP <status>`` plus the server's message, if it sent one.

    The storefront server reports errors as ``{"message": "..."}``; the
    ``error`` and ``detail`` keys used by other frameworks are honoured too.
    """
    data = extract_response_data(response)
    if isinstance(data, dict):
        msg = data.get("message") or data.get("error") or data.get("detail") or ""
    elif data is None:
        msg = ""
    else:
        msg = str(data)[:200]
    prefix = f"HTTP {response.status_code}"
    return f"{prefix}: {msg}" if msg else prefix
