"""
HTTP helpers.

This module centralizes the minimal HTTP client logic used by the collaborator clients.

Design goals:
- Small surface area (GET text, POST form text).
- Deterministic defaults (timeout + User-Agent).
- Raise on non-2xx so callers can decide how to fail (skip a checkpoint, return no route).

Bodies are returned as raw text: parsing and "does this look like an error page"
checks belong to the enrichment layer, not the transport.
"""

from __future__ import annotations

from typing import Any

import httpx


DEFAULT_USER_AGENT = "routescout/0.1.0 (+https://local)"


def _headers(user_agent: str | None, headers: dict[str, str] | None) -> dict[str, str]:
    request_headers = {"User-Agent": user_agent or DEFAULT_USER_AGENT}
    if headers:
        request_headers.update(headers)
    return request_headers


def get_text(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    user_agent: str | None = None,
    timeout_seconds: float = 15,
) -> str:
    """GET `url` and return the response body as text.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
    """
    with httpx.Client(timeout=timeout_seconds) as client:
        resp = client.get(url, params=params, headers=_headers(user_agent, headers))
        resp.raise_for_status()
        return resp.text


def post_form_text(
    url: str,
    *,
    data: dict[str, Any],
    headers: dict[str, str] | None = None,
    user_agent: str | None = None,
    timeout_seconds: float = 15,
) -> str:
    """POST `data` as form-encoded body and return the response body as text.

    Used by the Overpass client, whose query language travels in the `data` field.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
    """
    with httpx.Client(timeout=timeout_seconds) as client:
        resp = client.post(url, data=data, headers=_headers(user_agent, headers))
        resp.raise_for_status()
        return resp.text
