"""Thin JSON transport over requests.

Every non-2xx response, connection problem and undecodable body is turned into
an :class:`ApiError` so callers only ever deal with one error type.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

import requests

from playlist_analyzer.errors import ApiError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def _error_text(response: requests.Response) -> str:
    try:
        text = response.text
    except (requests.RequestException, UnicodeDecodeError):
        text = ""
    return text or f"HTTP {response.status_code}"


def fetch_json(
    url: str,
    *,
    method: str = "GET",
    headers: Mapping[str, str] | None = None,
    data: str | Mapping[str, str] | None = None,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    requester = session if session is not None else requests
    try:
        response = requester.request(method, url, headers=dict(headers or {}), data=data, timeout=timeout)
    except requests.RequestException as exc:
        raise ApiError.network(f"Request to {url} failed: {exc}") from exc

    logger.debug("%s %s -> %s", method, url, response.status_code)
    if not response.ok:
        raise ApiError.http(response.status_code, _error_text(response))

    try:
        return response.json()
    except ValueError as exc:
        raise ApiError.malformed(f"Response from {url} is not valid JSON") from exc
