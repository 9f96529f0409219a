"""Shared requests plumbing for the provider clients."""

from __future__ import annotations

from typing import Any, Mapping, Optional

import requests

from weather_planner.data_sources.base import ProviderError, ProviderResponseError

session = requests.Session()


def get_json(
    http: requests.Session,
    url: str,
    *,
    params: Mapping[str, Any],
    headers: Optional[Mapping[str, str]] = None,
    timeout: float = 10.0,
) -> Any:
    """GET `url` and decode JSON, translating failures into ProviderError."""
    try:
        resp = http.get(url, params=params, headers=headers, timeout=timeout)
        resp.raise_for_status()
    except requests.HTTPError as exc:
        status = exc.response.status_code if exc.response is not None else None
        raise ProviderError(f"{url} returned HTTP {status}", status_code=status) from exc
    except (requests.ConnectionError, requests.Timeout) as exc:
        raise ProviderError(f"{url} unreachable: {exc}", transient=True) from exc
    except requests.RequestException as exc:
        raise ProviderError(f"{url} request failed: {exc}") from exc

    try:
        return resp.json()
    except ValueError as exc:
        raise ProviderResponseError(f"{url} returned non-JSON body") from exc
