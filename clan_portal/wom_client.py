import logging
from typing import Any, Dict, Optional, Union

import requests
from django.conf import settings
from requests import RequestException

from .errors import MalformedUpstreamData, UpstreamNotFound, UpstreamUnavailable

logger = logging.getLogger(__name__)


def _headers() -> Dict[str, str]:
    headers = {
        "Accept": "application/json",
        "User-Agent": getattr(settings, "WOM_USER_AGENT", "clan-portal"),
    }
    api_key = getattr(settings, "WOM_API_KEY", None)
    if api_key:
        headers["x-api-key"] = api_key
    return headers


def _get(path: str, params: Optional[Dict[str, Any]] = None) -> Any:
    """
    Perform a GET against the Wise Old Man API and return the decoded JSON body.

    Raises:
    - UpstreamNotFound when the API answers 404.
    - UpstreamUnavailable on timeouts, connection errors and other non-2xx answers.
    - MalformedUpstreamData when the body is not valid JSON.
    """

    base_url = getattr(settings, "WOM_BASE_URL", "https://api.wiseoldman.net/v2")
    timeout = getattr(settings, "WOM_TIMEOUT", 10)
    url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"

    try:
        response = requests.get(url, headers=_headers(), params=params, timeout=timeout)
    except RequestException as exc:
        logger.exception("HTTP error when reaching statistics service: %s", exc)
        raise UpstreamUnavailable(
            f"Failed to reach statistics service ({exc}). Please try again later.",
            path=path,
        ) from exc

    if response.status_code == 404:
        raise UpstreamNotFound(f"Statistics service has no record for {path}.", path=path)

    try:
        response.raise_for_status()
    except RequestException as exc:
        logger.warning("Statistics service answered %s for %s", response.status_code, path)
        raise UpstreamUnavailable(
            f"Statistics service returned HTTP {response.status_code}.",
            path=path,
            status_code=response.status_code,
        ) from exc

    try:
        return response.json()
    except ValueError as exc:
        logger.warning("Failed to decode statistics payload for %s: %s", path, exc)
        raise MalformedUpstreamData(f"Invalid response from statistics service ({exc}).", path=path) from exc


def fetch_player(identifier: Union[int, str]) -> Any:
    """Fetch a player's details by numeric id or by username."""

    if isinstance(identifier, int):
        return _get(f"players/id/{identifier}")
    username = str(identifier).strip()
    if not username:
        raise ValueError("username must not be empty")
    return _get(f"players/{requests.utils.quote(username)}")


def fetch_group(group_id: Union[int, str]) -> Dict[str, Any]:
    """Fetch a group with its memberships."""

    payload = _get(f"groups/{group_id}", params={"includeMemberships": "true"})
    if not isinstance(payload, dict) or not isinstance(payload.get("memberships"), list):
        keys = sorted(payload.keys()) if isinstance(payload, dict) else type(payload).__name__
        raise MalformedUpstreamData(
            f"Invalid group data structure. Expected memberships array, got: {keys}",
            group_id=group_id,
        )
    return payload
