import json
import logging
from functools import wraps
from typing import Any, Dict

from django.http import JsonResponse

from .errors import InvalidInput, PortalError

logger = logging.getLogger(__name__)


def json_error(message: str, status: int = 400, code: str = "error") -> JsonResponse:
    return JsonResponse({"success": False, "error": message, "code": code}, status=status)


def json_ok(**payload: Any) -> JsonResponse:
    return JsonResponse({"success": True, **payload})


def parse_body(request) -> Dict[str, Any]:
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidInput(f"Request body is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidInput("Request body must be a JSON object.")
    return payload


def require_int(payload: Dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if value is None or isinstance(value, bool):
        raise InvalidInput(f"{key} is required.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{key} must be an integer.") from None


def portal_endpoint(func):
    """Require an authenticated account and translate PortalError into JSON."""

    @wraps(func)
    def _wrapped(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return json_error("Authentication required.", status=401, code="unauthenticated")
        try:
            return func(request, *args, **kwargs)
        except PortalError as exc:
            logger.info("%s rejected: %s", func.__name__, exc.message)
            return JsonResponse(exc.to_payload(), status=exc.status)

    return _wrapped
