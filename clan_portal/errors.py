"""Error kinds shared by the claim, rank and goal services.

Each error carries the HTTP status the JSON views answer with and a short
machine-readable ``code`` so callers can branch without parsing messages.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class PortalError(Exception):
    """Base class for expected, user-facing failures."""

    status = 400
    code = "error"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": False, "error": self.message, "code": self.code}
        if self.context:
            payload["details"] = self.context
        return payload


class InvalidInput(PortalError):
    code = "invalid_input"


class NotAuthorized(PortalError):
    status = 403
    code = "not_authorized"


class NotFound(PortalError):
    status = 404
    code = "not_found"


class InvalidCode(PortalError):
    status = 404
    code = "invalid_code"


class Expired(PortalError):
    status = 410
    code = "expired"


class AlreadyClaimed(PortalError):
    status = 409
    code = "already_claimed"


class DuplicatePending(PortalError):
    status = 409
    code = "duplicate_pending"


class NotPending(PortalError):
    status = 409
    code = "not_pending"


class UpstreamUnavailable(PortalError):
    """The statistics source could not be reached, timed out or refused the request."""

    status = 503
    code = "upstream_unavailable"


class UpstreamNotFound(UpstreamUnavailable):
    """The statistics source answered 404 for the requested player or group."""

    status = 404
    code = "upstream_not_found"


class MalformedUpstreamData(PortalError):
    """The statistics source answered with a body that is not valid JSON.

    Never surfaced to callers: the goal synchronizer degrades it to an empty
    payload, which the stat extractor turns into default zero records.
    """

    status = 502
    code = "malformed_upstream_data"


def require_admin(account: Optional[Any], action: str) -> None:
    if account is None or not getattr(account, "is_staff", False):
        raise NotAuthorized(f"Only admins can {action}.")
