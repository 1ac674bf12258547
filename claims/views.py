from __future__ import annotations

from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from clan_portal.http import json_ok, parse_body, portal_endpoint, require_int

from . import services


@csrf_exempt
@require_http_methods(["POST"])
@portal_endpoint
def issue_code(request):
    payload = parse_body(request)
    claim_code = services.issue_code(
        request.user,
        require_int(payload, "wom_id"),
        payload.get("expiry_days", 30),
    )
    return json_ok(code=claim_code.to_payload())


@require_http_methods(["GET"])
@portal_endpoint
def list_codes(request):
    wom_id = request.GET.get("wom_id")
    codes = services.list_codes(request.user, int(wom_id) if wom_id and wom_id.isdigit() else None)
    return json_ok(codes=[code.to_payload() for code in codes])


@csrf_exempt
@require_http_methods(["POST"])
@portal_endpoint
def redeem_code(request):
    payload = parse_body(request)
    claim = services.redeem_code(request.user, payload.get("code") or "")
    return json_ok(claim=claim.to_payload())


@csrf_exempt
@require_http_methods(["POST"])
@portal_endpoint
def revoke_code(request):
    payload = parse_body(request)
    services.revoke_code(request.user, payload.get("code") or "")
    return json_ok()


@csrf_exempt
@require_http_methods(["GET", "POST"])
@portal_endpoint
def claim_requests(request):
    if request.method == "GET":
        requests_ = services.list_requests(request.user, request.GET.get("status") or None)
        return json_ok(requests=[claim_request.to_payload() for claim_request in requests_])

    payload = parse_body(request)
    claim_request = services.submit_request(
        request.user,
        require_int(payload, "wom_id"),
        payload.get("message") or "",
    )
    return json_ok(request=claim_request.to_payload())


@csrf_exempt
@require_http_methods(["POST"])
@portal_endpoint
def process_request(request, request_id: int):
    payload = parse_body(request)
    claim_request = services.process_request(
        request.user,
        request_id,
        payload.get("action") or payload.get("decision") or "",
        payload.get("admin_notes") or "",
    )
    return json_ok(request=claim_request.to_payload())


@require_http_methods(["GET"])
@portal_endpoint
def my_claims(request):
    claims = services.list_claims(request.user)
    return json_ok(claims=[claim.to_payload() for claim in claims])
