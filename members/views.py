from __future__ import annotations

from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from clan_portal.http import json_ok, parse_body, portal_endpoint, require_int

from . import services


@require_http_methods(["GET"])
@portal_endpoint
def classify_character(request, wom_id: int):
    return json_ok(rank=services.classify_character(wom_id))


@require_http_methods(["GET"])
@portal_endpoint
def rank_alerts(request):
    include_hidden = request.GET.get("include_hidden") in {"1", "true", "yes"}
    alerts = services.list_rank_alerts(request.user, include_hidden=include_hidden)
    return json_ok(count=len(alerts), alerts=[alert.to_payload() for alert in alerts])


@csrf_exempt
@require_http_methods(["POST"])
@portal_endpoint
def fix_tier(request, wom_id: int):
    character = services.fix_character_tier(request.user, wom_id)
    return json_ok(character=character.to_payload())


@csrf_exempt
@require_http_methods(["POST"])
@portal_endpoint
def toggle_category(request, wom_id: int):
    character = services.toggle_character_category(request.user, wom_id)
    return json_ok(character=character.to_payload())


@csrf_exempt
@require_http_methods(["POST"])
@portal_endpoint
def set_visibility(request, wom_id: int):
    payload = parse_body(request)
    character = services.set_hidden(request.user, wom_id, payload.get("hidden") is True)
    return json_ok(character=character.to_payload())


@csrf_exempt
@require_http_methods(["POST"])
@portal_endpoint
def adjust_siege_score(request, wom_id: int):
    payload = parse_body(request)
    character = services.adjust_siege_score(request.user, wom_id, require_int(payload, "delta"))
    return json_ok(character=character.to_payload())


@csrf_exempt
@require_http_methods(["POST"])
@portal_endpoint
def set_admin(request, account_id: int):
    payload = parse_body(request)
    account = services.set_admin(request.user, account_id, payload.get("is_admin") is True)
    return json_ok(account={"id": account.pk, "username": account.get_username(), "is_admin": account.is_staff})
