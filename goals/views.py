from __future__ import annotations

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from clan_portal.http import json_ok, parse_body, portal_endpoint, require_int

from . import services


@csrf_exempt
@require_http_methods(["GET", "POST"])
@portal_endpoint
def goals(request):
    if request.method == "GET":
        wom_id = request.GET.get("wom_id")
        queryset = services.list_goals(request.user, int(wom_id) if wom_id and wom_id.isdigit() else None)
        return json_ok(goals=[goal.to_payload() for goal in queryset])

    payload = parse_body(request)
    goal = services.create_goal(
        request.user,
        require_int(payload, "wom_id"),
        payload.get("goal_type") or "",
        payload.get("metric") or "",
        payload.get("target"),
        mode=payload.get("mode") or "gain",
        target_date=payload.get("target_date"),
        is_public=payload.get("is_public") is True,
    )
    return json_ok(goal=goal.to_payload())


@csrf_exempt
@require_http_methods(["DELETE", "POST"])
@portal_endpoint
def delete_goal(request, goal_id: int):
    services.delete_goal(request.user, goal_id)
    return json_ok()


@csrf_exempt
@require_http_methods(["POST"])
@portal_endpoint
def sync_goals(request, wom_id: int):
    result = services.sync_goals(request.user, wom_id)
    if result.error:
        return JsonResponse({"success": False, **result.to_payload()}, status=503)
    return json_ok(**result.to_payload())


@require_http_methods(["GET"])
@portal_endpoint
def public_goals(request):
    goals_ = services.list_public_goals(
        request.GET.get("goal_type") or None,
        request.GET.get("sort") or "progress",
    )
    return json_ok(count=len(goals_), goals=[goal.to_payload() for goal in goals_])
