from django.urls import path

from . import views


app_name = "claims"

urlpatterns = [
    path("", views.my_claims, name="my_claims"),
    path("codes/", views.list_codes, name="list_codes"),
    path("codes/issue/", views.issue_code, name="issue_code"),
    path("codes/redeem/", views.redeem_code, name="redeem_code"),
    path("codes/revoke/", views.revoke_code, name="revoke_code"),
    path("requests/", views.claim_requests, name="claim_requests"),
    path("requests/<int:request_id>/process/", views.process_request, name="process_request"),
]
