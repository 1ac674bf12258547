from django.urls import path

from . import views


app_name = "members"

urlpatterns = [
    path("rank-alerts/", views.rank_alerts, name="rank_alerts"),
    path("<int:wom_id>/rank/", views.classify_character, name="classify_character"),
    path("<int:wom_id>/rank/fix/", views.fix_tier, name="fix_tier"),
    path("<int:wom_id>/rank/toggle/", views.toggle_category, name="toggle_category"),
    path("<int:wom_id>/visibility/", views.set_visibility, name="set_visibility"),
    path("<int:wom_id>/siege-score/", views.adjust_siege_score, name="adjust_siege_score"),
    path("accounts/<int:account_id>/admin/", views.set_admin, name="set_admin"),
]
