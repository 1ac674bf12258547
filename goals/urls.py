from django.urls import path

from . import views


app_name = "goals"

urlpatterns = [
    path("", views.goals, name="goals"),
    path("public/", views.public_goals, name="public_goals"),
    path("<int:goal_id>/delete/", views.delete_goal, name="delete_goal"),
    path("sync/<int:wom_id>/", views.sync_goals, name="sync_goals"),
]
