from django.contrib import admin

from .models import Goal


@admin.register(Goal)
class GoalAdmin(admin.ModelAdmin):
    list_display = ("id", "character", "account", "goal_type", "metric", "current_value", "target_value", "completed")
    list_filter = ("goal_type", "completed", "is_public")
    search_fields = ("metric", "character__name", "account__username")
    ordering = ("-created_at",)
