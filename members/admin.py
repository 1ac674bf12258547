from django.contrib import admin

from .models import Character


@admin.register(Character)
class CharacterAdmin(admin.ModelAdmin):
    list_display = ("wom_id", "name", "current_role", "ehb", "current_experience", "siege_score", "hidden")
    list_filter = ("hidden", "not_found_upstream")
    search_fields = ("name", "display_name", "current_role")
    ordering = ("name",)
