from django.contrib import admin

from .models import Claim, ClaimCode, ClaimRequest


@admin.register(Claim)
class ClaimAdmin(admin.ModelAdmin):
    list_display = ("id", "character", "account", "source", "created_at")
    list_filter = ("source",)
    search_fields = ("character__name", "account__username")
    ordering = ("-created_at",)


@admin.register(ClaimCode)
class ClaimCodeAdmin(admin.ModelAdmin):
    list_display = ("code", "character", "issued_at", "expires_at", "consumed")
    list_filter = ("consumed",)
    search_fields = ("code", "character__name")
    ordering = ("-issued_at",)


@admin.register(ClaimRequest)
class ClaimRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "character_name", "account", "status", "created_at", "processed_at")
    list_filter = ("status",)
    search_fields = ("character_name", "account__username", "message")
    ordering = ("-created_at",)
