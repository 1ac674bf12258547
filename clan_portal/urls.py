from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/members/", include("members.urls")),
    path("api/claims/", include("claims.urls")),
    path("api/goals/", include("goals.urls")),
]
