"""URL routing for Quizdesk.

The project surface is the JSON API under /api/v1/, its schema and docs,
and the Django admin.
"""
from django.contrib import admin
from django.urls import include, path


urlpatterns = [
    path("admin/", admin.site.urls),
    path("api-auth/", include("rest_framework.urls")),
    # API v1, schema and docs
    path("", include("api.urls")),
]
