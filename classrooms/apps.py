from django.apps import AppConfig


class ClassroomsConfig(AppConfig):
    """App configuration for teacher-owned classes."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "classrooms"
