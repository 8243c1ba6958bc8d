"""Accounts models: user profile and roles.

Defines a `UserProfile` associated one-to-one with Django's `User`,
capturing the role (student/teacher) and, for students, the class they
belong to. The profile is created automatically on user creation.
"""
from __future__ import annotations

from django.conf import settings
from django.db import models


class Role(models.TextChoices):
    """Platform roles used for role-based guards."""

    STUDENT = "student", "Student"
    TEACHER = "teacher", "Teacher"


class UserProfile(models.Model):
    """Profile linked to a Django auth user.

    - `role`: authorisation gate for API permissions
    - `school_class`: the one class a student is enrolled in (unused for teachers)
    """

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.STUDENT)
    full_name = models.CharField(max_length=200, blank=True)
    school_class = models.ForeignKey(
        "classrooms.SchoolClass",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="student_profiles",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover (string repr convenience)
        return f"Profile<{self.user.username}:{self.role}>"


def role_of(user) -> str | None:
    """Return the profile role of `user`, or None for anonymous/profile-less users."""
    if not getattr(user, "is_authenticated", False):
        return None
    return getattr(getattr(user, "profile", None), "role", None)


def class_id_of(user) -> int | None:
    """Return the id of the class a student belongs to, if any."""
    return getattr(getattr(user, "profile", None), "school_class_id", None)
