"""Classroom models.

A `SchoolClass` is owned by one teacher. Students belong to at most one
class through `accounts.UserProfile.school_class`; quizzes are assigned to
classes many-to-many (`quizzes.Quiz.classes`).
"""
from __future__ import annotations

from django.conf import settings
from django.db import models


class SchoolClass(models.Model):
    """A class of students run by a teacher user."""

    teacher = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="taught_classes")
    name = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name", "id"]
        verbose_name_plural = "school classes"

    def __str__(self) -> str:  # pragma: no cover
        return self.name
