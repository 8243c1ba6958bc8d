"""Role permissions for REST API v1."""
from __future__ import annotations

from rest_framework.permissions import BasePermission

from accounts.models import Role, role_of


class IsTeacher(BasePermission):
    message = "Only teachers may do this."

    def has_permission(self, request, view):
        return role_of(request.user) == Role.TEACHER


class IsStudent(BasePermission):
    message = "Only students may take quizzes."

    def has_permission(self, request, view):
        return role_of(request.user) == Role.STUDENT
