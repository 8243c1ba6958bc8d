from __future__ import annotations

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser

from accounts.models import Role, UserProfile, class_id_of, role_of

User = get_user_model()


@pytest.mark.django_db
def test_profile_created_with_student_role():
    u = User.objects.create_user(username="fresh", password="pw")
    assert UserProfile.objects.filter(user=u).count() == 1
    assert u.profile.role == Role.STUDENT
    assert u.profile.school_class is None

    # Saving again does not create a second profile
    u.email = "fresh@ex.com"
    u.save()
    assert UserProfile.objects.filter(user=u).count() == 1


@pytest.mark.django_db
def test_role_and_class_helpers(teacher, student, school_class):
    assert role_of(teacher) == Role.TEACHER
    assert role_of(student) == Role.STUDENT
    assert role_of(AnonymousUser()) is None
    assert class_id_of(student) == school_class.id
    assert class_id_of(teacher) is None
    assert class_id_of(AnonymousUser()) is None


@pytest.mark.django_db
def test_deleting_class_unassigns_students(student, school_class):
    school_class.delete()
    student.profile.refresh_from_db()
    assert student.profile.school_class is None
