"""Seed a demo teacher, class, students and an open quiz.

Safe to run repeatedly: existing demo users and the demo quiz are reused.
"""
from __future__ import annotations

from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from accounts.models import Role
from classrooms.models import SchoolClass
from quizzes.models import Option, Question, Quiz

DEMO_PASSWORD = "password"

QUESTIONS = [
    ("What is 2 + 2?", ["3", "4", "5", "6"], 1),
    ("What is the square root of 16?", ["2", "4", "8", "16"], 1),
]


class Command(BaseCommand):
    help = "Create demo data: one teacher, one class, two students and an open quiz."

    def _user(self, username: str, email: str, role: str, full_name: str, school_class=None):
        User = get_user_model()
        user, created = User.objects.get_or_create(username=username, defaults={"email": email})
        if created:
            user.set_password(DEMO_PASSWORD)
            user.save(update_fields=["password"])
        profile = user.profile
        profile.role = role
        profile.full_name = full_name
        profile.school_class = school_class
        profile.save(update_fields=["role", "full_name", "school_class", "updated_at"])
        return user

    @transaction.atomic
    def handle(self, *args, **options):
        teacher = self._user("teacher", "teacher@example.com", Role.TEACHER, "Professor Smith")
        school_class, _ = SchoolClass.objects.get_or_create(teacher=teacher, name="1BAC")
        self._user("student1", "student1@example.com", Role.STUDENT, "John Doe", school_class)
        self._user("student2", "student2@example.com", Role.STUDENT, "Jane Smith", school_class)

        title = "Math Quiz - Algebra"
        if Quiz.objects.filter(owner=teacher, title=title).exists():
            self.stdout.write("Demo quiz already present; nothing to do.")
            return
        now = timezone.now()
        quiz = Quiz.objects.create(
            owner=teacher,
            title=title,
            description="Test your knowledge of basic algebra",
            duration_minutes=30,
            open_at=now - timedelta(days=1),
            close_at=now + timedelta(days=7),
        )
        quiz.classes.add(school_class)
        for q_index, (text, options, correct_index) in enumerate(QUESTIONS):
            question = Question.objects.create(quiz=quiz, text=text, order=q_index)
            Option.objects.bulk_create(
                [
                    Option(question=question, text=opt, order=o_index, is_correct=(o_index == correct_index))
                    for o_index, opt in enumerate(options)
                ]
            )
        self.stdout.write(self.style.SUCCESS(f"Seeded quiz {quiz.pk} for class {school_class.name}; password '{DEMO_PASSWORD}'."))
