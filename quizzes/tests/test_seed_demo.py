from __future__ import annotations

from io import StringIO

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command

from quizzes.attempts import start_attempt
from quizzes.models import Question, Quiz
from quizzes.scoring import quiz_readiness

User = get_user_model()


@pytest.mark.django_db
def test_seed_demo_is_idempotent():
    out = StringIO()
    call_command("seed_demo", stdout=out)
    call_command("seed_demo", stdout=out)

    assert Quiz.objects.count() == 1
    assert Question.objects.count() == 2
    assert User.objects.filter(username__in=["teacher", "student1", "student2"]).count() == 3
    assert "nothing to do" in out.getvalue()

    quiz = Quiz.objects.get()
    assert quiz_readiness(quiz)["ready"] is True
    student = User.objects.get(username="student1")
    assert student.check_password("password")
    # The seeded quiz is open and assigned to the seeded students
    _, created = start_attempt(quiz, student)
    assert created is True
