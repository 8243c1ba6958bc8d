from __future__ import annotations

from datetime import timedelta

import pytest
from django.db import IntegrityError, transaction

from quizzes.models import Quiz, Submission


@pytest.mark.django_db
def test_close_must_be_after_open_at_db_level(teacher, now):
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            Quiz.objects.create(owner=teacher, title="Bad", duration_minutes=10, open_at=now, close_at=now)


@pytest.mark.django_db
def test_one_submission_per_student_and_quiz(quiz, student, now):
    Submission.objects.create(quiz=quiz, student=student, started_at=now, expires_at=now + timedelta(minutes=30))
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            Submission.objects.create(quiz=quiz, student=student, started_at=now, expires_at=now)


def test_submission_time_helpers(now):
    sub = Submission(started_at=now, expires_at=now + timedelta(minutes=10))
    assert sub.time_remaining(now) == timedelta(minutes=10)
    assert sub.time_remaining(now + timedelta(hours=1)) == timedelta(0)
    assert not sub.is_expired(now + timedelta(minutes=10))
    assert sub.is_expired(now + timedelta(minutes=10, seconds=1))
    assert not sub.is_submitted
