"""Which quizzes a student can see and start.

Pure decisions over (quiz, student, now); nothing here writes to the store.
"""
from __future__ import annotations

from django.db.models import QuerySet

from accounts.models import class_id_of

from .models import Quiz, Submission

STATUS_COMPLETED = "completed"
STATUS_IN_PROGRESS = "in_progress"
STATUS_LATE = "late"
STATUS_PENDING = "pending"


def _quiz_class_ids(quiz: Quiz) -> set[int]:
    # Uses prefetched classes when present
    return {c.id for c in quiz.classes.all()}


def is_assigned(quiz: Quiz, student) -> bool:
    class_id = class_id_of(student)
    return class_id is not None and class_id in _quiz_class_ids(quiz)


def is_visible(quiz: Quiz, student, now) -> bool:
    """Listed for the student: assigned to their class and already opened."""
    return is_assigned(quiz, student) and now >= quiz.open_at


def is_startable(quiz: Quiz, student, now) -> bool:
    return is_visible(quiz, student, now) and quiz.is_open(now)


def submission_status(quiz: Quiz, submission: Submission | None, now) -> str:
    """Status label for a visible quiz.

    completed > in_progress > late (closed, never started) > pending.
    """
    if submission is not None:
        return STATUS_COMPLETED if submission.is_submitted else STATUS_IN_PROGRESS
    if now > quiz.close_at:
        return STATUS_LATE
    return STATUS_PENDING


def visible_quizzes(student, now) -> QuerySet[Quiz]:
    """Quizzes assigned to the student's class that have opened, closed ones included."""
    class_id = class_id_of(student)
    if class_id is None:
        return Quiz.objects.none()
    return (
        Quiz.objects.filter(classes__id=class_id, open_at__lte=now)
        .distinct()
        .prefetch_related("classes", "questions__options")
        .order_by("open_at", "id")
    )
