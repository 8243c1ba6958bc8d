"""Attempt lifecycle: start, submit and teacher reset.

One Submission per (quiz, student) is guaranteed by the table's unique
constraint; `start_attempt` converges on the existing row when a concurrent
request wins the insert. `submit_attempt` finalises the Submission in a
single transaction so a failure leaves it exactly as it was.

`select_for_update` is a no-op on SQLite, where a second writer fails with
"database is locked" instead of waiting. A failed submit therefore re-reads
the row: if another request already finalised it the caller gets
`ConflictError`, otherwise `PersistenceError`.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from .availability import is_assigned, is_startable
from .exceptions import (
    AvailabilityError,
    ConflictError,
    PersistenceError,
    QuizNotAssignedError,
    SubmissionNotFoundError,
)
from .models import Answer, Quiz, Submission
from .scoring import build_answer_key, score_answers
from .validation import validate_answers

logger = logging.getLogger(__name__)


def _existing_submission(quiz: Quiz, student) -> Submission | None:
    return Submission.objects.filter(quiz=quiz, student=student).first()


def _finalised_elsewhere(submission_pk) -> bool:
    return Submission.objects.filter(pk=submission_pk, submitted_at__isnull=False).exists()


def _ensure_assigned(quiz: Quiz, student) -> None:
    if not is_assigned(quiz, student):
        raise QuizNotAssignedError()


def start_attempt(quiz: Quiz, student, now=None) -> tuple[Submission, bool]:
    """Create or resume the student's attempt.

    Returns (submission, created). Re-entering an unsubmitted attempt returns
    it unchanged, so the countdown continues from the original start.
    """
    now = now or timezone.now()
    _ensure_assigned(quiz, student)
    if not is_startable(quiz, student, now):
        raise AvailabilityError()

    submission = _existing_submission(quiz, student)
    created = False
    if submission is None:
        try:
            with transaction.atomic():
                submission = Submission.objects.create(
                    quiz=quiz,
                    student=student,
                    started_at=now,
                    expires_at=now + timedelta(minutes=quiz.duration_minutes),
                )
            created = True
        except IntegrityError:
            # Lost the race against a concurrent start for the same pair
            submission = Submission.objects.get(quiz=quiz, student=student)
            logger.info("Concurrent start for quiz %s student %s; using submission %s", quiz.pk, student.pk, submission.pk)

    if submission.is_submitted:
        raise ConflictError()
    if created:
        logger.info("Started submission %s (quiz %s, student %s, expires %s)", submission.pk, quiz.pk, student.pk, submission.expires_at.isoformat())
    return submission, created


def submit_attempt(quiz: Quiz, student, raw_answers: Any, now=None) -> Submission:
    """Validate, score and finalise the student's attempt.

    Late submissions (after `expires_at`) are accepted; clients auto-submit
    when their countdown ends and the request may arrive after expiry.
    """
    now = now or timezone.now()
    _ensure_assigned(quiz, student)

    submission = _existing_submission(quiz, student)
    if submission is None:
        raise SubmissionNotFoundError()
    if submission.is_submitted:
        raise ConflictError()

    selected = validate_answers(quiz, raw_answers)
    questions = list(quiz.questions.prefetch_related("options"))
    score = score_answers(build_answer_key(questions), selected)

    try:
        with transaction.atomic():
            locked = Submission.objects.select_for_update().get(pk=submission.pk)
            if locked.is_submitted:
                raise ConflictError()
            Answer.objects.filter(submission=locked).delete()
            Answer.objects.bulk_create(
                [
                    Answer(submission=locked, question_id=qid, option_id=oid)
                    for qid, option_ids in selected.items()
                    for oid in sorted(option_ids)
                ]
            )
            locked.submitted_at = now
            locked.score = score
            locked.save(update_fields=["submitted_at", "score", "updated_at"])
    except DatabaseError as exc:
        if _finalised_elsewhere(submission.pk):
            # A concurrent submit won; SQLite reports the loser as "database is locked"
            logger.info("Submission %s was finalised by a concurrent request", submission.pk)
            raise ConflictError() from exc
        logger.exception("Submitting submission %s for quiz %s failed; rolled back", submission.pk, quiz.pk)
        raise PersistenceError(f"Failed to submit quiz: {exc}") from exc

    if locked.is_expired(now):
        logger.info("Submission %s accepted %s after expiry", locked.pk, now - locked.expires_at)
    logger.info("Submitted submission %s (quiz %s, student %s) score=%s", locked.pk, quiz.pk, student.pk, score)
    return locked


def reset_attempt(quiz: Quiz, student) -> bool:
    """Delete the student's submission (and answers) so the quiz can be retaken."""
    deleted, _ = Submission.objects.filter(quiz=quiz, student=student).delete()
    if deleted:
        logger.info("Reset submission for quiz %s student %s", quiz.pk, student.pk)
    return bool(deleted)
