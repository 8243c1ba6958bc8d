from __future__ import annotations

from datetime import timedelta

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from classrooms.models import SchoolClass


class Quiz(models.Model):
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="owned_quizzes")
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    duration_minutes = models.PositiveIntegerField()
    # Availability window: students may start only while open_at <= now <= close_at
    open_at = models.DateTimeField()
    close_at = models.DateTimeField()
    classes = models.ManyToManyField(SchoolClass, related_name="quizzes", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-open_at", "id"]
        verbose_name_plural = "quizzes"
        constraints = [
            models.CheckConstraint(condition=Q(close_at__gt=F("open_at")), name="quiz_close_after_open"),
            models.CheckConstraint(condition=Q(duration_minutes__gte=1), name="quiz_duration_positive"),
        ]

    def __str__(self) -> str:
        return self.title

    def is_open(self, now) -> bool:
        return self.open_at <= now <= self.close_at


class Question(models.Model):
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="questions")
    order = models.PositiveSmallIntegerField(default=0)
    text = models.TextField()

    class Meta:
        ordering = ["order", "id"]

    def __str__(self) -> str:
        return f"Q{self.order}: {self.text[:40]}"


class Option(models.Model):
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name="options")
    order = models.PositiveSmallIntegerField(default=0)
    text = models.CharField(max_length=500)
    is_correct = models.BooleanField(default=False)

    class Meta:
        ordering = ["order", "id"]

    def __str__(self) -> str:
        return f"Option {self.order} ({'✓' if self.is_correct else ' '})"


class Submission(models.Model):
    """One student's single attempt at one quiz.

    `started_at` and `expires_at` are fixed at creation; `submitted_at` and
    `score` stay null until the attempt is finalised, then never change.
    Expiry is derived on read, nothing closes an attempt server-side.
    """

    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="submissions")
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="quiz_submissions")
    started_at = models.DateTimeField()
    expires_at = models.DateTimeField()
    submitted_at = models.DateTimeField(null=True, blank=True)
    score = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ("quiz", "student")
        ordering = ["-started_at", "id"]

    def __str__(self) -> str:
        return f"Submission by {self.student_id} on {self.quiz_id}"

    @property
    def is_submitted(self) -> bool:
        return self.submitted_at is not None

    def is_expired(self, now) -> bool:
        return now > self.expires_at

    def time_remaining(self, now) -> timedelta:
        return max(self.expires_at - now, timedelta(0))


class Answer(models.Model):
    """A selected option for one question of a submission.

    A multi-select is stored as one row per chosen option.
    """

    submission = models.ForeignKey(Submission, on_delete=models.CASCADE, related_name="answers")
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name="answers")
    option = models.ForeignKey(Option, on_delete=models.CASCADE, related_name="answers")

    class Meta:
        unique_together = ("submission", "option")
        ordering = ["question__order", "question_id", "option_id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.submission_id}:{self.question_id}->{self.option_id}"
