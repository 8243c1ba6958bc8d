"""Error taxonomy for starting and submitting quiz attempts.

These are plain exceptions so the core stays free of HTTP concerns; each
carries the status code the API layer maps it to (see
`api.exceptions.quiz_exception_handler`).
"""
from __future__ import annotations


class QuizError(Exception):
    status_code = 400
    default_detail = "Quiz request failed."
    default_code = "quiz_error"

    def __init__(self, detail: str | None = None, *, code: str | None = None):
        self.detail = detail or self.default_detail
        self.code = code or self.default_code
        super().__init__(self.detail)


class AuthorizationError(QuizError):
    """The caller may not act on this quiz (not a student, wrong owner)."""

    status_code = 403
    default_detail = "Unauthorized."
    default_code = "permission_denied"


class QuizNotAssignedError(AuthorizationError):
    """The quiz is not assigned to the student's class.

    Reported as not-found so quizzes outside the student's classes are
    indistinguishable from quizzes that do not exist.
    """

    status_code = 404
    default_detail = "Quiz not found."
    default_code = "not_found"


class AvailabilityError(QuizError):
    default_detail = "Quiz is not available."
    default_code = "unavailable"


class ConflictError(QuizError):
    default_detail = "Quiz already submitted."
    default_code = "already_submitted"


class SubmissionNotFoundError(QuizError):
    status_code = 404
    default_detail = "Quiz has not been started."
    default_code = "not_started"


class AnswerValidationError(QuizError):
    """Structurally malformed answers payload.

    `errors` maps a field path (e.g. ``answers.2.optionId``) to messages.
    """

    status_code = 422
    default_detail = "The submitted answers are invalid."
    default_code = "invalid_answers"

    def __init__(self, errors: dict[str, list[str]], detail: str | None = None):
        self.errors = errors
        super().__init__(detail)


class PersistenceError(QuizError):
    """Saving the submission failed and was rolled back.

    The underlying database error is chained as ``__cause__``.
    """

    status_code = 500
    default_detail = "Failed to submit quiz."
    default_code = "persistence_failed"
