"""Map quiz core errors onto HTTP responses."""
from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from quizzes.exceptions import AnswerValidationError, PersistenceError, QuizError

logger = logging.getLogger(__name__)


def quiz_exception_handler(exc, context):
    """DRF exception handler that understands `QuizError`.

    Body: {"detail": str, "code": str} plus "errors" for malformed answers.
    Persistence failures only expose a generic message; the cause is logged.
    """
    if not isinstance(exc, QuizError):
        return exception_handler(exc, context)

    detail = exc.detail
    if isinstance(exc, PersistenceError):
        view = context.get("view")
        logger.error("Persistence failure in %s: %r", type(view).__name__ if view else "?", exc.__cause__ or exc)
        detail = exc.default_detail
    data = {"detail": detail, "code": exc.code}
    if isinstance(exc, AnswerValidationError):
        data["errors"] = exc.errors
    return Response(data, status=exc.status_code)
