"""Validation of submitted answers.

Two tiers:
- structural problems (wrong shape, IDs that exist nowhere) reject the whole
  payload with `AnswerValidationError`;
- references that exist but do not belong together (a question from another
  quiz, an option from another question) are dropped silently so stale or
  forged IDs cannot sink an otherwise valid submission.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .exceptions import AnswerValidationError
from .models import Option, Question, Quiz

logger = logging.getLogger(__name__)

# Accepted spellings per field; the camelCase form is canonical
FIELD_ALIASES = {
    "questionId": ("questionId", "question_id"),
    "optionId": ("optionId", "option_id"),
}

# Largest primary key a BigAutoField can hold
MAX_ID = 2**63 - 1


def _coerce_id(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        # isdecimal, not isdigit: superscripts like "²" are digits int() rejects
        if not value.isdecimal():
            return None
        value = int(value)
    if isinstance(value, int) and 0 < value <= MAX_ID:
        return value
    return None


def normalize_answer_items(raw: Any) -> list[tuple[int, int]]:
    """Turn the raw `answers` payload into (question_id, option_id) pairs.

    `None` means no answers. Anything other than a list of objects carrying
    positive integer `questionId`/`optionId` is rejected.
    """
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise AnswerValidationError({"answers": ["Expected a list of answers."]})

    errors: dict[str, list[str]] = {}
    pairs: list[tuple[int, int]] = []
    for index, item in enumerate(raw):
        if not isinstance(item, Mapping):
            errors[f"answers.{index}"] = ["Expected an object with questionId and optionId."]
            continue
        ids: dict[str, int] = {}
        for field, aliases in FIELD_ALIASES.items():
            present = [item[a] for a in aliases if a in item and item[a] is not None]
            if not present:
                errors[f"answers.{index}.{field}"] = ["This field is required."]
                continue
            parsed = _coerce_id(present[0])
            if parsed is None:
                errors[f"answers.{index}.{field}"] = ["A valid positive integer is required."]
                continue
            ids[field] = parsed
        if len(ids) == len(FIELD_ALIASES):
            pairs.append((ids["questionId"], ids["optionId"]))
    if errors:
        raise AnswerValidationError(errors)
    return pairs


def validate_answers(quiz: Quiz, raw: Any) -> dict[int, set[int]]:
    """Validate raw answers for `quiz`.

    Returns question_id -> set of accepted option ids, with an entry (possibly
    empty) for every question of the quiz.
    """
    pairs = normalize_answer_items(raw)

    question_ids = {qid for qid, _ in pairs}
    option_ids = {oid for _, oid in pairs}
    known_questions = set(Question.objects.filter(pk__in=question_ids).values_list("id", flat=True))
    option_owner = dict(Option.objects.filter(pk__in=option_ids).values_list("id", "question_id"))

    errors: dict[str, list[str]] = {}
    for index, (qid, oid) in enumerate(pairs):
        if qid not in known_questions:
            errors[f"answers.{index}.questionId"] = [f"Question {qid} does not exist."]
        if oid not in option_owner:
            errors[f"answers.{index}.optionId"] = [f"Option {oid} does not exist."]
    if errors:
        raise AnswerValidationError(errors)

    selected: dict[int, set[int]] = {qid: set() for qid in quiz.questions.values_list("id", flat=True)}
    dropped = 0
    for qid, oid in pairs:
        if qid in selected and option_owner[oid] == qid:
            selected[qid].add(oid)
        else:
            dropped += 1
            logger.debug("Dropping answer question=%s option=%s for quiz %s", qid, oid, quiz.pk)
    if dropped:
        logger.info("Dropped %d mismatched answer reference(s) for quiz %s", dropped, quiz.pk)
    return selected
