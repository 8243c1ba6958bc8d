from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, Mapping

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

SINGLE_CHOICE = "single_choice"
EXACT_SET = "exact_set"
POLICIES = (SINGLE_CHOICE, EXACT_SET)

TWO_PLACES = Decimal("0.01")


def build_answer_key(questions: Iterable) -> dict[int, frozenset[int]]:
    """Map each question id to the ids of its options flagged correct.

    Expects questions with their `options` loaded (prefetch them to avoid a
    query per question).
    """
    return {
        q.id: frozenset(o.id for o in q.options.all() if o.is_correct)
        for q in questions
    }


def question_points(correct: frozenset[int], selected: set[int] | frozenset[int], policy: str) -> int:
    if not correct or not selected:
        return 0
    if policy == SINGLE_CHOICE:
        return 1 if len(selected) == 1 and next(iter(selected)) in correct else 0
    if policy == EXACT_SET:
        return 1 if set(selected) == set(correct) else 0
    raise ImproperlyConfigured(f"Unknown QUIZ_SCORING_POLICY {policy!r}; expected one of {POLICIES}.")


def resolve_policy(policy: str | None = None) -> str:
    policy = policy or getattr(settings, "QUIZ_SCORING_POLICY", SINGLE_CHOICE)
    if policy not in POLICIES:
        raise ImproperlyConfigured(f"Unknown QUIZ_SCORING_POLICY {policy!r}; expected one of {POLICIES}.")
    return policy


def score_answers(
    answer_key: Mapping[int, frozenset[int]],
    selected: Mapping[int, set[int]],
    policy: str | None = None,
) -> Decimal:
    """Score validated answers against the answer key.

    - answer_key: question_id -> ids of correct options (see `build_answer_key`)
    - selected: question_id -> ids of options the student chose

    Returns the number of questions answered correctly, to two decimal places
    (a count, not a percentage). Questions missing from `selected`, or with no
    correct option, contribute nothing.
    """
    policy = resolve_policy(policy)
    points = sum(question_points(correct, selected.get(qid, set()), policy) for qid, correct in answer_key.items())
    return Decimal(points).quantize(TWO_PLACES)


def quiz_readiness(quiz) -> dict[str, Any]:
    """Report authoring issues that make a quiz unscorable or ambiguous.

    Conditions checked:
    - At least one question
    - Each question has at least two options
    - Each question has at least one correct option
    - Under the single-choice policy, at most one correct option per question

    Returns: { 'ready': bool, 'issues': [str] }. Informational only; students
    can still take a quiz that is not ready.
    """
    issues: list[str] = []
    questions = list(quiz.questions.all())
    if not questions:
        issues.append("Quiz has no questions.")
    single = resolve_policy() == SINGLE_CHOICE
    for position, q in enumerate(questions, start=1):
        options = list(q.options.all())
        correct_count = sum(1 for o in options if o.is_correct)
        if len(options) < 2:
            issues.append(f"Question {position}: must have at least two options.")
        if correct_count == 0:
            issues.append(f"Question {position}: has no correct option and can never score.")
        elif single and correct_count > 1:
            issues.append(f"Question {position}: has {correct_count} correct options but only single selections score.")
    return {"ready": len(issues) == 0, "issues": issues}
