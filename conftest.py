import logging
from datetime import timedelta

import pytest
from django.contrib.auth.models import User
from django.utils import timezone

from accounts.models import Role
from classrooms.models import SchoolClass
from quizzes.models import Option, Question, Quiz


@pytest.fixture(autouse=True)
def silence_django_request_logger():
    """Reduce noise from expected 4xx/5xx in passing tests.

    Many tests intentionally exercise rejection paths. Django logs these at
    WARNING via 'django.request'; raise that logger to ERROR during tests.
    """
    logger = logging.getLogger("django.request")
    old = logger.level
    logger.setLevel(logging.ERROR)
    try:
        yield
    finally:
        logger.setLevel(old)


@pytest.fixture
def now():
    return timezone.now()


@pytest.fixture
def make_teacher(db):
    def _make(username="teacher"):
        u = User.objects.create_user(username=username, password="pw", email=f"{username}@ex.com")
        u.profile.role = Role.TEACHER
        u.profile.save(update_fields=["role"])
        return u

    return _make


@pytest.fixture
def make_student(db):
    def _make(username="student", school_class=None):
        u = User.objects.create_user(username=username, password="pw", email=f"{username}@ex.com")
        u.profile.role = Role.STUDENT
        u.profile.school_class = school_class
        u.profile.save(update_fields=["role", "school_class"])
        return u

    return _make


@pytest.fixture
def make_quiz(db, now):
    """Build a quiz: `questions` questions with `options` options each.

    Option index `correct` of every question is flagged correct (None for
    no correct option).
    """

    def _make(owner, classes=(), *, questions=3, options=4, correct=0, opens=None, closes=None, duration=30, title="Quiz"):
        quiz = Quiz.objects.create(
            owner=owner,
            title=title,
            duration_minutes=duration,
            open_at=opens or now - timedelta(hours=1),
            close_at=closes or now + timedelta(days=1),
        )
        quiz.classes.set(classes)
        for qi in range(questions):
            q = Question.objects.create(quiz=quiz, order=qi, text=f"Question {qi + 1}")
            for oi in range(options):
                Option.objects.create(question=q, order=oi, text=f"Option {oi + 1}", is_correct=(oi == correct))
        return quiz

    return _make


@pytest.fixture
def teacher(make_teacher):
    return make_teacher()


@pytest.fixture
def school_class(teacher):
    return SchoolClass.objects.create(teacher=teacher, name="1BAC")


@pytest.fixture
def student(make_student, school_class):
    return make_student(school_class=school_class)


@pytest.fixture
def quiz(make_quiz, teacher, school_class):
    return make_quiz(teacher, [school_class])


@pytest.fixture
def key_of():
    """Return [(question, correct_option, [wrong_options])] in question order."""

    def _key(quiz):
        rows = []
        for q in quiz.questions.prefetch_related("options"):
            opts = list(q.options.all())
            correct = next((o for o in opts if o.is_correct), None)
            rows.append((q, correct, [o for o in opts if not o.is_correct]))
        return rows

    return _key
