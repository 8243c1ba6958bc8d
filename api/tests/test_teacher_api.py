from __future__ import annotations

from datetime import timedelta

import pytest
from django.contrib.auth.models import User
from django.utils import timezone
from rest_framework.test import APIClient

from classrooms.models import SchoolClass
from quizzes.attempts import start_attempt, submit_attempt
from quizzes.models import Option, Question, Quiz, Submission

pytestmark = pytest.mark.django_db


@pytest.fixture
def as_teacher(teacher):
    c = APIClient()
    c.force_authenticate(user=teacher)
    return c


def _quiz_payload(**overrides):
    now = timezone.now()
    payload = {
        "title": "Fractions",
        "description": "Week 3",
        "durationMinutes": 20,
        "openAt": (now - timedelta(minutes=5)).isoformat(),
        "closeAt": (now + timedelta(days=1)).isoformat(),
        "questions": [
            {
                "text": "1/2 + 1/4 = ?",
                "options": [
                    {"text": "3/4", "isCorrect": True},
                    {"text": "2/6", "isCorrect": False},
                ],
            },
            {
                "text": "2/4 = ?",
                "options": [
                    {"text": "1/2", "isCorrect": True},
                    {"text": "1/4", "isCorrect": False},
                    {"text": "2", "isCorrect": False},
                ],
            },
        ],
    }
    payload.update(overrides)
    return payload


def test_create_quiz_with_nested_questions(as_teacher, school_class, teacher):
    r = as_teacher.post("/api/v1/quizzes/", _quiz_payload(classIds=[school_class.id]), format="json")
    assert r.status_code == 201, r.content
    data = r.json()
    assert data["classIds"] == [school_class.id]
    assert [len(q["options"]) for q in data["questions"]] == [2, 3]
    assert data["readiness"] == {"ready": True, "issues": []}

    quiz = Quiz.objects.get(pk=data["id"])
    assert quiz.owner == teacher
    assert list(quiz.questions.values_list("order", flat=True)) == [0, 1]
    assert Option.objects.filter(question__quiz=quiz, is_correct=True).count() == 2


def test_legacy_single_class_id_is_accepted(as_teacher, school_class):
    r = as_teacher.post("/api/v1/quizzes/", _quiz_payload(classId=school_class.id), format="json")
    assert r.status_code == 201, r.content
    assert r.json()["classIds"] == [school_class.id]


@pytest.mark.security
def test_assigning_someone_elses_class_is_forbidden(as_teacher, make_teacher):
    foreign = SchoolClass.objects.create(teacher=make_teacher("other"), name="Other")
    r = as_teacher.post("/api/v1/quizzes/", _quiz_payload(classIds=[foreign.id]), format="json")
    assert r.status_code == 403
    assert not Quiz.objects.exists()


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"durationMinutes": 0}, "durationMinutes"),
        ({"durationMinutes": 10_000}, "durationMinutes"),
        ({"questions": []}, "questions"),
        ({"questions": [{"text": "Lonely", "options": [{"text": "only", "isCorrect": True}]}]}, "questions"),
    ],
)
def test_quiz_validation_errors(as_teacher, school_class, overrides, field):
    r = as_teacher.post("/api/v1/quizzes/", _quiz_payload(classIds=[school_class.id], **overrides), format="json")
    assert r.status_code == 400
    assert field in r.json()


def test_close_must_follow_open(as_teacher, school_class):
    now = timezone.now()
    payload = _quiz_payload(classIds=[school_class.id], openAt=now.isoformat(), closeAt=(now - timedelta(hours=1)).isoformat())
    r = as_teacher.post("/api/v1/quizzes/", payload, format="json")
    assert r.status_code == 400
    assert "closeAt" in r.json()


def test_update_upserts_and_prunes_questions(as_teacher, school_class, teacher):
    created = as_teacher.post("/api/v1/quizzes/", _quiz_payload(classIds=[school_class.id]), format="json").json()
    second_class = SchoolClass.objects.create(teacher=teacher, name="2BAC")
    first_q = created["questions"][0]

    payload = _quiz_payload(
        title="Fractions v2",
        classIds=[second_class.id],
        questions=[
            {
                "id": first_q["id"],
                "text": "1/2 + 1/4 equals",
                "options": [
                    {"id": first_q["options"][0]["id"], "text": "3/4", "isCorrect": True},
                    {"text": "1", "isCorrect": False},
                ],
            }
        ],
    )
    r = as_teacher.put(f"/api/v1/quizzes/{created['id']}/", payload, format="json")
    assert r.status_code == 200, r.content
    data = r.json()
    assert data["title"] == "Fractions v2"
    assert data["classIds"] == [second_class.id]
    assert [q["id"] for q in data["questions"]] == [first_q["id"]]
    assert {o["text"] for o in data["questions"][0]["options"]} == {"3/4", "1"}
    assert Question.objects.filter(quiz_id=created["id"]).count() == 1
    assert not Option.objects.filter(pk=first_q["options"][1]["id"]).exists()


def test_teacher_only_sees_own_quizzes(as_teacher, make_quiz, make_teacher, quiz):
    foreign = make_quiz(make_teacher("other"), [])
    r = as_teacher.get("/api/v1/quizzes/")
    assert r.status_code == 200
    assert [q["id"] for q in r.json()["results"]] == [quiz.id]
    assert as_teacher.get(f"/api/v1/quizzes/{foreign.id}/").status_code == 404


@pytest.mark.security
def test_students_cannot_author(student, school_class):
    c = APIClient()
    c.force_authenticate(user=student)
    r = c.post("/api/v1/quizzes/", _quiz_payload(classIds=[school_class.id]), format="json")
    assert r.status_code == 403
    assert c.get("/api/v1/submissions/").status_code == 403


def test_submissions_listing_and_reset(as_teacher, quiz, student, key_of):
    rows = key_of(quiz)
    start_attempt(quiz, student)
    submit_attempt(quiz, student, [{"questionId": rows[0][0].id, "optionId": rows[0][1].id}])

    r = as_teacher.get(f"/api/v1/quizzes/{quiz.id}/submissions/")
    assert r.status_code == 200
    results = r.json()["results"]
    assert len(results) == 1
    assert results[0]["student"]["username"] == student.username
    assert results[0]["score"] == 1.0
    assert results[0]["answers"][0]["optionId"] == rows[0][1].id

    r = as_teacher.get("/api/v1/submissions/", {"quiz": quiz.id})
    assert [s["id"] for s in r.json()["results"]] == [results[0]["id"]]
    r = as_teacher.get("/api/v1/submissions/", {"student": student.id})
    assert len(r.json()["results"]) == 1

    r = as_teacher.delete(f"/api/v1/quizzes/{quiz.id}/submissions/{student.id}/")
    assert r.status_code == 204
    assert not Submission.objects.exists()
    r = as_teacher.delete(f"/api/v1/quizzes/{quiz.id}/submissions/{student.id}/")
    assert r.status_code == 404

    # The student can retake after the reset
    c = APIClient()
    c.force_authenticate(user=student)
    assert c.post(f"/api/v1/quizzes/{quiz.id}/start/", format="json").status_code == 201


@pytest.mark.security
def test_reset_on_foreign_quiz_is_404(make_teacher, quiz, student):
    start_attempt(quiz, student)
    c = APIClient()
    c.force_authenticate(user=make_teacher("other"))
    assert c.delete(f"/api/v1/quizzes/{quiz.id}/submissions/{student.id}/").status_code == 404
    assert Submission.objects.filter(quiz=quiz, student=student).exists()


def test_class_crud_and_roster(as_teacher, teacher, school_class, student, make_teacher, make_student):
    r = as_teacher.post("/api/v1/classes/", {"name": "2BAC"}, format="json")
    assert r.status_code == 201
    assert SchoolClass.objects.get(pk=r.json()["id"]).teacher == teacher

    r = as_teacher.get("/api/v1/classes/", {"ordering": "name"})
    counts = {c["name"]: c["studentCount"] for c in r.json()["results"]}
    assert counts == {"1BAC": 1, "2BAC": 0}

    r = as_teacher.get(f"/api/v1/classes/{school_class.id}/students/")
    assert r.status_code == 200
    assert [s["username"] for s in r.json()] == [student.username]

    foreign = SchoolClass.objects.create(teacher=make_teacher("other"), name="Other")
    assert as_teacher.get(f"/api/v1/classes/{foreign.id}/").status_code == 404


def test_create_and_update_student(as_teacher, school_class, make_teacher):
    r = as_teacher.post(
        "/api/v1/students/",
        {"username": "amina", "email": "amina@ex.com", "fullName": "Amina B.", "classId": school_class.id, "password": "secret123"},
        format="json",
    )
    assert r.status_code == 201, r.content
    assert "password" not in r.json()
    user = User.objects.get(username="amina")
    assert user.check_password("secret123")
    assert user.profile.role == "student"
    assert user.profile.school_class == school_class
    assert user.profile.full_name == "Amina B."

    r = as_teacher.patch(f"/api/v1/students/{user.id}/", {"fullName": "Amina Benali"}, format="json")
    assert r.status_code == 200
    user.profile.refresh_from_db()
    assert user.profile.full_name == "Amina Benali"

    foreign = SchoolClass.objects.create(teacher=make_teacher("other"), name="Other")
    r = as_teacher.patch(f"/api/v1/students/{user.id}/", {"classId": foreign.id}, format="json")
    assert r.status_code == 400


def test_student_create_requires_password(as_teacher, school_class):
    r = as_teacher.post("/api/v1/students/", {"username": "nopw", "classId": school_class.id}, format="json")
    assert r.status_code == 400
    assert "password" in r.json()


def test_schema_is_served():
    r = APIClient().get("/api/schema/")
    assert r.status_code == 200
    assert b"/api/v1/quizzes/{id}/submit/" in r.content
