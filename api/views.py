"""REST API v1 views.

Students list their quizzes, start attempts and submit answers; teachers
manage classes, student accounts and quizzes, and review or reset
submissions. The attempt rules themselves live in `quizzes.attempts`.
"""
from __future__ import annotations

from collections.abc import Mapping

from django.contrib.auth import get_user_model
from django.db.models import Count, Prefetch, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.models import Role
from classrooms.models import SchoolClass
from quizzes.attempts import reset_attempt, start_attempt, submit_attempt
from quizzes.availability import visible_quizzes
from quizzes.exceptions import AnswerValidationError, QuizNotAssignedError
from quizzes.models import Answer, Quiz, Submission
from .permissions import IsStudent, IsTeacher
from .serializers import (
    MeSerializer,
    QuizAuthorSerializer,
    SchoolClassSerializer,
    StudentQuizSerializer,
    StudentSerializer,
    SubmissionDetailSerializer,
    SubmissionResultSerializer,
    SubmissionSerializer,
    SubmitRequestSerializer,
)

User = get_user_model()


def _answers_prefetch() -> Prefetch:
    return Prefetch("answers", queryset=Answer.objects.select_related("option"))


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses=MeSerializer)
    def get(self, request):
        return Response(MeSerializer(request.user).data)


class SchoolClassViewSet(viewsets.ModelViewSet):
    serializer_class = SchoolClassSerializer
    permission_classes = [IsTeacher]
    ordering_fields = ["name", "created_at"]

    def get_queryset(self):
        if not self.request.user.is_authenticated:
            return SchoolClass.objects.none()
        return SchoolClass.objects.filter(teacher=self.request.user).annotate(
            student_count=Count("student_profiles", filter=Q(student_profiles__role=Role.STUDENT))
        )

    def perform_create(self, serializer):
        serializer.save(teacher=self.request.user)

    @action(detail=True, methods=["get"])
    def students(self, request, pk=None):
        school_class = self.get_object()
        qs = User.objects.filter(profile__school_class=school_class, profile__role=Role.STUDENT).select_related("profile").order_by("username")
        return Response(StudentSerializer(qs, many=True, context=self.get_serializer_context()).data)


class StudentViewSet(viewsets.ModelViewSet):
    """Student accounts in the requesting teacher's classes."""

    serializer_class = StudentSerializer
    permission_classes = [IsTeacher]
    filterset_fields = {"profile__school_class": ["exact"]}
    ordering_fields = ["username", "id"]

    def get_queryset(self):
        if not self.request.user.is_authenticated:
            return User.objects.none()
        return (
            User.objects.filter(profile__role=Role.STUDENT, profile__school_class__teacher=self.request.user)
            .select_related("profile")
            .order_by("username")
        )


class QuizViewSet(viewsets.ModelViewSet):
    """Teacher quiz authoring plus the student `start`/`submit` actions."""

    serializer_class = QuizAuthorSerializer
    lookup_value_regex = r"\d+"
    ordering_fields = ["open_at", "close_at", "title", "created_at"]

    def get_permissions(self):
        if self.action in ("start", "submit"):
            return [IsStudent()]
        return [IsTeacher()]

    def get_queryset(self):
        if not self.request.user.is_authenticated:
            return Quiz.objects.none()
        return Quiz.objects.filter(owner=self.request.user).prefetch_related("classes", "questions__options")

    def perform_create(self, serializer):
        serializer.save(owner=self.request.user)

    def _student_quiz(self, pk) -> Quiz:
        # Unknown and unassigned quizzes both surface as 404
        quiz = Quiz.objects.prefetch_related("classes").filter(pk=pk).first()
        if quiz is None:
            raise QuizNotAssignedError()
        return quiz

    @extend_schema(request=None, responses={201: SubmissionSerializer, 200: SubmissionSerializer})
    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):
        quiz = self._student_quiz(pk)
        submission, created = start_attempt(quiz, request.user)
        return Response(
            {"submission": SubmissionSerializer(submission).data},
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @extend_schema(request=SubmitRequestSerializer, responses=SubmissionResultSerializer)
    @action(detail=True, methods=["post"])
    def submit(self, request, pk=None):
        quiz = self._student_quiz(pk)
        if not isinstance(request.data, Mapping):
            raise AnswerValidationError({"non_field_errors": ["Expected an object with an answers list."]})
        submission = submit_attempt(quiz, request.user, request.data.get("answers"))
        submission = Submission.objects.prefetch_related(_answers_prefetch()).get(pk=submission.pk)
        return Response({"submission": SubmissionResultSerializer(submission).data, "score": submission.score})

    @extend_schema(responses=SubmissionDetailSerializer(many=True))
    @action(detail=True, methods=["get"])
    def submissions(self, request, pk=None):
        quiz = self.get_object()
        qs = (
            Submission.objects.filter(quiz=quiz)
            .select_related("student__profile")
            .prefetch_related(_answers_prefetch())
            .order_by("student__username")
        )
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(SubmissionDetailSerializer(page, many=True).data)
        return Response(SubmissionDetailSerializer(qs, many=True).data)

    @extend_schema(request=None, responses={204: None})
    @action(detail=True, methods=["delete"], url_path=r"submissions/(?P<student_id>\d+)")
    def reset(self, request, pk=None, student_id=None):
        quiz = self.get_object()
        student = get_object_or_404(User, pk=student_id)
        if not reset_attempt(quiz, student):
            return Response({"detail": "No submission to reset."}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)


class SubmissionViewSet(viewsets.ReadOnlyModelViewSet):
    """Submissions to the requesting teacher's quizzes."""

    serializer_class = SubmissionDetailSerializer
    permission_classes = [IsTeacher]
    filterset_fields = ["quiz", "student"]
    ordering_fields = ["started_at", "submitted_at", "score"]

    def get_queryset(self):
        if not self.request.user.is_authenticated:
            return Submission.objects.none()
        return (
            Submission.objects.filter(quiz__owner=self.request.user)
            .select_related("student__profile")
            .prefetch_related(_answers_prefetch())
        )


class StudentQuizListView(generics.ListAPIView):
    """Quizzes visible to the requesting student, with their status labels."""

    serializer_class = StudentQuizSerializer
    permission_classes = [IsStudent]
    filter_backends: list = []
    now = None

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        # One clock reading for both the visibility filter and status labels
        self.now = timezone.now()

    def get_queryset(self):
        return visible_quizzes(self.request.user, self.now or timezone.now())

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["now"] = self.now or timezone.now()
        user = getattr(self.request, "user", None) if self.request else None
        context["submissions"] = (
            {s.quiz_id: s for s in Submission.objects.filter(student=user)}
            if getattr(user, "is_authenticated", False)
            else {}
        )
        return context
