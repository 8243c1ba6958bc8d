"""API routes for Quizdesk.

Versioned REST endpoints under /api/v1/, the OpenAPI schema and its
interactive documentation.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
)


from .views import (
    MeView,
    SchoolClassViewSet,
    StudentViewSet,
    QuizViewSet,
    SubmissionViewSet,
    StudentQuizListView,
)

router = DefaultRouter()
router.register(r"api/v1/classes", SchoolClassViewSet, basename="classes")
router.register(r"api/v1/students", StudentViewSet, basename="students")
router.register(r"api/v1/quizzes", QuizViewSet, basename="quizzes")
router.register(r"api/v1/submissions", SubmissionViewSet, basename="submissions")

urlpatterns = [
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/v1/me/", MeView.as_view(), name="me"),
    path("api/v1/student/quizzes/", StudentQuizListView.as_view(), name="student-quizzes"),
    path("", include(router.urls)),
]
