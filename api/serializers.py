"""Serializers for REST API v1.

Field names are camelCase on the wire and snake_case in the models. Legacy
payloads that assign a quiz to a single `classId` are folded into
`classIds` here and nowhere else.
"""
from __future__ import annotations

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone
from rest_framework import serializers
from rest_framework.exceptions import PermissionDenied

from accounts.models import Role
from classrooms.models import SchoolClass
from quizzes.availability import submission_status
from quizzes.models import Answer, Option, Question, Quiz, Submission
from quizzes.scoring import quiz_readiness

User = get_user_model()


class MeSerializer(serializers.ModelSerializer):
    role = serializers.CharField(source="profile.role", read_only=True)
    fullName = serializers.CharField(source="profile.full_name", read_only=True)
    classId = serializers.IntegerField(source="profile.school_class_id", read_only=True, allow_null=True)

    class Meta:
        model = User
        fields = ("id", "username", "email", "role", "fullName", "classId")


class SchoolClassSerializer(serializers.ModelSerializer):
    studentCount = serializers.IntegerField(source="student_count", read_only=True, default=0)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = SchoolClass
        fields = ("id", "name", "studentCount", "createdAt")


class StudentSerializer(serializers.ModelSerializer):
    """Student accounts managed by a teacher.

    `classId` is limited to the requesting teacher's own classes.
    """

    fullName = serializers.CharField(source="profile.full_name", required=False, allow_blank=True, max_length=200)
    classId = serializers.PrimaryKeyRelatedField(source="profile.school_class", queryset=SchoolClass.objects.none())
    password = serializers.CharField(write_only=True, required=False, min_length=6, style={"input_type": "password"})

    class Meta:
        model = User
        fields = ("id", "username", "email", "fullName", "classId", "password")

    def get_fields(self):
        fields = super().get_fields()
        request = self.context.get("request")
        if request is not None and request.user.is_authenticated:
            fields["classId"].queryset = SchoolClass.objects.filter(teacher=request.user)
        return fields

    def validate(self, attrs):
        if self.instance is None and not attrs.get("password"):
            raise serializers.ValidationError({"password": ["This field is required."]})
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        profile_data = validated_data.pop("profile", {})
        password = validated_data.pop("password")
        user = User.objects.create_user(password=password, **validated_data)
        profile = user.profile
        profile.role = Role.STUDENT
        profile.full_name = profile_data.get("full_name", "")
        profile.school_class = profile_data.get("school_class")
        profile.save(update_fields=["role", "full_name", "school_class", "updated_at"])
        return user

    @transaction.atomic
    def update(self, instance, validated_data):
        profile_data = validated_data.pop("profile", {})
        password = validated_data.pop("password", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        if profile_data:
            profile = instance.profile
            for attr, value in profile_data.items():
                setattr(profile, attr, value)
            profile.save()
        return instance


# Student-facing quiz content: never exposes the answer key


class OptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Option
        fields = ("id", "text", "order")


class QuestionSerializer(serializers.ModelSerializer):
    options = OptionSerializer(many=True, read_only=True)

    class Meta:
        model = Question
        fields = ("id", "text", "order", "options")


class StudentQuizSerializer(serializers.ModelSerializer):
    """A visible quiz plus the caller's status on it.

    Context: `now` and `submissions` (quiz_id -> Submission).
    """

    durationMinutes = serializers.IntegerField(source="duration_minutes")
    openAt = serializers.DateTimeField(source="open_at")
    closeAt = serializers.DateTimeField(source="close_at")
    classIds = serializers.SerializerMethodField()
    questions = QuestionSerializer(many=True, read_only=True)
    hasSubmission = serializers.SerializerMethodField()
    submissionStatus = serializers.SerializerMethodField()

    class Meta:
        model = Quiz
        fields = (
            "id",
            "title",
            "description",
            "durationMinutes",
            "openAt",
            "closeAt",
            "classIds",
            "questions",
            "hasSubmission",
            "submissionStatus",
        )

    def get_classIds(self, obj) -> list[int]:
        return [c.id for c in obj.classes.all()]

    def _submission(self, obj):
        return self.context.get("submissions", {}).get(obj.id)

    def get_hasSubmission(self, obj) -> bool:
        return self._submission(obj) is not None

    def get_submissionStatus(self, obj) -> str:
        return submission_status(obj, self._submission(obj), self.context["now"])


# Teacher-facing authoring


class OptionAuthorSerializer(serializers.ModelSerializer):
    id = serializers.IntegerField(required=False)
    isCorrect = serializers.BooleanField(source="is_correct")

    class Meta:
        model = Option
        fields = ("id", "text", "order", "isCorrect")
        read_only_fields = ("order",)


class QuestionAuthorSerializer(serializers.ModelSerializer):
    id = serializers.IntegerField(required=False)
    options = OptionAuthorSerializer(many=True)

    class Meta:
        model = Question
        fields = ("id", "text", "order", "options")
        read_only_fields = ("order",)

    def validate_options(self, value):
        if len(value) < 2:
            raise serializers.ValidationError("A question needs at least two options.")
        return value


class QuizAuthorSerializer(serializers.ModelSerializer):
    durationMinutes = serializers.IntegerField(source="duration_minutes", min_value=1)
    openAt = serializers.DateTimeField(source="open_at")
    closeAt = serializers.DateTimeField(source="close_at")
    classIds = serializers.ListField(child=serializers.IntegerField(min_value=1), write_only=True, allow_empty=False)
    questions = QuestionAuthorSerializer(many=True)
    readiness = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Quiz
        fields = (
            "id",
            "title",
            "description",
            "durationMinutes",
            "openAt",
            "closeAt",
            "classIds",
            "questions",
            "readiness",
            "createdAt",
            "updatedAt",
        )

    def to_internal_value(self, data):
        # Legacy single-class payloads: {"classId": 3} -> {"classIds": [3]}
        if hasattr(data, "get") and "classIds" not in data and data.get("classId") is not None:
            data = {**data, "classIds": [data.get("classId")]}
        return super().to_internal_value(data)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["classIds"] = [c.id for c in instance.classes.all()]
        return data

    def get_readiness(self, obj) -> dict:
        return quiz_readiness(obj)

    def validate_durationMinutes(self, value):
        limit = getattr(settings, "QUIZ_MAX_DURATION_MINUTES", 180)
        if value > limit:
            raise serializers.ValidationError(f"Ensure this value is less than or equal to {limit}.")
        return value

    def validate_questions(self, value):
        if not value:
            raise serializers.ValidationError("A quiz needs at least one question.")
        return value

    def validate_classIds(self, value):
        request = self.context["request"]
        wanted = set(value)
        owned = set(SchoolClass.objects.filter(teacher=request.user, pk__in=wanted).values_list("id", flat=True))
        if wanted - owned:
            raise PermissionDenied("One or more classes do not belong to you.")
        return sorted(wanted)

    def validate(self, attrs):
        open_at = attrs.get("open_at", getattr(self.instance, "open_at", None))
        close_at = attrs.get("close_at", getattr(self.instance, "close_at", None))
        if open_at and close_at and close_at <= open_at:
            raise serializers.ValidationError({"closeAt": ["Must be after openAt."]})
        return attrs

    def _write_questions(self, quiz: Quiz, questions_data: list[dict]) -> None:
        existing = {q.id: q for q in quiz.questions.prefetch_related("options")}
        kept_question_ids: list[int] = []
        for index, q_data in enumerate(questions_data):
            options_data = q_data.pop("options")
            qid = q_data.get("id")
            if qid is not None:
                if qid not in existing:
                    raise serializers.ValidationError({"questions": [f"Question {qid} does not belong to this quiz."]})
                question = existing[qid]
                question.text = q_data["text"]
                question.order = index
                question.save(update_fields=["text", "order"])
            else:
                question = Question.objects.create(quiz=quiz, text=q_data["text"], order=index)
            kept_question_ids.append(question.id)

            existing_options = {o.id: o for o in question.options.all()} if qid is not None else {}
            kept_option_ids: list[int] = []
            for o_index, o_data in enumerate(options_data):
                oid = o_data.get("id")
                if oid is not None:
                    if oid not in existing_options:
                        raise serializers.ValidationError({"questions": [f"Option {oid} does not belong to question {question.id}."]})
                    option = existing_options[oid]
                    option.text = o_data["text"]
                    option.is_correct = o_data["is_correct"]
                    option.order = o_index
                    option.save(update_fields=["text", "is_correct", "order"])
                else:
                    option = Option.objects.create(
                        question=question, text=o_data["text"], is_correct=o_data["is_correct"], order=o_index
                    )
                kept_option_ids.append(option.id)
            question.options.exclude(pk__in=kept_option_ids).delete()
        quiz.questions.exclude(pk__in=kept_question_ids).delete()

    @transaction.atomic
    def create(self, validated_data):
        class_ids = validated_data.pop("classIds")
        questions_data = validated_data.pop("questions")
        quiz = Quiz.objects.create(**validated_data)
        quiz.classes.set(class_ids)
        self._write_questions(quiz, questions_data)
        return quiz

    @transaction.atomic
    def update(self, instance, validated_data):
        class_ids = validated_data.pop("classIds", None)
        questions_data = validated_data.pop("questions", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        if class_ids is not None:
            instance.classes.set(class_ids)
        if questions_data is not None:
            self._write_questions(instance, questions_data)
        return instance


# Attempts


class SubmissionSerializer(serializers.ModelSerializer):
    quizId = serializers.IntegerField(source="quiz_id", read_only=True)
    studentId = serializers.IntegerField(source="student_id", read_only=True)
    startedAt = serializers.DateTimeField(source="started_at", read_only=True)
    expiresAt = serializers.DateTimeField(source="expires_at", read_only=True)
    submittedAt = serializers.DateTimeField(source="submitted_at", read_only=True)
    score = serializers.DecimalField(max_digits=6, decimal_places=2, coerce_to_string=False, read_only=True)
    timeRemainingSeconds = serializers.SerializerMethodField()

    class Meta:
        model = Submission
        fields = ("id", "quizId", "studentId", "startedAt", "expiresAt", "submittedAt", "score", "timeRemainingSeconds")

    def get_timeRemainingSeconds(self, obj) -> int | None:
        # Derived on every read; nothing server-side counts down
        if obj.is_submitted:
            return None
        return int(obj.time_remaining(timezone.now()).total_seconds())


class AnswerSerializer(serializers.ModelSerializer):
    questionId = serializers.IntegerField(source="question_id", read_only=True)
    optionId = serializers.IntegerField(source="option_id", read_only=True)
    optionText = serializers.CharField(source="option.text", read_only=True)
    isCorrect = serializers.BooleanField(source="option.is_correct", read_only=True)

    class Meta:
        model = Answer
        fields = ("id", "questionId", "optionId", "optionText", "isCorrect")


class SubmissionResultSerializer(SubmissionSerializer):
    answers = AnswerSerializer(many=True, read_only=True)

    class Meta(SubmissionSerializer.Meta):
        fields = SubmissionSerializer.Meta.fields + ("answers",)


class SubmissionDetailSerializer(SubmissionResultSerializer):
    student = MeSerializer(read_only=True)

    class Meta(SubmissionResultSerializer.Meta):
        fields = SubmissionResultSerializer.Meta.fields + ("student",)


class AnswerInputSerializer(serializers.Serializer):
    """Request schema only; parsing happens in `quizzes.validation`."""

    questionId = serializers.IntegerField()
    optionId = serializers.IntegerField()


class SubmitRequestSerializer(serializers.Serializer):
    answers = AnswerInputSerializer(many=True, required=False, allow_null=True)
