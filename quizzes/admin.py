from django.contrib import admin

from .models import Quiz, Question, Option, Submission, Answer


class OptionInline(admin.TabularInline):
    model = Option
    extra = 0


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    list_display = ("title", "owner", "duration_minutes", "open_at", "close_at")
    list_filter = ("classes",)
    search_fields = ("title", "owner__username")
    filter_horizontal = ("classes",)


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ("quiz", "order", "text")
    list_filter = ("quiz",)
    search_fields = ("text",)
    inlines = [OptionInline]


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    list_display = ("quiz", "student", "started_at", "expires_at", "submitted_at", "score")
    list_filter = ("quiz",)
    search_fields = ("student__username",)
    readonly_fields = ("started_at", "expires_at", "submitted_at", "score")


@admin.register(Answer)
class AnswerAdmin(admin.ModelAdmin):
    list_display = ("submission", "question", "option")
