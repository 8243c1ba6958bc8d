from django.contrib import admin

from .models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "full_name", "school_class")
    list_filter = ("role", "school_class")
    search_fields = ("user__username", "full_name")
