from django.contrib import admin

from modules.identity.models import Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "created_at")
    list_filter = ("role",)
    search_fields = ("user__username", "user__email")
    ordering = ("-created_at",)
    raw_id_fields = ("user",)
