from django.contrib import admin

from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    ordering = ("email",)
    list_display = ("email", "full_name", "is_staff", "is_active", "must_change_password", "date_joined")
    list_filter = ("is_staff", "is_active", "must_change_password")
    search_fields = ("email", "full_name")
    readonly_fields = ("password", "date_joined", "last_login")
    exclude = ("groups", "user_permissions")
