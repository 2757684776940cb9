"""Admin interface for accounts app."""

from django.contrib import admin

from accounts.models import AdminUser


@admin.register(AdminUser)
class AdminUserAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["email", "full_name", "brand_name", "is_active", "is_staff", "last_login", "date_joined"]
    list_filter = ["is_active", "is_staff", "two_factor_enabled"]
    search_fields = ["email", "full_name", "brand_name"]
    ordering = ["-date_joined"]
    readonly_fields = ["last_login", "date_joined", "otp_verified"]
    exclude = ["password"]
    filter_horizontal = ["groups", "user_permissions"]
