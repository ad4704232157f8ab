from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import RefreshTokenRecord, User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ("email", "full_name", "role", "is_active", "is_email_verified", "date_joined")
    list_filter = ("role", "is_active", "is_email_verified")
    search_fields = ("email", "full_name", "phone")
    ordering = ("-date_joined",)
    filter_horizontal = ("favorite_destinations",)
    fieldsets = DjangoUserAdmin.fieldsets + (
        (
            "Traveler profile",
            {
                "fields": (
                    "full_name",
                    "phone",
                    "bio",
                    "address",
                    "profile_picture",
                    "role",
                    "preferences",
                    "favorite_destinations",
                    "is_email_verified",
                )
            },
        ),
    )


@admin.register(RefreshTokenRecord)
class RefreshTokenRecordAdmin(admin.ModelAdmin):
    list_display = ("user", "created_at", "expires_at")
    search_fields = ("user__email",)
    readonly_fields = ("token_hash",)
