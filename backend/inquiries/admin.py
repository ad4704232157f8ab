from django.contrib import admin

from .models import Inquiry


@admin.register(Inquiry)
class InquiryAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "phone", "package", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("name", "email", "phone", "package")
    readonly_fields = ("responded_at", "responded_by")
