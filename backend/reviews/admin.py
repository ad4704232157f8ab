from django.contrib import admin

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("title", "trip", "user", "rating_overall", "status", "is_verified_purchase", "created_at")
    list_filter = ("status", "rating_overall", "is_verified_purchase")
    search_fields = ("title", "content", "user__email", "trip__name")
    readonly_fields = ("helpful_votes", "is_verified_purchase")
    actions = ["approve_reviews"]

    @admin.action(description="Approve selected reviews")
    def approve_reviews(self, request, queryset):
        for review in queryset.exclude(status=Review.APPROVED):
            review.status = Review.APPROVED
            review.save(update_fields=["status", "updated_at"])
