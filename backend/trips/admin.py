from django.contrib import admin

from .models import Trip, TripDate


class TripDateInline(admin.TabularInline):
    model = TripDate
    extra = 0


@admin.register(Trip)
class TripAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "destination",
        "price_amount",
        "status",
        "current_bookings",
        "max_capacity",
        "rating_average",
        "is_featured",
    )
    list_filter = ("status", "trip_type", "difficulty_level", "cancellation_policy", "is_featured")
    search_fields = ("name", "destination__name", "package_id")
    readonly_fields = ("slug", "current_bookings", "rating_average", "rating_count", "discount_percentage")
    inlines = [TripDateInline]
