from django.contrib import admin

from .models import Destination


@admin.register(Destination)
class DestinationAdmin(admin.ModelAdmin):
    list_display = ("name", "country", "region", "popularity", "rating_average", "is_featured", "is_active")
    list_filter = ("country", "is_featured", "is_active")
    search_fields = ("name", "country", "city")
    readonly_fields = ("slug", "popularity", "rating_average", "rating_count")
