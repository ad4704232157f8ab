from django.conf import settings
from django.db import models
from django.utils.text import Truncator, slugify


def pick_primary_image(images) -> str:
    """URL of the image flagged primary, else the first image, else blank."""

    if not images:
        return ""
    for image in images:
        if isinstance(image, dict) and image.get("is_primary"):
            return image.get("url", "")
    first = images[0]
    return first.get("url", "") if isinstance(first, dict) else str(first)


class Destination(models.Model):
    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=120, unique=True, blank=True)
    description = models.TextField(max_length=5000)
    short_description = models.CharField(max_length=200, blank=True)
    country = models.CharField(max_length=100)
    region = models.CharField(max_length=100, blank=True)
    city = models.CharField(max_length=100, blank=True)
    coordinates = models.JSONField(default=dict, blank=True)
    attractions = models.JSONField(default=list, blank=True)
    best_time_to_visit = models.JSONField(default=dict, blank=True)
    climate = models.JSONField(default=dict, blank=True)
    images = models.JSONField(default=list, blank=True)
    primary_image = models.URLField(max_length=500, blank=True)
    average_cost_per_day = models.JSONField(default=dict, blank=True)
    visa_requirements = models.TextField(max_length=1000, blank=True)
    travel_tips = models.JSONField(default=list, blank=True)
    languages = models.JSONField(default=list, blank=True)
    currency_info = models.JSONField(default=dict, blank=True)
    timezone = models.CharField(max_length=64, blank=True)
    popularity = models.PositiveIntegerField(default=0)
    rating_average = models.DecimalField(max_digits=2, decimal_places=1, default=0)
    rating_count = models.PositiveIntegerField(default=0)
    tags = models.JSONField(default=list, blank=True)
    is_featured = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="destinations_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["country"], name="destination_country_idx"),
            models.Index(fields=["is_featured"], name="destination_featured_idx"),
            models.Index(fields=["-popularity"], name="destination_popularity_idx"),
            models.Index(fields=["-rating_average"], name="destination_rating_idx"),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.slug = slugify(self.name)
        if not self.short_description and self.description:
            self.short_description = Truncator(self.description).chars(200)
        self.primary_image = pick_primary_image(self.images)
        super().save(*args, **kwargs)
