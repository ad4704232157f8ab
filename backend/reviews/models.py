from django.conf import settings
from django.core.validators import MaxValueValidator, MinLengthValidator, MinValueValidator
from django.db import models

RATING_VALIDATORS = [MinValueValidator(1), MaxValueValidator(5)]
RATING_CATEGORIES = ("accommodation", "activities", "guide", "value_for_money", "food", "transportation")


class Review(models.Model):
    """One rating and write-up per traveler per trip."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FLAGGED = "flagged"
    STATUSES = [
        (PENDING, "Pending"),
        (APPROVED, "Approved"),
        (REJECTED, "Rejected"),
        (FLAGGED, "Flagged"),
    ]

    TRAVELED_WITH = [
        ("solo", "Solo"),
        ("couple", "Couple"),
        ("family", "Family"),
        ("friends", "Friends"),
        ("business", "Business"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="reviews")
    trip = models.ForeignKey("trips.Trip", on_delete=models.CASCADE, related_name="reviews")
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviews",
    )
    rating_overall = models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)
    rating_categories = models.JSONField(default=dict, blank=True)
    title = models.CharField(max_length=100)
    content = models.TextField(max_length=2000, validators=[MinLengthValidator(20)])
    pros = models.JSONField(default=list, blank=True)
    cons = models.JSONField(default=list, blank=True)
    images = models.JSONField(default=list, blank=True)
    travel_date = models.DateField(null=True, blank=True)
    traveled_with = models.CharField(max_length=20, choices=TRAVELED_WITH, blank=True)
    would_recommend = models.BooleanField(default=True)
    helpful_votes = models.PositiveIntegerField(default=0)
    voted_by = models.ManyToManyField(settings.AUTH_USER_MODEL, blank=True, related_name="helpful_reviews")
    is_verified_purchase = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=STATUSES, default=PENDING)
    moderation_notes = models.TextField(blank=True)
    response_content = models.TextField(blank=True)
    responded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    responded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["user", "trip"], name="one_review_per_user_per_trip"),
        ]
        indexes = [
            models.Index(fields=["trip", "status"], name="review_trip_status_idx"),
            models.Index(fields=["-rating_overall"], name="review_rating_idx"),
            models.Index(fields=["status"], name="review_status_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.rating_overall}/5)"
