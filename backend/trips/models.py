import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils.text import Truncator, slugify

from destinations.models import pick_primary_image


class Trip(models.Model):
    """A bookable package tied to one destination."""

    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    SOLD_OUT = "sold-out"
    CANCELLED = "cancelled"
    STATUSES = [
        (DRAFT, "Draft"),
        (ACTIVE, "Active"),
        (PAUSED, "Paused"),
        (SOLD_OUT, "Sold out"),
        (CANCELLED, "Cancelled"),
    ]

    FLEXIBLE = "flexible"
    MODERATE = "moderate"
    STRICT = "strict"
    NON_REFUNDABLE = "non-refundable"
    CANCELLATION_POLICIES = [
        (FLEXIBLE, "Flexible"),
        (MODERATE, "Moderate"),
        (STRICT, "Strict"),
        (NON_REFUNDABLE, "Non-refundable"),
    ]

    DIFFICULTY_LEVELS = [
        ("easy", "Easy"),
        ("moderate", "Moderate"),
        ("challenging", "Challenging"),
        ("extreme", "Extreme"),
    ]
    TRIP_TYPES = [
        ("adventure", "Adventure"),
        ("relaxation", "Relaxation"),
        ("cultural", "Cultural"),
        ("wildlife", "Wildlife"),
        ("beach", "Beach"),
        ("mountain", "Mountain"),
        ("city", "City"),
        ("cruise", "Cruise"),
        ("mixed", "Mixed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    package_id = models.PositiveIntegerField(unique=True, null=True, blank=True)
    name = models.CharField(max_length=150)
    slug = models.SlugField(max_length=170, unique=True, blank=True)
    description = models.TextField(max_length=5000)
    short_description = models.CharField(max_length=300, blank=True)
    destination = models.ForeignKey(
        "destinations.Destination",
        on_delete=models.PROTECT,
        related_name="trips",
    )
    duration_days = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    duration_nights = models.PositiveIntegerField(default=0)
    price_amount = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    currency = models.CharField(max_length=3, default="USD")
    original_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    discount_percentage = models.PositiveSmallIntegerField(default=0, validators=[MaxValueValidator(100)])
    max_capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    min_travelers = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    current_bookings = models.PositiveIntegerField(default=0)
    inclusions = models.JSONField(default=dict, blank=True)
    exclusions = models.JSONField(default=list, blank=True)
    itinerary = models.JSONField(default=list, blank=True)
    guide = models.JSONField(default=dict, blank=True)
    difficulty_level = models.CharField(max_length=20, choices=DIFFICULTY_LEVELS, default="moderate")
    trip_type = models.CharField(max_length=20, choices=TRIP_TYPES, default="mixed")
    age_restrictions = models.JSONField(default=dict, blank=True)
    images = models.JSONField(default=list, blank=True)
    primary_image = models.URLField(max_length=500, blank=True)
    highlights = models.JSONField(default=list, blank=True)
    requirements = models.JSONField(default=list, blank=True)
    cancellation_policy = models.CharField(max_length=20, choices=CANCELLATION_POLICIES, default=MODERATE)
    cancellation_details = models.TextField(blank=True)
    rating_average = models.DecimalField(max_digits=2, decimal_places=1, default=0)
    rating_count = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUSES, default=ACTIVE)
    is_featured = models.BooleanField(default=False)
    tags = models.JSONField(default=list, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="trips_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="trip_status_idx"),
            models.Index(fields=["price_amount"], name="trip_price_idx"),
            models.Index(fields=["duration_days"], name="trip_duration_idx"),
            models.Index(fields=["-rating_average"], name="trip_rating_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(current_bookings__lte=F("max_capacity")),
                name="trip_bookings_within_capacity",
            ),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.slug = slugify(self.name)
        if not self.short_description and self.description:
            self.short_description = Truncator(self.description).chars(300)
        self.primary_image = pick_primary_image(self.images)
        self.discount_percentage = compute_discount_percentage(self.price_amount, self.original_price)
        super().save(*args, **kwargs)

    @property
    def spots_remaining(self) -> int:
        return max(0, self.max_capacity - self.current_bookings)

    @property
    def availability_status(self) -> str:
        if self.current_bookings >= self.max_capacity:
            return "sold-out"
        if self.current_bookings >= self.max_capacity * 0.8:
            return "almost-full"
        return "available"


def compute_discount_percentage(amount, original_price) -> int:
    if not original_price or amount is None:
        return 0
    amount = Decimal(amount)
    original_price = Decimal(original_price)
    if original_price <= 0 or amount >= original_price:
        return 0
    return int(((original_price - amount) / original_price * 100).quantize(Decimal("1")))


class TripDate(models.Model):
    """One departure/return pair with its own remaining-spots counter."""

    trip = models.ForeignKey("Trip", on_delete=models.CASCADE, related_name="available_dates")
    departure_date = models.DateField()
    return_date = models.DateField()
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    spots_available = models.PositiveIntegerField()
    price_modifier = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    class Meta:
        ordering = ["departure_date"]
        constraints = [
            models.UniqueConstraint(fields=["trip", "departure_date"], name="unique_trip_departure"),
            models.CheckConstraint(
                condition=Q(spots_available__gte=0) & Q(spots_available__lte=F("capacity")),
                name="trip_date_spots_within_capacity",
            ),
            models.CheckConstraint(
                condition=Q(return_date__gte=F("departure_date")),
                name="trip_date_return_after_departure",
            ),
        ]

    def __str__(self):
        return f"{self.trip.name} {self.departure_date:%Y-%m-%d}"
