from uuid import uuid4

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from .cancellation import can_be_cancelled, days_until_departure
from .pricing import total_from_components

CODE_ATTEMPTS = 5


def generate_confirmation_code() -> str:
    return f"GB-{uuid4().hex[:8].upper()}"


class Booking(models.Model):
    """A reservation of N traveler slots on one departure of a trip."""

    PAYMENT_PENDING = "pending"
    PAYMENT_PROCESSING = "processing"
    PAYMENT_COMPLETED = "completed"
    PAYMENT_FAILED = "failed"
    PAYMENT_REFUNDED = "refunded"
    PAYMENT_PARTIALLY_REFUNDED = "partially-refunded"
    PAYMENT_STATUSES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PROCESSING, "Processing"),
        (PAYMENT_COMPLETED, "Completed"),
        (PAYMENT_FAILED, "Failed"),
        (PAYMENT_REFUNDED, "Refunded"),
        (PAYMENT_PARTIALLY_REFUNDED, "Partially refunded"),
    ]
    CHARGED_STATUSES = {PAYMENT_COMPLETED, PAYMENT_PARTIALLY_REFUNDED}

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no-show"
    BOOKING_STATUSES = [
        (PENDING, "Pending"),
        (CONFIRMED, "Confirmed"),
        (CANCELLED, "Cancelled"),
        (COMPLETED, "Completed"),
        (NO_SHOW, "No show"),
    ]

    REFUND_PENDING = "pending"
    REFUND_PROCESSING = "processing"
    REFUND_COMPLETED = "completed"
    REFUND_DENIED = "denied"
    REFUND_FAILED = "failed"
    REFUND_STATUSES = [
        (REFUND_PENDING, "Pending"),
        (REFUND_PROCESSING, "Processing"),
        (REFUND_COMPLETED, "Completed"),
        (REFUND_DENIED, "Denied"),
        (REFUND_FAILED, "Failed"),
    ]

    PAYMENT_METHODS = [
        ("card", "Card"),
        ("paypal", "PayPal"),
        ("bank_transfer", "Bank transfer"),
        ("cash", "Cash"),
    ]
    SOURCES = [
        ("website", "Website"),
        ("mobile", "Mobile"),
        ("phone", "Phone"),
        ("agent", "Agent"),
        ("other", "Other"),
    ]

    confirmation_code = models.CharField(max_length=11, unique=True, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="bookings")
    trip = models.ForeignKey("trips.Trip", on_delete=models.PROTECT, related_name="bookings")
    trip_date = models.ForeignKey(
        "trips.TripDate",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    departure_date = models.DateField()
    return_date = models.DateField()
    number_of_travelers = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    travelers = models.JSONField(default=list, blank=True)

    price_per_person = models.DecimalField(max_digits=10, decimal_places=2)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    taxes = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    fees = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    add_ons_total = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    currency = models.CharField(max_length=3, default="USD")
    add_ons = models.JSONField(default=list, blank=True)

    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUSES, default=PAYMENT_PENDING)
    booking_status = models.CharField(max_length=20, choices=BOOKING_STATUSES, default=PENDING)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHODS, default="card")
    stripe_checkout_session_id = models.CharField(max_length=255, blank=True, db_index=True)
    stripe_payment_intent_id = models.CharField(max_length=255, blank=True, db_index=True)

    contact_name = models.CharField(max_length=100, blank=True)
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=30, blank=True)
    billing_address = models.JSONField(default=dict, blank=True)
    special_requests = models.TextField(max_length=1000, blank=True)
    internal_notes = models.TextField(blank=True)

    is_cancelled = models.BooleanField(default=False)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    cancellation_reason = models.TextField(max_length=500, blank=True)
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    refund_status = models.CharField(max_length=20, choices=REFUND_STATUSES, blank=True)

    reminder_7_day_sent = models.BooleanField(default=False)
    reminder_1_day_sent = models.BooleanField(default=False)
    source = models.CharField(max_length=20, choices=SOURCES, default="website")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["booking_status"], name="booking_status_idx"),
            models.Index(fields=["payment_status"], name="booking_payment_status_idx"),
            models.Index(fields=["departure_date"], name="booking_departure_idx"),
        ]

    def __str__(self):
        return self.confirmation_code

    def save(self, *args, **kwargs):
        if not self.confirmation_code:
            self.confirmation_code = self._unique_confirmation_code()
        self.recalculate_totals()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = set(update_fields) | {"subtotal", "add_ons_total", "total_price"}
        super().save(*args, **kwargs)

    @classmethod
    def _unique_confirmation_code(cls) -> str:
        for _ in range(CODE_ATTEMPTS):
            code = generate_confirmation_code()
            if not cls.objects.filter(confirmation_code=code).exists():
                return code
        raise RuntimeError("Could not generate a unique confirmation code.")

    def recalculate_totals(self) -> None:
        breakdown = total_from_components(
            price_per_person=self.price_per_person,
            travelers=self.number_of_travelers,
            taxes=self.taxes,
            fees=self.fees,
            add_ons=self.add_ons,
            discount=self.discount,
        )
        self.subtotal = breakdown.subtotal
        self.add_ons_total = breakdown.add_ons_total
        self.total_price = breakdown.total_price

    @property
    def days_until_trip(self) -> int:
        return days_until_departure(self.departure_date)

    @property
    def trip_duration_days(self) -> int:
        return (self.return_date - self.departure_date).days

    @property
    def is_charged(self) -> bool:
        return self.payment_status in self.CHARGED_STATUSES

    def can_be_cancelled(self, now=None) -> bool:
        return can_be_cancelled(
            booking_status=self.booking_status,
            is_cancelled=self.is_cancelled,
            departure=self.departure_date,
            now=now,
        )
