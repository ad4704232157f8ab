from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Payment(models.Model):
    """Ledger entry for one money movement (charge or refund) on a booking."""

    TYPE_PAYMENT = "payment"
    TYPE_REFUND = "refund"
    TYPE_PARTIAL_REFUND = "partial_refund"
    TYPES = [
        (TYPE_PAYMENT, "Payment"),
        (TYPE_REFUND, "Refund"),
        (TYPE_PARTIAL_REFUND, "Partial refund"),
    ]
    REFUND_TYPES = (TYPE_REFUND, TYPE_PARTIAL_REFUND)

    PENDING = "pending"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"
    STATUSES = [
        (PENDING, "Pending"),
        (PROCESSING, "Processing"),
        (SUCCEEDED, "Succeeded"),
        (FAILED, "Failed"),
        (CANCELLED, "Cancelled"),
        (REFUNDED, "Refunded"),
        (PARTIALLY_REFUNDED, "Partially refunded"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="payments")
    booking = models.ForeignKey("bookings.Booking", on_delete=models.PROTECT, related_name="payments")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="USD")
    type = models.CharField(max_length=20, choices=TYPES, default=TYPE_PAYMENT)
    status = models.CharField(max_length=20, choices=STATUSES, default=PENDING)
    payment_method = models.CharField(max_length=30, default="card")
    card_details = models.JSONField(default=dict, blank=True)
    stripe_checkout_session_id = models.CharField(max_length=255, blank=True)
    stripe_payment_intent_id = models.CharField(max_length=255, blank=True, db_index=True)
    stripe_charge_id = models.CharField(max_length=255, blank=True)
    stripe_refund_id = models.CharField(max_length=255, blank=True)
    receipt_url = models.URLField(max_length=500, blank=True)
    failure_reason = models.TextField(blank=True)
    failure_code = models.CharField(max_length=100, blank=True)
    original_payment = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="refunds",
    )
    refund_reason = models.TextField(blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    billing_details = models.JSONField(default=dict, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["stripe_payment_intent_id"],
                condition=Q(type="payment", status="succeeded") & ~Q(stripe_payment_intent_id=""),
                name="one_succeeded_charge_per_intent",
            ),
        ]

    def __str__(self):
        return f"{self.type} {self.amount} {self.currency} ({self.status})"

    def save(self, *args, **kwargs):
        if self.status == self.SUCCEEDED and self.processed_at is None:
            self.processed_at = timezone.now()
            update_fields = kwargs.get("update_fields")
            if update_fields is not None:
                kwargs["update_fields"] = set(update_fields) | {"processed_at"}
        super().save(*args, **kwargs)


class ProcessedWebhookEvent(models.Model):
    """Provider event ids already applied; a repeat delivery is acknowledged without effects."""

    event_id = models.CharField(max_length=255, unique=True)
    event_type = models.CharField(max_length=100)
    received_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-received_at"]

    def __str__(self):
        return f"{self.event_type} {self.event_id}"
