import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("trips", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("confirmation_code", models.CharField(editable=False, max_length=11, unique=True)),
                ("departure_date", models.DateField()),
                ("return_date", models.DateField()),
                (
                    "number_of_travelers",
                    models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("travelers", models.JSONField(blank=True, default=list)),
                ("price_per_person", models.DecimalField(decimal_places=2, max_digits=10)),
                ("subtotal", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("taxes", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("fees", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("add_ons_total", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("discount", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("total_price", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("add_ons", models.JSONField(blank=True, default=list)),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                            ("refunded", "Refunded"),
                            ("partially-refunded", "Partially refunded"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "booking_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("cancelled", "Cancelled"),
                            ("completed", "Completed"),
                            ("no-show", "No show"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("card", "Card"),
                            ("paypal", "PayPal"),
                            ("bank_transfer", "Bank transfer"),
                            ("cash", "Cash"),
                        ],
                        default="card",
                        max_length=20,
                    ),
                ),
                ("stripe_checkout_session_id", models.CharField(blank=True, db_index=True, max_length=255)),
                ("stripe_payment_intent_id", models.CharField(blank=True, db_index=True, max_length=255)),
                ("contact_name", models.CharField(blank=True, max_length=100)),
                ("contact_email", models.EmailField(blank=True, max_length=254)),
                ("contact_phone", models.CharField(blank=True, max_length=30)),
                ("billing_address", models.JSONField(blank=True, default=dict)),
                ("special_requests", models.TextField(blank=True, max_length=1000)),
                ("internal_notes", models.TextField(blank=True)),
                ("is_cancelled", models.BooleanField(default=False)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancellation_reason", models.TextField(blank=True, max_length=500)),
                ("refund_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                (
                    "refund_status",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("completed", "Completed"),
                            ("denied", "Denied"),
                            ("failed", "Failed"),
                        ],
                        max_length=20,
                    ),
                ),
                ("reminder_7_day_sent", models.BooleanField(default=False)),
                ("reminder_1_day_sent", models.BooleanField(default=False)),
                (
                    "source",
                    models.CharField(
                        choices=[
                            ("website", "Website"),
                            ("mobile", "Mobile"),
                            ("phone", "Phone"),
                            ("agent", "Agent"),
                            ("other", "Other"),
                        ],
                        default="website",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "cancelled_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "trip",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="trips.trip",
                    ),
                ),
                (
                    "trip_date",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="trips.tripdate",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["booking_status"], name="booking_status_idx"),
                    models.Index(fields=["payment_status"], name="booking_payment_status_idx"),
                    models.Index(fields=["departure_date"], name="booking_departure_idx"),
                ],
            },
        ),
    ]
