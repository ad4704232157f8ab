import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("destinations", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Trip",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("package_id", models.PositiveIntegerField(blank=True, null=True, unique=True)),
                ("name", models.CharField(max_length=150)),
                ("slug", models.SlugField(blank=True, max_length=170, unique=True)),
                ("description", models.TextField(max_length=5000)),
                ("short_description", models.CharField(blank=True, max_length=300)),
                (
                    "duration_days",
                    models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("duration_nights", models.PositiveIntegerField(default=0)),
                (
                    "price_amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("original_price", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                (
                    "discount_percentage",
                    models.PositiveSmallIntegerField(
                        default=0,
                        validators=[django.core.validators.MaxValueValidator(100)],
                    ),
                ),
                (
                    "max_capacity",
                    models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                (
                    "min_travelers",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("current_bookings", models.PositiveIntegerField(default=0)),
                ("inclusions", models.JSONField(blank=True, default=dict)),
                ("exclusions", models.JSONField(blank=True, default=list)),
                ("itinerary", models.JSONField(blank=True, default=list)),
                ("guide", models.JSONField(blank=True, default=dict)),
                (
                    "difficulty_level",
                    models.CharField(
                        choices=[
                            ("easy", "Easy"),
                            ("moderate", "Moderate"),
                            ("challenging", "Challenging"),
                            ("extreme", "Extreme"),
                        ],
                        default="moderate",
                        max_length=20,
                    ),
                ),
                (
                    "trip_type",
                    models.CharField(
                        choices=[
                            ("adventure", "Adventure"),
                            ("relaxation", "Relaxation"),
                            ("cultural", "Cultural"),
                            ("wildlife", "Wildlife"),
                            ("beach", "Beach"),
                            ("mountain", "Mountain"),
                            ("city", "City"),
                            ("cruise", "Cruise"),
                            ("mixed", "Mixed"),
                        ],
                        default="mixed",
                        max_length=20,
                    ),
                ),
                ("age_restrictions", models.JSONField(blank=True, default=dict)),
                ("images", models.JSONField(blank=True, default=list)),
                ("primary_image", models.URLField(blank=True, max_length=500)),
                ("highlights", models.JSONField(blank=True, default=list)),
                ("requirements", models.JSONField(blank=True, default=list)),
                (
                    "cancellation_policy",
                    models.CharField(
                        choices=[
                            ("flexible", "Flexible"),
                            ("moderate", "Moderate"),
                            ("strict", "Strict"),
                            ("non-refundable", "Non-refundable"),
                        ],
                        default="moderate",
                        max_length=20,
                    ),
                ),
                ("cancellation_details", models.TextField(blank=True)),
                ("rating_average", models.DecimalField(decimal_places=1, default=0, max_digits=2)),
                ("rating_count", models.PositiveIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("active", "Active"),
                            ("paused", "Paused"),
                            ("sold-out", "Sold out"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("is_featured", models.BooleanField(default=False)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="trips_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "destination",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="trips",
                        to="destinations.destination",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="trip_status_idx"),
                    models.Index(fields=["price_amount"], name="trip_price_idx"),
                    models.Index(fields=["duration_days"], name="trip_duration_idx"),
                    models.Index(fields=["-rating_average"], name="trip_rating_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("current_bookings__lte", models.F("max_capacity"))),
                        name="trip_bookings_within_capacity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TripDate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("departure_date", models.DateField()),
                ("return_date", models.DateField()),
                (
                    "capacity",
                    models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("spots_available", models.PositiveIntegerField()),
                ("price_modifier", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                (
                    "trip",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="available_dates",
                        to="trips.trip",
                    ),
                ),
            ],
            options={
                "ordering": ["departure_date"],
                "constraints": [
                    models.UniqueConstraint(fields=("trip", "departure_date"), name="unique_trip_departure"),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("spots_available__gte", 0),
                            ("spots_available__lte", models.F("capacity")),
                        ),
                        name="trip_date_spots_within_capacity",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("return_date__gte", models.F("departure_date"))),
                        name="trip_date_return_after_departure",
                    ),
                ],
            },
        ),
    ]
