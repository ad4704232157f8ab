import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
        ("trips", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Review",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "rating_overall",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ]
                    ),
                ),
                ("rating_categories", models.JSONField(blank=True, default=dict)),
                ("title", models.CharField(max_length=100)),
                (
                    "content",
                    models.TextField(
                        max_length=2000,
                        validators=[django.core.validators.MinLengthValidator(20)],
                    ),
                ),
                ("pros", models.JSONField(blank=True, default=list)),
                ("cons", models.JSONField(blank=True, default=list)),
                ("images", models.JSONField(blank=True, default=list)),
                ("travel_date", models.DateField(blank=True, null=True)),
                (
                    "traveled_with",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("solo", "Solo"),
                            ("couple", "Couple"),
                            ("family", "Family"),
                            ("friends", "Friends"),
                            ("business", "Business"),
                        ],
                        max_length=20,
                    ),
                ),
                ("would_recommend", models.BooleanField(default=True)),
                ("helpful_votes", models.PositiveIntegerField(default=0)),
                ("is_verified_purchase", models.BooleanField(default=False)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                            ("flagged", "Flagged"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("moderation_notes", models.TextField(blank=True)),
                ("response_content", models.TextField(blank=True)),
                ("responded_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "booking",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reviews",
                        to="bookings.booking",
                    ),
                ),
                (
                    "responded_by",
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
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reviews",
                        to="trips.trip",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reviews",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "voted_by",
                    models.ManyToManyField(
                        blank=True,
                        related_name="helpful_reviews",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["trip", "status"], name="review_trip_status_idx"),
                    models.Index(fields=["-rating_overall"], name="review_rating_idx"),
                    models.Index(fields=["status"], name="review_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("user", "trip"), name="one_review_per_user_per_trip"),
                ],
            },
        ),
    ]
