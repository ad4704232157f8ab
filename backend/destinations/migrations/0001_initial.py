import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Destination",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                ("slug", models.SlugField(blank=True, max_length=120, unique=True)),
                ("description", models.TextField(max_length=5000)),
                ("short_description", models.CharField(blank=True, max_length=200)),
                ("country", models.CharField(max_length=100)),
                ("region", models.CharField(blank=True, max_length=100)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("coordinates", models.JSONField(blank=True, default=dict)),
                ("attractions", models.JSONField(blank=True, default=list)),
                ("best_time_to_visit", models.JSONField(blank=True, default=dict)),
                ("climate", models.JSONField(blank=True, default=dict)),
                ("images", models.JSONField(blank=True, default=list)),
                ("primary_image", models.URLField(blank=True, max_length=500)),
                ("average_cost_per_day", models.JSONField(blank=True, default=dict)),
                ("visa_requirements", models.TextField(blank=True, max_length=1000)),
                ("travel_tips", models.JSONField(blank=True, default=list)),
                ("languages", models.JSONField(blank=True, default=list)),
                ("currency_info", models.JSONField(blank=True, default=dict)),
                ("timezone", models.CharField(blank=True, max_length=64)),
                ("popularity", models.PositiveIntegerField(default=0)),
                ("rating_average", models.DecimalField(decimal_places=1, default=0, max_digits=2)),
                ("rating_count", models.PositiveIntegerField(default=0)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("is_featured", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="destinations_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["country"], name="destination_country_idx"),
                    models.Index(fields=["is_featured"], name="destination_featured_idx"),
                    models.Index(fields=["-popularity"], name="destination_popularity_idx"),
                    models.Index(fields=["-rating_average"], name="destination_rating_idx"),
                ],
            },
        ),
    ]
