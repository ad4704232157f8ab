from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Traveler or staff account. ``username`` mirrors the lower-cased email."""

    CUSTOMER = "customer"
    ADMIN = "admin"
    ROLES = [
        (CUSTOMER, "Customer"),
        (ADMIN, "Admin"),
    ]

    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    bio = models.TextField(max_length=500, blank=True)
    address = models.JSONField(default=dict, blank=True)
    profile_picture = models.URLField(blank=True)
    role = models.CharField(max_length=20, choices=ROLES, default=CUSTOMER)
    preferences = models.JSONField(default=dict, blank=True)
    favorite_destinations = models.ManyToManyField(
        "destinations.Destination",
        blank=True,
        related_name="favorited_by",
    )

    is_email_verified = models.BooleanField(default=False)
    email_verification_token_hash = models.CharField(max_length=64, blank=True)
    email_verification_expires_at = models.DateTimeField(null=True, blank=True)
    password_reset_token_hash = models.CharField(max_length=64, blank=True)
    password_reset_expires_at = models.DateTimeField(null=True, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date_joined"]

    def __str__(self):
        return self.full_name or self.email

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.lower()
        super().save(*args, **kwargs)

    @property
    def is_admin(self) -> bool:
        return self.role == self.ADMIN or self.is_superuser


class RefreshTokenRecord(models.Model):
    """One row per refresh token currently honoured for a user."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="refresh_tokens",
    )
    token_hash = models.CharField(max_length=64, unique=True)
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Refresh token for {self.user_id}"
