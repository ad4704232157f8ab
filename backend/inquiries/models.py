from django.conf import settings
from django.db import models


class Inquiry(models.Model):
    """Contact-form submission from a prospective traveler."""

    NEW = "new"
    CONTACTED = "contacted"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"
    STATUSES = [
        (NEW, "New"),
        (CONTACTED, "Contacted"),
        (IN_PROGRESS, "In progress"),
        (RESOLVED, "Resolved"),
        (CLOSED, "Closed"),
    ]

    name = models.CharField(max_length=100)
    email = models.EmailField()
    phone = models.CharField(max_length=30)
    package = models.CharField(max_length=150, blank=True)
    travel_date = models.DateField(null=True, blank=True)
    group_size = models.CharField(max_length=50, blank=True)
    message = models.TextField(max_length=2000, blank=True)
    status = models.CharField(max_length=20, choices=STATUSES, default=NEW)
    notes = models.TextField(max_length=1000, blank=True)
    responded_at = models.DateTimeField(null=True, blank=True)
    responded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "inquiries"
        indexes = [
            models.Index(fields=["email"], name="inquiry_email_idx"),
            models.Index(fields=["status"], name="inquiry_status_idx"),
        ]

    def __str__(self):
        return f"{self.name} <{self.email}>"

    def save(self, *args, **kwargs):
        self.email = self.email.strip().lower()
        super().save(*args, **kwargs)
