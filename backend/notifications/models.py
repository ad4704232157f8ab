from django.db import models


class OutboundEmail(models.Model):
    """Rendered transactional email waiting for (or done with) SMTP delivery."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    STATUSES = [
        (PENDING, "Pending"),
        (SENT, "Sent"),
        (FAILED, "Failed"),
    ]

    to_email = models.EmailField()
    subject = models.CharField(max_length=255)
    template = models.CharField(max_length=100)
    text_body = models.TextField()
    html_body = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUSES, default=PENDING)
    attempts = models.PositiveIntegerField(default=0)
    last_error = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    sent_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [models.Index(fields=["status", "created_at"], name="outbox_status_created_idx")]

    def __str__(self):
        return f"{self.template} -> {self.to_email} ({self.status})"
