"""
Transactional email outbox.

``queue_email`` renders the message and stores it in the caller's transaction.
Once the transaction commits the row is handed to the ``deliver_email`` celery
task, so the request never talks to the mail server. A row that could not be
handed off or delivered stays pending for ``process_email_queue`` or
``manage.py deliver_outbox`` to retry.
"""

from __future__ import annotations

import logging
from functools import partial

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.db import transaction
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.html import strip_tags

from notifications.models import OutboundEmail

logger = logging.getLogger(__name__)


def queue_email(*, to: str, subject: str, template: str, context: dict) -> OutboundEmail:
    context = {"frontend_url": settings.FRONTEND_URL, **context}
    html_body = render_to_string(f"emails/{template}.html", context)
    message = OutboundEmail.objects.create(
        to_email=to,
        subject=subject,
        template=template,
        html_body=html_body,
        text_body=strip_tags(html_body).strip(),
    )
    transaction.on_commit(partial(_dispatch, message.pk), robust=True)
    return message


def _dispatch(message_id: int) -> None:
    from notifications.tasks import deliver_email

    deliver_email.delay(message_id)


def deliver(message_id: int) -> bool:
    message = OutboundEmail.objects.filter(pk=message_id, status=OutboundEmail.PENDING).first()
    if message is None:
        return False

    email = EmailMultiAlternatives(
        subject=message.subject,
        body=message.text_body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[message.to_email],
    )
    if message.html_body:
        email.attach_alternative(message.html_body, "text/html")

    message.attempts += 1
    try:
        email.send(fail_silently=False)
    except Exception as exc:
        logger.warning(
            "Delivery of email %s (%s) failed on attempt %s: %s",
            message.pk,
            message.template,
            message.attempts,
            exc,
        )
        message.last_error = str(exc)
        if message.attempts >= settings.OUTBOX_MAX_ATTEMPTS:
            message.status = OutboundEmail.FAILED
        message.save(update_fields=["attempts", "last_error", "status"])
        return False

    message.status = OutboundEmail.SENT
    message.sent_at = timezone.now()
    message.last_error = ""
    message.save(update_fields=["attempts", "last_error", "status", "sent_at"])
    return True


def deliver_pending(limit: int = 100) -> tuple[int, int]:
    """Retry pending messages, oldest first. Returns ``(sent, failed)``."""

    pending_ids = list(
        OutboundEmail.objects.filter(status=OutboundEmail.PENDING)
        .order_by("created_at")
        .values_list("pk", flat=True)[:limit]
    )
    sent = failed = 0
    for message_id in pending_ids:
        if deliver(message_id):
            sent += 1
        else:
            failed += 1
    return sent, failed
