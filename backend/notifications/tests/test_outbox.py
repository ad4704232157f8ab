import smtplib

import pytest
from django.core import mail
from django.core.mail import EmailMultiAlternatives
from django.core.management import call_command

from notifications.models import OutboundEmail
from notifications.services.emails import send_welcome_email
from notifications.services.outbox import deliver, deliver_pending
from notifications.tasks import process_email_queue


def _broken_send(self, fail_silently=False):
    raise smtplib.SMTPException("relay refused")


@pytest.mark.django_db
def test_queued_email_is_delivered_after_commit(customer, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        message = send_welcome_email(customer)

    message.refresh_from_db()
    assert message.status == OutboundEmail.SENT
    assert message.attempts == 1
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == [customer.email]
    assert mail.outbox[0].alternatives[0][1] == "text/html"
    assert "https://app.test/trips" in message.html_body


@pytest.mark.django_db
def test_nothing_is_sent_before_commit(customer):
    send_welcome_email(customer)

    assert OutboundEmail.objects.get().status == OutboundEmail.PENDING
    assert mail.outbox == []


@pytest.mark.django_db
def test_failed_delivery_stays_pending_until_attempts_run_out(settings, monkeypatch, customer):
    settings.OUTBOX_MAX_ATTEMPTS = 2
    monkeypatch.setattr(EmailMultiAlternatives, "send", _broken_send)
    message = send_welcome_email(customer)

    assert deliver(message.pk) is False
    message.refresh_from_db()
    assert message.status == OutboundEmail.PENDING
    assert message.last_error == "relay refused"

    assert deliver(message.pk) is False
    message.refresh_from_db()
    assert message.status == OutboundEmail.FAILED
    assert message.attempts == 2

    assert deliver(message.pk) is False
    message.refresh_from_db()
    assert message.attempts == 2


@pytest.mark.django_db
def test_deliver_pending_retries_backlog(customer, other_customer):
    send_welcome_email(customer)
    send_welcome_email(other_customer)

    assert deliver_pending() == (2, 0)
    assert not OutboundEmail.objects.filter(status=OutboundEmail.PENDING).exists()


@pytest.mark.django_db
def test_deliver_outbox_command(customer, capsys):
    send_welcome_email(customer)

    call_command("deliver_outbox", "--limit", "10")

    assert "Delivered 1 emails" in capsys.readouterr().out
    assert len(mail.outbox) == 1


@pytest.mark.django_db
def test_unexpected_backend_error_is_recorded(monkeypatch, customer):
    def exploding_send(self, fail_silently=False):
        raise RuntimeError("backend misconfigured")

    monkeypatch.setattr(EmailMultiAlternatives, "send", exploding_send)
    message = send_welcome_email(customer)

    assert deliver(message.pk) is False
    message.refresh_from_db()
    assert message.status == OutboundEmail.PENDING
    assert message.last_error == "backend misconfigured"


@pytest.mark.django_db
def test_process_email_queue_task_reports_counts(customer, other_customer):
    send_welcome_email(customer)
    send_welcome_email(other_customer)

    assert process_email_queue.delay(limit=1).get() == {"sent": 1, "failed": 0}
    assert process_email_queue(limit=10) == {"sent": 1, "failed": 0}
    assert len(mail.outbox) == 2
