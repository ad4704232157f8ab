from celery import shared_task

from notifications.services.outbox import deliver, deliver_pending


@shared_task(name="notifications.tasks.deliver_email", ignore_result=True)
def deliver_email(message_id: int) -> bool:
    return deliver(message_id)


@shared_task(name="notifications.tasks.process_email_queue")
def process_email_queue(limit: int = 50) -> dict:
    """Retry pending emails. Scheduled by celery beat."""

    sent, failed = deliver_pending(limit=limit)
    return {"sent": sent, "failed": failed}
