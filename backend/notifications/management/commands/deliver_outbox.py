from django.core.management.base import BaseCommand

from notifications.services.outbox import deliver_pending


class Command(BaseCommand):
    help = "Retry delivery of pending transactional emails."

    def add_arguments(self, parser):
        parser.add_argument("--limit", type=int, default=100)

    def handle(self, *args, **options):
        sent, failed = deliver_pending(limit=options["limit"])
        self.stdout.write(self.style.SUCCESS(f"Delivered {sent} emails, {failed} still failing."))
