from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from bookings.models import Booking
from notifications.services.emails import send_trip_reminder_email

REMINDERS = (
    (7, "reminder_7_day_sent"),
    (1, "reminder_1_day_sent"),
)


class Command(BaseCommand):
    help = "Email travelers whose confirmed trips depart in 7 days or 1 day."

    def handle(self, *args, **options):
        today = timezone.localdate()
        total = 0
        for days_before, flag in REMINDERS:
            due = Booking.objects.select_related("trip", "user").filter(
                booking_status=Booking.CONFIRMED,
                is_cancelled=False,
                departure_date=today + timedelta(days=days_before),
                **{flag: False},
            )
            for booking in due:
                send_trip_reminder_email(booking, days_before=days_before)
                setattr(booking, flag, True)
                booking.save(update_fields=[flag, "updated_at"])
                total += 1
            self.stdout.write(f"{days_before}-day reminders processed.")
        self.stdout.write(self.style.SUCCESS(f"Sent {total} trip reminders."))
