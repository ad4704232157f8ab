from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from accounts.models import User
from destinations.models import Destination
from trips.models import Trip, TripDate


SEED_PASSWORD = "Traveler123"
ADMIN_EMAIL = "admin@gbtravel.test"
ADMIN_PASSWORD = "AdminTravel123"

DESTINATIONS = [
    {
        "name": "Kyoto",
        "country": "Japan",
        "region": "Kansai",
        "city": "Kyoto",
        "description": "Temples, gardens and tea houses in Japan's former imperial capital.",
        "languages": ["Japanese"],
        "average_cost_per_day": {"budget": 80, "mid_range": 180, "luxury": 450, "currency": "USD"},
        "tags": ["culture", "food"],
        "is_featured": True,
    },
    {
        "name": "Patagonia",
        "country": "Chile",
        "region": "Magallanes",
        "city": "Puerto Natales",
        "description": "Granite towers, glaciers and wind-swept steppe at the end of the continent.",
        "languages": ["Spanish"],
        "average_cost_per_day": {"budget": 70, "mid_range": 150, "luxury": 400, "currency": "USD"},
        "tags": ["hiking", "mountains"],
        "is_featured": True,
    },
    {
        "name": "Zanzibar",
        "country": "Tanzania",
        "region": "Unguja",
        "city": "Stone Town",
        "description": "Spice farms, white sand and the winding alleys of Stone Town.",
        "languages": ["Swahili", "English"],
        "average_cost_per_day": {"budget": 50, "mid_range": 120, "luxury": 350, "currency": "USD"},
        "tags": ["beach", "culture"],
    },
]

TRIPS = [
    {
        "destination": "Kyoto",
        "name": "Kyoto Temples and Tea",
        "package_id": 1001,
        "duration_days": 6,
        "duration_nights": 5,
        "price_amount": Decimal("1899.00"),
        "original_price": Decimal("2199.00"),
        "max_capacity": 16,
        "trip_type": "cultural",
        "difficulty_level": "easy",
        "cancellation_policy": Trip.FLEXIBLE,
    },
    {
        "destination": "Patagonia",
        "name": "Torres del Paine W Trek",
        "package_id": 1002,
        "duration_days": 8,
        "duration_nights": 7,
        "price_amount": Decimal("2650.00"),
        "max_capacity": 12,
        "trip_type": "adventure",
        "difficulty_level": "challenging",
        "cancellation_policy": Trip.STRICT,
    },
    {
        "destination": "Zanzibar",
        "name": "Zanzibar Spice and Sand",
        "package_id": 1003,
        "duration_days": 7,
        "duration_nights": 6,
        "price_amount": Decimal("1450.00"),
        "max_capacity": 20,
        "trip_type": "beach",
        "difficulty_level": "easy",
        "cancellation_policy": Trip.MODERATE,
    },
]


class Command(BaseCommand):
    help = "Populate the local development database with sample data."

    def handle(self, *args, **options):
        if not settings.DEBUG:
            raise CommandError("Refusing to seed data while DEBUG is False.")

        with transaction.atomic():
            self.stdout.write(self.style.MIGRATE_HEADING("Ensuring admin and sample customer"))
            admin = self._ensure_user(
                email=ADMIN_EMAIL,
                full_name="Grace Admin",
                password=ADMIN_PASSWORD,
                role=User.ADMIN,
            )
            self._ensure_user(
                email="traveler@example.test",
                full_name="Theo Traveler",
                password=SEED_PASSWORD,
                role=User.CUSTOMER,
            )

            self.stdout.write(self.style.MIGRATE_HEADING("Creating destinations"))
            destinations = {}
            for entry in DESTINATIONS:
                name = entry["name"]
                defaults = {key: value for key, value in entry.items() if key != "name"}
                defaults["created_by"] = admin
                destination, _ = Destination.objects.update_or_create(name=name, defaults=defaults)
                destinations[name] = destination

            self.stdout.write(self.style.MIGRATE_HEADING("Creating trips & departures"))
            today = timezone.localdate()
            for entry in TRIPS:
                values = dict(entry)
                destination = destinations[values.pop("destination")]
                package_id = values.pop("package_id")
                trip, _ = Trip.objects.update_or_create(
                    package_id=package_id,
                    defaults={
                        **values,
                        "destination": destination,
                        "description": self._description(values["name"], destination),
                        "created_by": admin,
                        "status": Trip.ACTIVE,
                    },
                )
                for weeks in (3, 8, 16):
                    departure = today + timedelta(weeks=weeks)
                    TripDate.objects.get_or_create(
                        trip=trip,
                        departure_date=departure,
                        defaults={
                            "return_date": departure + timedelta(days=trip.duration_days - 1),
                            "capacity": trip.max_capacity,
                            "spots_available": trip.max_capacity,
                        },
                    )
                self.stdout.write(self.style.NOTICE(f"Seeded {trip.name}"))

        self.stdout.write(self.style.SUCCESS("Development seed data created."))
        self.stdout.write(self.style.NOTICE(f"Sample customer password: {SEED_PASSWORD}"))
        self.stdout.write(self.style.NOTICE(f"Admin {ADMIN_EMAIL} password: {ADMIN_PASSWORD}"))

    def _ensure_user(self, *, email: str, full_name: str, password: str, role: str) -> User:
        user, created = User.objects.get_or_create(
            email=email,
            defaults={
                "username": email,
                "full_name": full_name,
                "role": role,
                "is_email_verified": True,
                "is_staff": role == User.ADMIN,
            },
        )
        if created:
            user.set_password(password)
            user.save(update_fields=["password"])
        return user

    @staticmethod
    def _description(name: str, destination: Destination) -> str:
        return (
            f"{name} is a small-group journey through {destination.name}, {destination.country}. "
            f"{destination.description} Local guides lead every day, accommodation is hand-picked, "
            "and the pace leaves room for wandering on your own."
        )
