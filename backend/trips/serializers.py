from django.db import transaction
from rest_framework import serializers

from destinations.models import Destination
from destinations.serializers import DestinationSummarySerializer

from .models import Trip, TripDate


class TripDateSerializer(serializers.ModelSerializer):
    spots_available = serializers.IntegerField(read_only=True)

    class Meta:
        model = TripDate
        fields = [
            "id",
            "departure_date",
            "return_date",
            "capacity",
            "spots_available",
            "price_modifier",
        ]
        read_only_fields = ["id", "spots_available"]

    def validate(self, attrs):
        if attrs["return_date"] < attrs["departure_date"]:
            raise serializers.ValidationError({"return_date": "Return date must be after departure date."})
        return attrs


class TripListSerializer(serializers.ModelSerializer):
    destination = DestinationSummarySerializer(read_only=True)
    rating = serializers.SerializerMethodField()
    spots_remaining = serializers.IntegerField(read_only=True)
    availability_status = serializers.CharField(read_only=True)

    class Meta:
        model = Trip
        fields = [
            "id",
            "package_id",
            "name",
            "slug",
            "short_description",
            "destination",
            "duration_days",
            "duration_nights",
            "price_amount",
            "currency",
            "original_price",
            "discount_percentage",
            "primary_image",
            "rating",
            "difficulty_level",
            "trip_type",
            "status",
            "is_featured",
            "spots_remaining",
            "availability_status",
        ]

    def get_rating(self, obj) -> dict:
        return {"average": float(obj.rating_average), "count": obj.rating_count}


class TripSerializer(TripListSerializer):
    """Full trip detail; also used by admins to create and update trips."""

    destination_id = serializers.PrimaryKeyRelatedField(
        source="destination",
        queryset=Destination.objects.filter(is_active=True),
        write_only=True,
    )
    available_dates = TripDateSerializer(many=True, required=False)

    class Meta(TripListSerializer.Meta):
        fields = TripListSerializer.Meta.fields + [
            "destination_id",
            "description",
            "max_capacity",
            "min_travelers",
            "current_bookings",
            "available_dates",
            "itinerary",
            "inclusions",
            "exclusions",
            "guide",
            "age_restrictions",
            "images",
            "highlights",
            "requirements",
            "cancellation_policy",
            "cancellation_details",
            "tags",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "slug",
            "primary_image",
            "discount_percentage",
            "current_bookings",
            "created_at",
            "updated_at",
        ]

    def validate_description(self, value: str) -> str:
        if len(value.strip()) < 100:
            raise serializers.ValidationError("Description must be at least 100 characters.")
        return value

    def validate_itinerary(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Itinerary must be a list of day plans.")
        for day in value:
            if not isinstance(day, dict) or "day" not in day or not day.get("title"):
                raise serializers.ValidationError("Each itinerary entry needs a day number and a title.")
        return sorted(value, key=lambda day: day["day"])

    def validate(self, attrs):
        max_capacity = attrs.get("max_capacity", getattr(self.instance, "max_capacity", None))
        if self.instance is not None and max_capacity is not None:
            if max_capacity < self.instance.current_bookings:
                raise serializers.ValidationError(
                    {"max_capacity": "Capacity cannot be lower than the travelers already booked."}
                )
        min_travelers = attrs.get("min_travelers", getattr(self.instance, "min_travelers", 1))
        if max_capacity is not None and min_travelers > max_capacity:
            raise serializers.ValidationError({"min_travelers": "Minimum travelers cannot exceed capacity."})
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        dates = validated_data.pop("available_dates", [])
        trip = Trip.objects.create(**validated_data)
        for entry in dates:
            TripDate.objects.create(trip=trip, spots_available=entry["capacity"], **entry)
        return trip

    @transaction.atomic
    def update(self, instance, validated_data):
        dates = validated_data.pop("available_dates", None)
        trip = super().update(instance, validated_data)
        if dates is not None:
            self._sync_dates(trip, dates)
        return trip

    def _sync_dates(self, trip: Trip, dates: list[dict]) -> None:
        """Upsert dates by departure day, preserving spots already booked."""

        existing = {entry.departure_date: entry for entry in trip.available_dates.select_for_update()}
        keep = set()
        for entry in dates:
            current = existing.get(entry["departure_date"])
            if current is None:
                TripDate.objects.create(trip=trip, spots_available=entry["capacity"], **entry)
                continue
            booked = current.capacity - current.spots_available
            if entry["capacity"] < booked:
                raise serializers.ValidationError(
                    {"available_dates": f"Capacity for {current.departure_date} cannot drop below {booked} booked spots."}
                )
            current.return_date = entry["return_date"]
            current.price_modifier = entry.get("price_modifier", current.price_modifier)
            current.capacity = entry["capacity"]
            current.spots_available = entry["capacity"] - booked
            current.save()
            keep.add(current.pk)

        for departure, current in existing.items():
            if current.pk in keep:
                continue
            if current.capacity != current.spots_available or current.bookings.exists():
                raise serializers.ValidationError(
                    {"available_dates": f"Date {departure} has bookings and cannot be removed."}
                )
            current.delete()
