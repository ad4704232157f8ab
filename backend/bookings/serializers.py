from rest_framework import serializers

from accounts.serializers import validate_phone_number

from .models import Booking


class BookingTripSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)
    slug = serializers.CharField(read_only=True)
    primary_image = serializers.CharField(read_only=True)
    cancellation_policy = serializers.CharField(read_only=True)


class BookingListSerializer(serializers.ModelSerializer):
    trip = BookingTripSerializer(read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "confirmation_code",
            "trip",
            "departure_date",
            "return_date",
            "number_of_travelers",
            "total_price",
            "currency",
            "booking_status",
            "payment_status",
            "created_at",
        ]
        read_only_fields = fields


class BookingSerializer(BookingListSerializer):
    """Full booking as seen by its owner and by admins."""

    days_until_trip = serializers.IntegerField(read_only=True)
    trip_duration_days = serializers.IntegerField(read_only=True)
    cancellation = serializers.SerializerMethodField()
    pricing = serializers.SerializerMethodField()

    class Meta(BookingListSerializer.Meta):
        fields = BookingListSerializer.Meta.fields + [
            "user",
            "travelers",
            "pricing",
            "payment_method",
            "contact_name",
            "contact_email",
            "contact_phone",
            "billing_address",
            "special_requests",
            "cancellation",
            "days_until_trip",
            "trip_duration_days",
            "source",
            "updated_at",
        ]
        read_only_fields = fields

    def get_pricing(self, obj) -> dict:
        return {
            "price_per_person": str(obj.price_per_person),
            "subtotal": str(obj.subtotal),
            "taxes": str(obj.taxes),
            "fees": str(obj.fees),
            "add_ons": obj.add_ons,
            "add_ons_total": str(obj.add_ons_total),
            "discount": str(obj.discount),
            "total_price": str(obj.total_price),
            "currency": obj.currency,
        }

    def get_cancellation(self, obj):
        if not obj.is_cancelled:
            return None
        return {
            "cancelled_at": obj.cancelled_at,
            "cancelled_by": obj.cancelled_by_id,
            "reason": obj.cancellation_reason,
            "refund_amount": str(obj.refund_amount) if obj.refund_amount is not None else None,
            "refund_status": obj.refund_status or None,
        }


class AdminBookingSerializer(BookingSerializer):
    class Meta(BookingSerializer.Meta):
        fields = BookingSerializer.Meta.fields + [
            "internal_notes",
            "stripe_checkout_session_id",
            "stripe_payment_intent_id",
            "reminder_7_day_sent",
            "reminder_1_day_sent",
        ]
        read_only_fields = fields


class PublicBookingSerializer(serializers.ModelSerializer):
    """What anyone holding a confirmation code may see."""

    trip = BookingTripSerializer(read_only=True)

    class Meta:
        model = Booking
        fields = [
            "confirmation_code",
            "trip",
            "departure_date",
            "return_date",
            "number_of_travelers",
            "booking_status",
        ]
        read_only_fields = fields


class TravelerSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=100)
    date_of_birth = serializers.DateField(required=False)
    passport_number = serializers.CharField(max_length=30, required=False, allow_blank=True)
    nationality = serializers.CharField(max_length=60, required=False, allow_blank=True)
    dietary_requirements = serializers.CharField(max_length=200, required=False, allow_blank=True)


class AddOnSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    quantity = serializers.IntegerField(min_value=1, default=1)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        value["price"] = str(value["price"])
        return value


class BookingCreateSerializer(serializers.Serializer):
    trip_id = serializers.CharField()
    departure_date = serializers.DateField()
    number_of_travelers = serializers.IntegerField(min_value=1, max_value=50)
    travelers = TravelerSerializer(many=True, required=False, default=list)
    add_ons = AddOnSerializer(many=True, required=False, default=list)
    contact_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    contact_email = serializers.EmailField(required=False, allow_blank=True, default="")
    contact_phone = serializers.CharField(required=False, allow_blank=True, default="")
    billing_address = serializers.DictField(required=False, default=dict)
    special_requests = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")
    payment_method = serializers.ChoiceField(choices=Booking.PAYMENT_METHODS, default="card")
    pay_now = serializers.BooleanField(required=False, default=False)

    def validate_contact_phone(self, value: str) -> str:
        return validate_phone_number(value)

    def validate(self, attrs):
        travelers = attrs.get("travelers") or []
        if travelers and len(travelers) != attrs["number_of_travelers"]:
            raise serializers.ValidationError(
                {"travelers": "Traveler details must match the number of travelers."}
            )
        for traveler in travelers:
            if traveler.get("date_of_birth"):
                traveler["date_of_birth"] = traveler["date_of_birth"].isoformat()
        return attrs


class CancelBookingSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class BookingStatusSerializer(serializers.Serializer):
    booking_status = serializers.ChoiceField(choices=Booking.BOOKING_STATUSES)
    internal_notes = serializers.CharField(required=False, allow_blank=True)
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
