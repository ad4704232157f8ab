from rest_framework import serializers

from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    booking_code = serializers.CharField(source="booking.confirmation_code", read_only=True)
    trip_name = serializers.CharField(source="booking.trip.name", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "booking",
            "booking_code",
            "trip_name",
            "amount",
            "currency",
            "type",
            "status",
            "payment_method",
            "card_details",
            "receipt_url",
            "failure_reason",
            "refund_reason",
            "refunded_at",
            "processed_at",
            "created_at",
        ]
        read_only_fields = fields


class AdminPaymentSerializer(PaymentSerializer):
    class Meta(PaymentSerializer.Meta):
        fields = PaymentSerializer.Meta.fields + [
            "user",
            "stripe_checkout_session_id",
            "stripe_payment_intent_id",
            "stripe_charge_id",
            "stripe_refund_id",
            "failure_code",
            "original_payment",
            "metadata",
        ]
        read_only_fields = fields


class CreateCheckoutSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField(min_value=1)
