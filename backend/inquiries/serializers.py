from rest_framework import serializers

from accounts.serializers import validate_phone_number

from .models import Inquiry


class InquirySerializer(serializers.ModelSerializer):
    class Meta:
        model = Inquiry
        fields = [
            "id",
            "name",
            "email",
            "phone",
            "package",
            "travel_date",
            "group_size",
            "message",
            "status",
            "notes",
            "responded_at",
            "responded_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "status", "notes", "responded_at", "responded_by", "created_at", "updated_at"]

    def validate_phone(self, value: str) -> str:
        value = validate_phone_number(value)
        if not value:
            raise serializers.ValidationError("Phone number is required.")
        return value


class InquiryUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Inquiry.STATUSES, required=False)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)
