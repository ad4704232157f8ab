import re

from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()

PHONE_PATTERN = re.compile(r"^[+]?[\d\s-]{10,20}$")


def validate_password_strength(value: str) -> str:
    if not re.search(r"\d", value):
        raise serializers.ValidationError("Password must contain at least one number.")
    return value


def validate_phone_number(value: str) -> str:
    value = value.strip()
    if value and not PHONE_PATTERN.match(value):
        raise serializers.ValidationError("Please provide a valid phone number.")
    return value


class UserSerializer(serializers.ModelSerializer):
    """Public representation of an account; never includes credentials."""

    favorite_destinations = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    created_at = serializers.DateTimeField(source="date_joined", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "full_name",
            "phone",
            "address",
            "bio",
            "profile_picture",
            "role",
            "is_active",
            "is_email_verified",
            "preferences",
            "favorite_destinations",
            "last_login",
            "created_at",
        ]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    full_name = serializers.CharField(min_length=2, max_length=100, trim_whitespace=True)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6)
    phone = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_email(self, value: str) -> str:
        return value.lower()

    def validate_password(self, value: str) -> str:
        return validate_password_strength(value)

    def validate_phone(self, value: str) -> str:
        return validate_phone_number(value)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate_email(self, value: str) -> str:
        return value.lower()


class EmailSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate_email(self, value: str) -> str:
        return value.lower()


class VerifyEmailSerializer(EmailSerializer):
    token = serializers.CharField()


class ResetPasswordSerializer(EmailSerializer):
    token = serializers.CharField()
    password = serializers.CharField(write_only=True, min_length=6)

    def validate_password(self, value: str) -> str:
        return validate_password_strength(value)


class RefreshTokenSerializer(serializers.Serializer):
    refresh_token = serializers.CharField()


class LogoutSerializer(serializers.Serializer):
    refresh_token = serializers.CharField(required=False, allow_blank=True)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, min_length=6)

    def validate_new_password(self, value: str) -> str:
        return validate_password_strength(value)


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Fields a user may change on their own profile."""

    class Meta:
        model = User
        fields = ["full_name", "phone", "address", "bio", "profile_picture", "preferences"]
        extra_kwargs = {"full_name": {"min_length": 2}}

    def validate_phone(self, value: str) -> str:
        return validate_phone_number(value)

    def validate_address(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Address must be an object.")
        return value

    def validate_preferences(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Preferences must be an object.")
        return value


class RoleUpdateSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.ROLES)
