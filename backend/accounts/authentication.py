from django.contrib.auth import get_user_model
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication

from .services.tokens import decode_access_token

User = get_user_model()


class AccessTokenAuthentication(JWTAuthentication):
    """
    Bearer authentication backed by our own access-token format.

    Header parsing comes from SimpleJWT; validation uses the access secret and
    the loaded user must still exist and be active.
    """

    def get_validated_token(self, raw_token):
        return decode_access_token(raw_token)

    def get_user(self, validated_token):
        user = User.objects.filter(pk=validated_token["id"]).first()
        if user is None:
            raise AuthenticationFailed("User not found.", code="user_not_found")
        if not user.is_active:
            raise AuthenticationFailed("Account has been deactivated.", code="user_inactive")
        return user
