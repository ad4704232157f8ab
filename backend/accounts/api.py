from django.contrib.auth import get_user_model
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView

from bookings.models import Booking
from bookings.serializers import BookingListSerializer
from core.exceptions import BadRequest
from core.pagination import paginated_response
from core.responses import created_response, success_response
from destinations.models import Destination

from .permissions import IsAdminRole
from .serializers import (
    ChangePasswordSerializer,
    EmailSerializer,
    LoginSerializer,
    LogoutSerializer,
    ProfileUpdateSerializer,
    RefreshTokenSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    RoleUpdateSerializer,
    UserSerializer,
    VerifyEmailSerializer,
)
from .services import accounts
from .services.tokens import revoke_refresh_token, rotate_refresh_token

User = get_user_model()


def _client_ip(request) -> str:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "")


def _validated(serializer_class, request):
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


class RegisterView(APIView):
    """Create a customer account, send the verification email and sign in."""

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        data = _validated(RegisterSerializer, request)
        user, pair = accounts.register_user(**data)
        return created_response(
            {
                "user": UserSerializer(user).data,
                "tokens": pair.as_dict(),
                "requires_verification": True,
            },
            "Registration successful. Please verify your email.",
        )


class VerifyEmailView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        data = _validated(VerifyEmailSerializer, request)
        user, pair = accounts.verify_email(email=data["email"], token=data["token"])
        if pair is None:
            return success_response({"already_verified": True}, "Email is already verified.")
        return success_response(
            {"user": UserSerializer(user).data, "tokens": pair.as_dict()},
            "Email verified successfully.",
        )


class ResendVerificationView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        data = _validated(EmailSerializer, request)
        user, sent = accounts.resend_verification(data["email"])
        if not sent:
            return success_response({"already_verified": True}, "Email is already verified.")
        return success_response(
            {"email": user.email},
            "Verification email resent. Please check your inbox.",
        )


class LoginView(APIView):
    """Authenticate with email + password."""

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        data = _validated(LoginSerializer, request)
        user, pair = accounts.login(
            email=data["email"],
            password=data["password"],
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
            ip_address=_client_ip(request),
        )
        return success_response(
            {"user": UserSerializer(user).data, "tokens": pair.as_dict()},
            "Login successful.",
        )


class RefreshTokenView(APIView):
    """Rotate a refresh token: the presented token stops working."""

    permission_classes = [AllowAny]
    authentication_classes: list = []

    def post(self, request, *args, **kwargs):
        data = _validated(RefreshTokenSerializer, request)
        _, pair = rotate_refresh_token(data["refresh_token"])
        return success_response({"tokens": pair.as_dict()}, "Token refreshed successfully.")


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        data = _validated(LogoutSerializer, request)
        if data.get("refresh_token"):
            revoke_refresh_token(request.user, data["refresh_token"])
        return success_response(None, "Logout successful.")


class MeView(APIView):
    def get(self, request, *args, **kwargs):
        recent = (
            Booking.objects.filter(user=request.user)
            .select_related("trip")
            .order_by("-created_at")[:5]
        )
        return success_response(
            {
                "user": UserSerializer(request.user).data,
                "recent_bookings": BookingListSerializer(recent, many=True).data,
            },
            "User retrieved successfully.",
        )


class ChangePasswordView(APIView):
    """Change password after checking the current one; signs out other sessions."""

    permission_classes = [IsAuthenticated]

    def put(self, request, *args, **kwargs):
        data = _validated(ChangePasswordSerializer, request)
        pair = accounts.change_password(
            request.user,
            current_password=data["current_password"],
            new_password=data["new_password"],
        )
        return success_response({"tokens": pair.as_dict()}, "Password changed successfully.")


class ForgotPasswordView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        data = _validated(EmailSerializer, request)
        accounts.request_password_reset(data["email"])
        return success_response(
            None,
            "If an account exists for that email, a password reset link has been sent.",
        )


class ResetPasswordView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        data = _validated(ResetPasswordSerializer, request)
        accounts.reset_password(email=data["email"], token=data["token"], password=data["password"])
        return success_response(None, "Password has been reset. Please log in with your new password.")


class ProfileView(APIView):
    def get(self, request, *args, **kwargs):
        return success_response({"user": UserSerializer(request.user).data}, "Profile retrieved successfully.")

    def put(self, request, *args, **kwargs):
        serializer = ProfileUpdateSerializer(instance=request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return success_response({"user": UserSerializer(user).data}, "Profile updated successfully.")

    def delete(self, request, *args, **kwargs):
        accounts.deactivate_account(request.user)
        return success_response(None, "Account deleted successfully.")


class UserBookingsView(APIView):
    def get(self, request, *args, **kwargs):
        queryset = Booking.objects.filter(user=request.user).select_related("trip", "trip__destination")
        status_filter = request.query_params.get("status")
        if status_filter:
            queryset = queryset.filter(booking_status=status_filter)
        return paginated_response(
            request,
            queryset.order_by("-created_at"),
            BookingListSerializer,
            message="Bookings retrieved successfully.",
            view=self,
        )


class FavoriteDestinationView(APIView):
    """Favorites behave as a set: adding twice or removing a missing entry is a no-op."""

    def post(self, request, destination_id, *args, **kwargs):
        destination = get_object_or_404(Destination, pk=destination_id, is_active=True)
        request.user.favorite_destinations.add(destination)
        return success_response(
            {"favorite_destinations": list(request.user.favorite_destinations.values_list("id", flat=True))},
            "Added to favorites.",
        )

    def delete(self, request, destination_id, *args, **kwargs):
        request.user.favorite_destinations.remove(destination_id)
        return success_response(
            {"favorite_destinations": list(request.user.favorite_destinations.values_list("id", flat=True))},
            "Removed from favorites.",
        )


class AdminUserListView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request, *args, **kwargs):
        queryset = User.objects.filter(is_active=True)
        role = request.query_params.get("role")
        if role:
            queryset = queryset.filter(role=role)
        search = request.query_params.get("search") or request.query_params.get("q")
        if search:
            queryset = queryset.filter(Q(full_name__icontains=search) | Q(email__icontains=search))
        return paginated_response(
            request,
            queryset.order_by("-date_joined"),
            UserSerializer,
            message="Users retrieved successfully.",
            view=self,
        )


class AdminUserDetailView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request, user_id, *args, **kwargs):
        user = get_object_or_404(User, pk=user_id)
        bookings = Booking.objects.filter(user=user).select_related("trip").order_by("-created_at")[:10]
        return success_response(
            {
                "user": UserSerializer(user).data,
                "recent_bookings": BookingListSerializer(bookings, many=True).data,
            },
            "User retrieved successfully.",
        )


class AdminUserRoleView(APIView):
    permission_classes = [IsAdminRole]

    def put(self, request, user_id, *args, **kwargs):
        data = _validated(RoleUpdateSerializer, request)
        if user_id == request.user.pk:
            raise BadRequest("Cannot change your own role.")
        user = get_object_or_404(User, pk=user_id)
        user.role = data["role"]
        user.save(update_fields=["role"])
        return success_response({"user": UserSerializer(user).data}, "User role updated successfully.")
