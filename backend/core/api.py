from django.conf import settings
from django.http import JsonResponse
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from .responses import error_envelope, success_response

STARTED_AT = timezone.now()


class HealthView(APIView):
    """Liveness probe for load balancers and uptime checks."""

    permission_classes = [AllowAny]
    authentication_classes: list = []
    throttle_classes: list = []

    def get(self, request, *args, **kwargs):
        return success_response(
            {
                "status": "ok",
                "environment": settings.ENVIRONMENT,
                "uptimeSeconds": int((timezone.now() - STARTED_AT).total_seconds()),
            },
            "Server is healthy",
        )


class ApiIndexView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def get(self, request, *args, **kwargs):
        return success_response(
            {
                "name": "GB Travel API",
                "endpoints": {
                    "auth": "/api/auth/",
                    "users": "/api/users/",
                    "destinations": "/api/destinations/",
                    "trips": "/api/trips/",
                    "bookings": "/api/bookings/",
                    "reviews": "/api/reviews/",
                    "payments": "/api/payments/",
                    "inquiries": "/api/inquiries/",
                },
            },
            "GB Travel API",
        )


def not_found(request, exception=None):
    message = f"Route {request.path} not found."
    return JsonResponse(
        error_envelope(message, status.HTTP_404_NOT_FOUND),
        status=status.HTTP_404_NOT_FOUND,
    )


def server_error(request):
    return JsonResponse(
        error_envelope("Internal server error.", status.HTTP_500_INTERNAL_SERVER_ERROR),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
