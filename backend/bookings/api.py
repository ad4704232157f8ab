from django.db.models import Count, Q, Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole, IsOwnerOrAdmin
from core.exceptions import BadRequest
from core.pagination import paginated_response
from core.responses import created_response, success_response

from .models import Booking
from .serializers import (
    AdminBookingSerializer,
    BookingCreateSerializer,
    BookingListSerializer,
    BookingSerializer,
    BookingStatusSerializer,
    CancelBookingSerializer,
    PublicBookingSerializer,
)
from .services.reservations import cancel_booking, create_booking


def _owned_booking(view, request, booking_id) -> Booking:
    booking = get_object_or_404(Booking.objects.select_related("trip", "user"), pk=booking_id)
    view.check_object_permissions(request, booking)
    return booking


def _detail_serializer(request):
    return AdminBookingSerializer if request.user.is_admin else BookingSerializer


class BookingListCreateView(APIView):
    def get(self, request, *args, **kwargs):
        queryset = Booking.objects.filter(user=request.user).select_related("trip")
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

    def post(self, request, *args, **kwargs):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reservation = create_booking(user=request.user, **serializer.validated_data)
        data = {"booking": BookingSerializer(reservation.booking).data}
        if reservation.checkout_session is not None:
            data["checkout"] = {
                "session_id": reservation.checkout_session.id,
                "url": reservation.checkout_url,
            }
        return created_response(data, "Booking created successfully.")


class BookingDetailView(APIView):
    permission_classes = [IsOwnerOrAdmin]

    def get(self, request, booking_id, *args, **kwargs):
        booking = _owned_booking(self, request, booking_id)
        serializer = _detail_serializer(request)(booking)
        return success_response({"booking": serializer.data}, "Booking retrieved successfully.")


class BookingConfirmationView(APIView):
    """Look a booking up by confirmation code; strangers get the limited view."""

    permission_classes = [AllowAny]

    def get(self, request, code, *args, **kwargs):
        booking = get_object_or_404(
            Booking.objects.select_related("trip"),
            confirmation_code=code.strip().upper(),
        )
        user = request.user
        if user.is_authenticated and (booking.user_id == user.pk or user.is_admin):
            data = _detail_serializer(request)(booking).data
        else:
            data = PublicBookingSerializer(booking).data
        return success_response({"booking": data}, "Booking retrieved successfully.")


class CancelBookingView(APIView):
    permission_classes = [IsOwnerOrAdmin]

    def put(self, request, booking_id, *args, **kwargs):
        booking = _owned_booking(self, request, booking_id)
        serializer = CancelBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = cancel_booking(
            booking=booking,
            actor=request.user,
            reason=serializer.validated_data["reason"],
        )
        return success_response(
            {"booking": BookingSerializer(booking).data},
            "Booking cancelled successfully.",
        )


class AdminBookingListView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request, *args, **kwargs):
        queryset = Booking.objects.select_related("trip", "user")
        params = request.query_params
        if params.get("status"):
            queryset = queryset.filter(booking_status=params["status"])
        if params.get("payment_status"):
            queryset = queryset.filter(payment_status=params["payment_status"])
        if params.get("refund_status"):
            queryset = queryset.filter(refund_status=params["refund_status"])
        if params.get("trip"):
            queryset = queryset.filter(trip_id=params["trip"])
        search = params.get("search") or params.get("q")
        if search:
            queryset = queryset.filter(
                Q(confirmation_code__icontains=search)
                | Q(contact_name__icontains=search)
                | Q(contact_email__icontains=search)
                | Q(user__email__icontains=search)
            )
        return paginated_response(
            request,
            queryset.order_by("-created_at"),
            AdminBookingSerializer,
            message="Bookings retrieved successfully.",
            view=self,
        )


class BookingStatusView(APIView):
    """Admin status change. Cancelling goes through the regular cancellation path."""

    permission_classes = [IsAdminRole]

    def put(self, request, booking_id, *args, **kwargs):
        booking = get_object_or_404(Booking, pk=booking_id)
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data["booking_status"] == Booking.CANCELLED:
            booking = cancel_booking(booking=booking, actor=request.user, reason=data["reason"])
        else:
            if booking.is_cancelled:
                raise BadRequest("Cancelled bookings cannot change status.")
            booking.booking_status = data["booking_status"]
            fields = ["booking_status", "updated_at"]
            if "internal_notes" in data:
                booking.internal_notes = data["internal_notes"]
                fields.append("internal_notes")
            booking.save(update_fields=fields)

        return success_response(
            {"booking": AdminBookingSerializer(booking).data},
            "Booking status updated successfully.",
        )


class BookingStatsView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request, *args, **kwargs):
        today = timezone.localdate()
        by_status = dict(
            Booking.objects.values_list("booking_status").annotate(count=Count("id")).order_by()
        )
        by_payment = dict(
            Booking.objects.values_list("payment_status").annotate(count=Count("id")).order_by()
        )
        revenue = Booking.objects.filter(payment_status__in=Booking.CHARGED_STATUSES).aggregate(
            total=Sum("total_price"),
            travelers=Sum("number_of_travelers"),
        )
        upcoming = Booking.objects.filter(
            booking_status=Booking.CONFIRMED,
            departure_date__gte=today,
        ).count()
        this_month = Booking.objects.filter(
            created_at__year=today.year,
            created_at__month=today.month,
        ).count()
        return success_response(
            {
                "total_bookings": sum(by_status.values()),
                "by_status": by_status,
                "by_payment_status": by_payment,
                "total_revenue": str(revenue["total"] or 0),
                "total_travelers": revenue["travelers"] or 0,
                "upcoming_departures": upcoming,
                "bookings_this_month": this_month,
            },
            "Booking statistics retrieved successfully.",
        )
