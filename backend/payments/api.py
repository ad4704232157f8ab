import logging

import stripe
from django.db.models import Count, Q, Sum
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole, IsOwnerOrAdmin
from bookings.models import Booking
from bookings.services.reservations import start_checkout
from core.exceptions import BadRequest, GatewayError
from core.pagination import paginated_response
from core.responses import error_envelope, success_response

from .models import Payment
from .serializers import AdminPaymentSerializer, CreateCheckoutSerializer, PaymentSerializer
from .services import gateway
from .services.reconciliation import confirm_checkout, handle_webhook_event

logger = logging.getLogger(__name__)


class CreateCheckoutView(APIView):
    permission_classes = [IsOwnerOrAdmin]

    def post(self, request, *args, **kwargs):
        serializer = CreateCheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = get_object_or_404(
            Booking.objects.select_related("trip", "user"),
            pk=serializer.validated_data["booking_id"],
        )
        self.check_object_permissions(request, booking)
        if booking.is_cancelled:
            raise BadRequest("Cannot pay for a cancelled booking.")
        if booking.is_charged or booking.payment_status == Booking.PAYMENT_REFUNDED:
            raise BadRequest("This booking has already been paid.")

        try:
            session = start_checkout(booking)
        except gateway.PaymentGatewayError as exc:
            logger.exception("Checkout session creation failed for booking %s", booking.confirmation_code)
            raise GatewayError("Could not start payment. Please try again.") from exc

        return success_response(
            {"session_id": session.id, "url": session.url},
            "Checkout session created.",
        )


class VerifyCheckoutView(APIView):
    """Client-side confirmation after the success redirect."""

    permission_classes = [IsOwnerOrAdmin]

    def get(self, request, session_id, *args, **kwargs):
        booking = get_object_or_404(
            Booking.objects.select_related("trip"),
            stripe_checkout_session_id=session_id,
        )
        self.check_object_permissions(request, booking)

        try:
            session = gateway.retrieve_checkout_session(session_id)
        except gateway.PaymentGatewayError as exc:
            logger.exception("Could not retrieve checkout session %s", session_id)
            raise GatewayError("Could not verify payment with the provider.") from exc

        if getattr(session, "payment_status", None) != "paid":
            return success_response(
                {
                    "paid": False,
                    "booking_id": booking.pk,
                    "payment_status": booking.payment_status,
                },
                "Payment has not been completed.",
            )

        booking, _ = confirm_checkout(
            session_id=session_id,
            payment_intent_id=getattr(session, "payment_intent", "") or "",
        )
        return success_response(
            {
                "paid": True,
                "booking_id": booking.pk,
                "confirmation_code": booking.confirmation_code,
                "booking_status": booking.booking_status,
                "payment_status": booking.payment_status,
            },
            "Payment verified successfully.",
        )


class StripeWebhookView(APIView):
    """Receive Stripe webhook events for checkout and refunds."""

    permission_classes: list = []
    authentication_classes: list = []
    throttle_classes: list = []

    def post(self, request, *args, **kwargs):
        payload = request.body
        sig_header = request.META.get("HTTP_STRIPE_SIGNATURE", "")

        try:
            event = gateway.construct_webhook_event(payload, sig_header)
        except gateway.PaymentGatewayError as exc:
            logger.error("Stripe webhook rejected: %s", exc)
            return Response(
                error_envelope("Webhook is not configured.", 500),
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        except ValueError:
            logger.warning("Invalid payload received on Stripe webhook.")
            return Response(error_envelope("Invalid payload.", 400), status=status.HTTP_400_BAD_REQUEST)
        except stripe.SignatureVerificationError:
            logger.warning("Invalid Stripe signature.")
            return Response(error_envelope("Invalid signature.", 400), status=status.HTTP_400_BAD_REQUEST)

        outcome = handle_webhook_event(event)
        return success_response({"received": True, "outcome": outcome}, "Webhook received.")


class PaymentHistoryView(APIView):
    def get(self, request, *args, **kwargs):
        queryset = Payment.objects.filter(user=request.user).select_related("booking", "booking__trip")
        type_filter = request.query_params.get("type")
        if type_filter:
            queryset = queryset.filter(type=type_filter)
        return paginated_response(
            request,
            queryset.order_by("-created_at"),
            PaymentSerializer,
            message="Payment history retrieved successfully.",
            view=self,
        )


class PaymentDetailView(APIView):
    permission_classes = [IsOwnerOrAdmin]

    def get(self, request, payment_id, *args, **kwargs):
        payment = get_object_or_404(
            Payment.objects.select_related("booking", "booking__trip"),
            pk=payment_id,
        )
        self.check_object_permissions(request, payment)
        serializer_class = AdminPaymentSerializer if request.user.is_admin else PaymentSerializer
        return success_response({"payment": serializer_class(payment).data}, "Payment retrieved successfully.")


class AdminPaymentListView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request, *args, **kwargs):
        queryset = Payment.objects.select_related("booking", "booking__trip", "user")
        params = request.query_params
        if params.get("status"):
            queryset = queryset.filter(status=params["status"])
        if params.get("type"):
            queryset = queryset.filter(type=params["type"])
        search = params.get("search") or params.get("q")
        if search:
            queryset = queryset.filter(
                Q(booking__confirmation_code__icontains=search)
                | Q(user__email__icontains=search)
                | Q(stripe_payment_intent_id__icontains=search)
            )
        return paginated_response(
            request,
            queryset.order_by("-created_at"),
            AdminPaymentSerializer,
            message="Payments retrieved successfully.",
            view=self,
        )


class PaymentStatsView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request, *args, **kwargs):
        charges = Payment.objects.filter(type=Payment.TYPE_PAYMENT).exclude(
            status__in=[Payment.FAILED, Payment.PENDING, Payment.CANCELLED, Payment.PROCESSING]
        )
        refunds = Payment.objects.filter(
            type__in=[Payment.TYPE_REFUND, Payment.TYPE_PARTIAL_REFUND],
            status=Payment.SUCCEEDED,
        )
        revenue = charges.aggregate(total=Sum("amount"), count=Count("id"))
        refunded = refunds.aggregate(total=Sum("amount"), count=Count("id"))
        by_status = dict(Payment.objects.values_list("status").annotate(count=Count("id")).order_by())
        gross = revenue["total"] or 0
        refunded_total = refunded["total"] or 0
        return success_response(
            {
                "gross_revenue": str(gross),
                "total_refunded": str(refunded_total),
                "net_revenue": str(gross - refunded_total),
                "successful_payments": revenue["count"],
                "refunds": refunded["count"],
                "by_status": by_status,
            },
            "Payment statistics retrieved successfully.",
        )
