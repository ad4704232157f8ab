from django.contrib import admin

from payments.models import Payment

from .models import Booking


class PaymentInline(admin.TabularInline):
    model = Payment
    fk_name = "booking"
    extra = 0
    fields = ("type", "status", "amount", "currency", "stripe_payment_intent_id", "created_at")
    readonly_fields = fields
    can_delete = False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "confirmation_code",
        "user",
        "trip",
        "departure_date",
        "number_of_travelers",
        "total_price",
        "booking_status",
        "payment_status",
        "refund_status",
    )
    list_filter = ("booking_status", "payment_status", "refund_status", "source")
    search_fields = ("confirmation_code", "contact_email", "contact_name", "user__email", "trip__name")
    readonly_fields = (
        "confirmation_code",
        "subtotal",
        "add_ons_total",
        "total_price",
        "stripe_checkout_session_id",
        "stripe_payment_intent_id",
        "cancelled_at",
        "cancelled_by",
    )
    date_hierarchy = "departure_date"
    inlines = [PaymentInline]
