from django.contrib import admin

from .models import Payment, ProcessedWebhookEvent


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("booking", "type", "status", "amount", "currency", "processed_at", "created_at")
    list_filter = ("type", "status", "currency")
    search_fields = ("booking__confirmation_code", "stripe_payment_intent_id", "user__email")
    readonly_fields = (
        "stripe_checkout_session_id",
        "stripe_payment_intent_id",
        "stripe_charge_id",
        "stripe_refund_id",
        "processed_at",
    )


@admin.register(ProcessedWebhookEvent)
class ProcessedWebhookEventAdmin(admin.ModelAdmin):
    list_display = ("event_id", "event_type", "received_at")
    search_fields = ("event_id",)
    list_filter = ("event_type",)
