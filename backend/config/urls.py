from django.contrib import admin
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from accounts.api import (
    AdminUserDetailView,
    AdminUserListView,
    AdminUserRoleView,
    ChangePasswordView,
    FavoriteDestinationView,
    ForgotPasswordView,
    LoginView,
    LogoutView,
    MeView,
    ProfileView,
    RefreshTokenView,
    RegisterView,
    ResendVerificationView,
    ResetPasswordView,
    UserBookingsView,
    VerifyEmailView,
)
from bookings.api import (
    AdminBookingListView,
    BookingConfirmationView,
    BookingDetailView,
    BookingListCreateView,
    BookingStatsView,
    BookingStatusView,
    CancelBookingView,
)
from core.api import ApiIndexView, HealthView
from destinations.api import DestinationViewSet
from inquiries.api import InquiryDetailView, InquiryListCreateView
from payments.api import (
    AdminPaymentListView,
    CreateCheckoutView,
    PaymentDetailView,
    PaymentHistoryView,
    PaymentStatsView,
    StripeWebhookView,
    VerifyCheckoutView,
)
from reviews.api import (
    AdminReviewListView,
    HelpfulVoteView,
    ModerateReviewView,
    ReviewCreateView,
    ReviewDetailView,
    TripReviewsView,
    UserReviewsView,
)
from trips.api import TripViewSet

router = DefaultRouter()
router.register(r"destinations", DestinationViewSet, basename="destination")
router.register(r"trips", TripViewSet, basename="trip")

auth_patterns = [
    path("register/", RegisterView.as_view(), name="auth-register"),
    path("verify-email/", VerifyEmailView.as_view(), name="auth-verify-email"),
    path("resend-verification/", ResendVerificationView.as_view(), name="auth-resend-verification"),
    path("login/", LoginView.as_view(), name="auth-login"),
    path("refresh-token/", RefreshTokenView.as_view(), name="auth-refresh-token"),
    path("logout/", LogoutView.as_view(), name="auth-logout"),
    path("me/", MeView.as_view(), name="auth-me"),
    path("change-password/", ChangePasswordView.as_view(), name="auth-change-password"),
    path("forgot-password/", ForgotPasswordView.as_view(), name="auth-forgot-password"),
    path("reset-password/", ResetPasswordView.as_view(), name="auth-reset-password"),
]

user_patterns = [
    path("", AdminUserListView.as_view(), name="user-list"),
    path("profile/", ProfileView.as_view(), name="user-profile"),
    path("bookings/", UserBookingsView.as_view(), name="user-bookings"),
    path(
        "favorites/<int:destination_id>/",
        FavoriteDestinationView.as_view(),
        name="user-favorite",
    ),
    path("<int:user_id>/", AdminUserDetailView.as_view(), name="user-detail"),
    path("<int:user_id>/role/", AdminUserRoleView.as_view(), name="user-role"),
]

booking_patterns = [
    path("", BookingListCreateView.as_view(), name="booking-list"),
    path("admin/all/", AdminBookingListView.as_view(), name="booking-admin-list"),
    path("admin/stats/", BookingStatsView.as_view(), name="booking-stats"),
    path(
        "confirmation/<str:code>/",
        BookingConfirmationView.as_view(),
        name="booking-confirmation",
    ),
    path("<int:booking_id>/", BookingDetailView.as_view(), name="booking-detail"),
    path("<int:booking_id>/cancel/", CancelBookingView.as_view(), name="booking-cancel"),
    path("<int:booking_id>/status/", BookingStatusView.as_view(), name="booking-status"),
]

payment_patterns = [
    path("create-checkout/", CreateCheckoutView.as_view(), name="payment-create-checkout"),
    path("verify/<str:session_id>/", VerifyCheckoutView.as_view(), name="payment-verify"),
    path("webhook/", StripeWebhookView.as_view(), name="stripe-webhook"),
    path("history/", PaymentHistoryView.as_view(), name="payment-history"),
    path("admin/all/", AdminPaymentListView.as_view(), name="payment-admin-list"),
    path("admin/stats/", PaymentStatsView.as_view(), name="payment-stats"),
    path("<int:payment_id>/", PaymentDetailView.as_view(), name="payment-detail"),
]

review_patterns = [
    path("", ReviewCreateView.as_view(), name="review-create"),
    path("admin/all/", AdminReviewListView.as_view(), name="review-admin-list"),
    path("trip/<str:trip_id>/", TripReviewsView.as_view(), name="review-trip"),
    path("user/<int:user_id>/", UserReviewsView.as_view(), name="review-user"),
    path("<int:review_id>/", ReviewDetailView.as_view(), name="review-detail"),
    path("<int:review_id>/helpful/", HelpfulVoteView.as_view(), name="review-helpful"),
    path("<int:review_id>/moderate/", ModerateReviewView.as_view(), name="review-moderate"),
]

inquiry_patterns = [
    path("", InquiryListCreateView.as_view(), name="inquiry-list"),
    path("<int:inquiry_id>/", InquiryDetailView.as_view(), name="inquiry-detail"),
]

urlpatterns = [
    path("admin/", admin.site.urls),
    path("health/", HealthView.as_view(), name="health"),
    path("api/", ApiIndexView.as_view(), name="api-index"),
    path("api/auth/", include(auth_patterns)),
    path("api/users/", include(user_patterns)),
    path("api/bookings/", include(booking_patterns)),
    path("api/payments/", include(payment_patterns)),
    path("api/reviews/", include(review_patterns)),
    path("api/inquiries/", include(inquiry_patterns)),
    path("api/", include(router.urls)),
]

handler404 = "core.api.not_found"
handler500 = "core.api.server_error"
