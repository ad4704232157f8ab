from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole, IsOwnerOrAdmin
from bookings.models import Booking
from core.exceptions import BadRequest, Conflict, Forbidden
from core.pagination import paginated_response
from core.responses import created_response, success_response
from trips.selectors import resolve_trip

from .models import Review
from .serializers import (
    AdminReviewSerializer,
    ModerateReviewSerializer,
    ReviewSerializer,
    ReviewUpdateSerializer,
    ReviewWriteSerializer,
)
from .services.ratings import rating_distribution

TRIP_SORTS = {
    "rating-high": ("-rating_overall", "-created_at"),
    "rating-low": ("rating_overall", "-created_at"),
    "helpful": ("-helpful_votes", "-created_at"),
}


def _reviews():
    return Review.objects.select_related("user", "trip")


class ReviewCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = ReviewWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        trip = data["trip"]

        if Review.objects.filter(user=request.user, trip=trip).exists():
            raise Conflict("You have already reviewed this trip.")

        booking = (
            Booking.objects.filter(
                user=request.user,
                trip=trip,
                booking_status__in=[Booking.CONFIRMED, Booking.COMPLETED],
            )
            .order_by("-departure_date")
            .first()
        )
        review = Review.objects.create(
            user=request.user,
            trip=trip,
            booking=booking,
            rating_overall=data["rating"]["overall"],
            rating_categories=data["rating"].get("categories", {}),
            title=data["title"],
            content=data["content"],
            pros=data.get("pros", []),
            cons=data.get("cons", []),
            images=data.get("images", []),
            travel_date=data.get("travel_date"),
            traveled_with=data.get("traveled_with", ""),
            would_recommend=data.get("would_recommend", True),
            is_verified_purchase=booking is not None,
            status=Review.APPROVED if settings.REVIEW_AUTO_APPROVE else Review.PENDING,
        )
        return created_response({"review": ReviewSerializer(review).data}, "Review submitted successfully.")


class TripReviewsView(APIView):
    """Approved reviews for one trip with the star distribution."""

    permission_classes = [AllowAny]

    def get(self, request, trip_id, *args, **kwargs):
        trip = resolve_trip(trip_id)
        queryset = _reviews().filter(trip=trip, status=Review.APPROVED)
        rating = request.query_params.get("rating")
        if rating and rating.isdigit():
            queryset = queryset.filter(rating_overall=int(rating))
        queryset = queryset.order_by(*TRIP_SORTS.get(request.query_params.get("sort"), ("-created_at",)))

        response = paginated_response(
            request,
            queryset,
            ReviewSerializer,
            message="Reviews retrieved successfully.",
            view=self,
        )
        response.data["summary"] = {
            "average": float(trip.rating_average),
            "count": trip.rating_count,
            "distribution": rating_distribution(trip.pk),
        }
        return response


class UserReviewsView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, user_id, *args, **kwargs):
        queryset = _reviews().filter(user_id=user_id, status=Review.APPROVED).order_by("-created_at")
        return paginated_response(
            request,
            queryset,
            ReviewSerializer,
            message="User reviews retrieved successfully.",
            view=self,
        )


class ReviewDetailView(APIView):
    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        if self.request.method == "DELETE":
            return [IsOwnerOrAdmin()]
        return [IsAuthenticated()]

    def get(self, request, review_id, *args, **kwargs):
        review = get_object_or_404(_reviews(), pk=review_id)
        return success_response({"review": ReviewSerializer(review).data}, "Review retrieved successfully.")

    def put(self, request, review_id, *args, **kwargs):
        review = get_object_or_404(_reviews(), pk=review_id)
        if review.user_id != request.user.pk:
            raise Forbidden("Not authorized to update this review.")

        serializer = ReviewUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        rating = data.pop("rating", None)
        if rating:
            review.rating_overall = rating.get("overall", review.rating_overall)
            if "categories" in rating:
                review.rating_categories = rating["categories"]
        for field in ("title", "content", "pros", "cons", "images", "travel_date", "traveled_with", "would_recommend"):
            if field in data:
                setattr(review, field, data[field])
        review.save()
        return success_response({"review": ReviewSerializer(review).data}, "Review updated successfully.")

    def delete(self, request, review_id, *args, **kwargs):
        review = get_object_or_404(Review, pk=review_id)
        self.check_object_permissions(request, review)
        review.delete()
        return success_response(None, "Review deleted successfully.")


class HelpfulVoteView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, review_id, *args, **kwargs):
        with transaction.atomic():
            review = get_object_or_404(Review.objects.select_for_update(), pk=review_id)
            if review.voted_by.filter(pk=request.user.pk).exists():
                raise BadRequest("You have already voted for this review.")
            review.voted_by.add(request.user)
            Review.objects.filter(pk=review.pk).update(helpful_votes=F("helpful_votes") + 1)
            review.refresh_from_db(fields=["helpful_votes"])
        return success_response({"helpful_votes": review.helpful_votes}, "Vote recorded successfully.")


class AdminReviewListView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request, *args, **kwargs):
        queryset = _reviews()
        status_filter = request.query_params.get("status")
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        trip_id = request.query_params.get("trip")
        if trip_id:
            queryset = queryset.filter(trip_id=trip_id)
        return paginated_response(
            request,
            queryset.order_by("-created_at"),
            AdminReviewSerializer,
            message="Reviews retrieved successfully.",
            view=self,
        )


class ModerateReviewView(APIView):
    """Approve, reject or flag a review; optionally attach an operator response."""

    permission_classes = [IsAdminRole]

    def put(self, request, review_id, *args, **kwargs):
        review = get_object_or_404(_reviews(), pk=review_id)
        serializer = ModerateReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if "status" in data:
            review.status = data["status"]
        if "moderation_notes" in data:
            review.moderation_notes = data["moderation_notes"]
        if data.get("response"):
            review.response_content = data["response"]
            review.responded_by = request.user
            review.responded_at = timezone.now()
        review.save()
        return success_response({"review": AdminReviewSerializer(review).data}, "Review moderated successfully.")
