from django.shortcuts import get_object_or_404
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny

from accounts.permissions import IsAdminRole
from core.responses import created_response, success_response
from destinations.models import Destination

from .filters import TripFilter
from .models import Trip
from .selectors import resolve_trip
from .serializers import TripDateSerializer, TripListSerializer, TripSerializer

SORTS = {
    "price-low": ("price_amount",),
    "price-high": ("-price_amount",),
    "rating": ("-rating_average", "-rating_count"),
    "duration": ("duration_days",),
    "popular": ("-current_bookings", "-rating_average"),
}
ADMIN_ACTIONS = {"create", "update", "partial_update", "destroy"}


def _limit(request, default: int) -> int:
    try:
        value = int(request.query_params.get("limit", default))
    except (TypeError, ValueError):
        return default
    return max(1, min(value, 100))


class TripViewSet(viewsets.ModelViewSet):
    """Trip catalog. Reads are public; writes are admin only."""

    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_class = TripFilter
    search_fields = ["name", "description", "destination__name", "destination__country"]
    lookup_value_regex = "[^/]+"

    def get_permissions(self):
        if self.action in ADMIN_ACTIONS:
            return [IsAdminRole()]
        return [AllowAny()]

    def get_serializer_class(self):
        if self.action in {"list", "search", "featured", "upcoming", "by_destination"}:
            return TripListSerializer
        return TripSerializer

    def get_queryset(self):
        queryset = Trip.objects.select_related("destination")
        if self.action in ADMIN_ACTIONS:
            return queryset
        if self.action == "retrieve":
            return queryset.exclude(status=Trip.CANCELLED).prefetch_related("available_dates")
        queryset = queryset.filter(status=Trip.ACTIVE)
        if self.action == "list":
            queryset = queryset.order_by(*SORTS.get(self.request.query_params.get("sort"), ("-created_at",)))
        return queryset

    def get_object(self):
        trip = resolve_trip(self.kwargs[self.lookup_field], self.get_queryset())
        self.check_object_permissions(self.request, trip)
        return trip

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.paginator.get_paginated_response(serializer.data, message="Trips retrieved successfully.")

    def retrieve(self, request, *args, **kwargs):
        trip = self.get_object()
        related = (
            Trip.objects.filter(destination_id=trip.destination_id, status=Trip.ACTIVE)
            .exclude(pk=trip.pk)
            .select_related("destination")
            .order_by("-rating_average")[:4]
        )
        return success_response(
            {
                "trip": TripSerializer(trip).data,
                "related_trips": TripListSerializer(related, many=True).data,
            },
            "Trip retrieved successfully.",
        )

    def create(self, request, *args, **kwargs):
        serializer = TripSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        trip = serializer.save(created_by=request.user)
        return created_response({"trip": TripSerializer(trip).data}, "Trip created successfully.")

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        serializer = TripSerializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        trip = serializer.save()
        return success_response({"trip": TripSerializer(trip).data}, "Trip updated successfully.")

    def destroy(self, request, *args, **kwargs):
        trip = self.get_object()
        trip.status = Trip.CANCELLED
        trip.save(update_fields=["status", "updated_at"])
        return success_response(None, "Trip deleted successfully.")

    @action(detail=False, methods=["get"])
    def search(self, request):
        queryset = self.filter_queryset(self.get_queryset()).order_by("-rating_average", "name")
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.paginator.get_paginated_response(serializer.data, message="Search results.")

    @action(detail=False, methods=["get"])
    def featured(self, request):
        trips = self.get_queryset().filter(is_featured=True).order_by("-rating_average")[: _limit(request, 6)]
        return success_response(
            {"trips": self.get_serializer(trips, many=True).data},
            "Featured trips retrieved successfully.",
        )

    @action(detail=False, methods=["get"])
    def upcoming(self, request):
        today = timezone.localdate()
        trips = (
            self.get_queryset()
            .filter(available_dates__departure_date__gte=today, available_dates__spots_available__gt=0)
            .distinct()
            .prefetch_related("available_dates")
            .order_by("name")
        )
        trips = sorted(trips, key=lambda trip: _next_departure(trip, today))[: _limit(request, 8)]
        return success_response(
            {"trips": self.get_serializer(trips, many=True).data},
            "Upcoming trips retrieved successfully.",
        )

    @action(detail=False, methods=["get"], url_path=r"destination/(?P<destination_id>\d+)")
    def by_destination(self, request, destination_id=None):
        destination = get_object_or_404(Destination, pk=destination_id)
        queryset = self.get_queryset().filter(destination=destination).order_by("-rating_average")
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.paginator.get_paginated_response(
            serializer.data, message=f"Trips for {destination.name} retrieved successfully."
        )

    @action(detail=True, methods=["get"])
    def availability(self, request, pk=None):
        trip = resolve_trip(pk, Trip.objects.exclude(status=Trip.CANCELLED))
        dates = trip.available_dates.filter(
            departure_date__gt=timezone.localdate(),
            spots_available__gt=0,
        )
        return success_response(
            {
                "trip_id": str(trip.pk),
                "available_dates": TripDateSerializer(dates, many=True).data,
                "spots_remaining": trip.spots_remaining,
                "availability_status": trip.availability_status,
            },
            "Availability retrieved.",
        )


def _next_departure(trip: Trip, today):
    upcoming = [
        entry.departure_date
        for entry in trip.available_dates.all()
        if entry.departure_date >= today and entry.spots_available > 0
    ]
    return min(upcoming) if upcoming else today
