from django.db.models import Count, F
from django.shortcuts import get_object_or_404
from rest_framework import filters, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from django_filters.rest_framework import DjangoFilterBackend

from accounts.permissions import IsAdminRole
from core.responses import created_response, success_response
from trips.models import Trip
from trips.serializers import TripListSerializer

from .filters import DestinationFilter
from .models import Destination
from .serializers import DestinationSerializer

SORTS = {
    "popular": ("-popularity", "name"),
    "rating": ("-rating_average", "-rating_count"),
    "name": ("name",),
}


def _limit(request, default: int) -> int:
    try:
        value = int(request.query_params.get("limit", default))
    except (TypeError, ValueError):
        return default
    return max(1, min(value, 100))


def _number(value):
    try:
        return float(value) if value not in (None, "") else None
    except ValueError:
        return None


class DestinationViewSet(viewsets.ModelViewSet):
    """Public catalog of destinations; writes are admin only."""

    serializer_class = DestinationSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_class = DestinationFilter
    search_fields = ["name", "country", "region", "city", "description"]
    lookup_value_regex = "[^/]+"

    def get_permissions(self):
        if self.action in {"create", "update", "partial_update", "destroy"}:
            return [IsAdminRole()]
        return [AllowAny()]

    def get_queryset(self):
        queryset = Destination.objects.filter(is_active=True)
        if self.action == "list":
            sort = SORTS.get(self.request.query_params.get("sort"), ("-created_at",))
            queryset = queryset.order_by(*sort)
        return queryset

    def get_object(self):
        lookup = self.kwargs[self.lookup_field]
        queryset = Destination.objects.all() if self.action in {"update", "partial_update"} else self.get_queryset()
        if lookup.isdigit():
            return get_object_or_404(queryset, pk=int(lookup))
        return get_object_or_404(queryset, slug=lookup)

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.paginator.get_paginated_response(
            serializer.data, message="Destinations retrieved successfully."
        )

    def retrieve(self, request, *args, **kwargs):
        destination = self.get_object()
        Destination.objects.filter(pk=destination.pk).update(popularity=F("popularity") + 1)
        destination.refresh_from_db(fields=["popularity"])
        trips = (
            Trip.objects.filter(destination=destination, status=Trip.ACTIVE)
            .select_related("destination")
            .order_by("-rating_average", "-created_at")[:6]
        )
        return success_response(
            {
                "destination": self.get_serializer(destination).data,
                "trips": TripListSerializer(trips, many=True).data,
            },
            "Destination retrieved successfully.",
        )

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        destination = serializer.save(created_by=request.user)
        return created_response(
            {"destination": self.get_serializer(destination).data},
            "Destination created successfully.",
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        destination = serializer.save()
        return success_response(
            {"destination": self.get_serializer(destination).data},
            "Destination updated successfully.",
        )

    def destroy(self, request, *args, **kwargs):
        destination = self.get_object()
        destination.is_active = False
        destination.save(update_fields=["is_active", "updated_at"])
        return success_response(None, "Destination deleted successfully.")

    @action(detail=False, methods=["get"])
    def search(self, request):
        queryset = self.filter_queryset(Destination.objects.filter(is_active=True))
        min_budget = _number(request.query_params.get("min_budget"))
        max_budget = _number(request.query_params.get("max_budget"))
        if min_budget is not None:
            queryset = queryset.filter(average_cost_per_day__budget__gte=min_budget)
        if max_budget is not None:
            queryset = queryset.filter(average_cost_per_day__budget__lte=max_budget)
        page = self.paginate_queryset(queryset.order_by("-popularity", "name"))
        serializer = self.get_serializer(page, many=True)
        return self.paginator.get_paginated_response(serializer.data, message="Search results.")

    @action(detail=False, methods=["get"])
    def featured(self, request):
        destinations = Destination.objects.filter(is_active=True, is_featured=True).order_by("-popularity")
        serializer = self.get_serializer(destinations[: _limit(request, 6)], many=True)
        return success_response({"destinations": serializer.data}, "Featured destinations retrieved successfully.")

    @action(detail=False, methods=["get"])
    def popular(self, request):
        destinations = Destination.objects.filter(is_active=True).order_by("-popularity", "name")
        serializer = self.get_serializer(destinations[: _limit(request, 8)], many=True)
        return success_response({"destinations": serializer.data}, "Popular destinations retrieved successfully.")

    @action(detail=False, methods=["get"])
    def countries(self, request):
        countries = (
            Destination.objects.filter(is_active=True)
            .values("country")
            .annotate(count=Count("id"))
            .order_by("-count", "country")
        )
        return success_response(
            {"countries": [{"country": row["country"], "count": row["count"]} for row in countries]},
            "Countries retrieved successfully.",
        )
