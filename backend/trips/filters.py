import django_filters

from .models import Trip


class TripFilter(django_filters.FilterSet):
    destination = django_filters.NumberFilter(field_name="destination_id")
    min_price = django_filters.NumberFilter(field_name="price_amount", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price_amount", lookup_expr="lte")
    min_days = django_filters.NumberFilter(field_name="duration_days", lookup_expr="gte")
    max_days = django_filters.NumberFilter(field_name="duration_days", lookup_expr="lte")
    difficulty = django_filters.ChoiceFilter(field_name="difficulty_level", choices=Trip.DIFFICULTY_LEVELS)
    type = django_filters.ChoiceFilter(field_name="trip_type", choices=Trip.TRIP_TYPES)
    featured = django_filters.BooleanFilter(field_name="is_featured")
    departure_after = django_filters.DateFilter(
        field_name="available_dates__departure_date", lookup_expr="gte", distinct=True
    )

    class Meta:
        model = Trip
        fields = [
            "destination",
            "min_price",
            "max_price",
            "min_days",
            "max_days",
            "difficulty",
            "type",
            "featured",
            "departure_after",
        ]
