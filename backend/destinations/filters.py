import django_filters

from .models import Destination


class DestinationFilter(django_filters.FilterSet):
    country = django_filters.CharFilter(field_name="country", lookup_expr="iexact")
    region = django_filters.CharFilter(field_name="region", lookup_expr="iexact")
    featured = django_filters.BooleanFilter(field_name="is_featured")
    tags = django_filters.CharFilter(method="filter_tags")

    class Meta:
        model = Destination
        fields = ["country", "region", "featured", "tags"]

    def filter_tags(self, queryset, name, value):
        for tag in [part.strip().lower() for part in value.split(",") if part.strip()]:
            queryset = queryset.filter(tags__icontains=tag)
        return queryset
