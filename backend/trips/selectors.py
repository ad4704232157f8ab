import uuid

from django.shortcuts import get_object_or_404

from .models import Trip


def resolve_trip(identifier, queryset=None) -> Trip:
    """
    Find a trip by UUID primary key, then by integer package id, then by slug.
    Raises Http404 when nothing matches.
    """

    if queryset is None:
        queryset = Trip.objects.all()
    value = str(identifier).strip()
    try:
        trip_uuid = uuid.UUID(value)
    except ValueError:
        trip_uuid = None

    if trip_uuid is not None:
        return get_object_or_404(queryset, pk=trip_uuid)
    if value.isdigit():
        return get_object_or_404(queryset, package_id=int(value))
    return get_object_or_404(queryset, slug=value)
