from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Avg, Count

from destinations.models import Destination
from trips.models import Trip

from ..models import Review

TENTH = Decimal("0.1")


def _summarize(queryset) -> tuple[Decimal, int]:
    stats = queryset.aggregate(average=Avg("rating_overall"), count=Count("id"))
    if not stats["count"]:
        return Decimal("0.0"), 0
    average = Decimal(str(stats["average"])).quantize(TENTH, rounding=ROUND_HALF_UP)
    return average, stats["count"]


def recalculate_trip_rating(trip_id) -> tuple[Decimal, int]:
    """Recompute a trip's cached rating from its approved reviews; no reviews resets it to zero."""

    average, count = _summarize(Review.objects.filter(trip_id=trip_id, status=Review.APPROVED))
    Trip.objects.filter(pk=trip_id).update(rating_average=average, rating_count=count)

    destination_id = Trip.objects.filter(pk=trip_id).values_list("destination_id", flat=True).first()
    if destination_id is not None:
        recalculate_destination_rating(destination_id)
    return average, count


def recalculate_destination_rating(destination_id) -> tuple[Decimal, int]:
    average, count = _summarize(
        Review.objects.filter(trip__destination_id=destination_id, status=Review.APPROVED)
    )
    Destination.objects.filter(pk=destination_id).update(rating_average=average, rating_count=count)
    return average, count


def rating_distribution(trip_id) -> dict:
    counts = dict(
        Review.objects.filter(trip_id=trip_id, status=Review.APPROVED)
        .values_list("rating_overall")
        .annotate(count=Count("id"))
        .order_by()
    )
    return {str(stars): counts.get(stars, 0) for stars in range(5, 0, -1)}
