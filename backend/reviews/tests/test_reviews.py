from decimal import Decimal

import pytest

from accounts.models import User
from bookings.models import Booking
from bookings.services.reservations import create_booking
from conftest import make_user
from reviews.models import Review
from reviews.services.ratings import recalculate_trip_rating

CONTENT = "Well organised, great guides and the food at every hut was excellent."


def _review(user, trip, rating, status=Review.APPROVED):
    return Review.objects.create(
        user=user,
        trip=trip,
        rating_overall=rating,
        title=f"{rating} stars",
        content=CONTENT,
        status=status,
    )


def _reviewers(count):
    return [make_user(f"reviewer{index}@example.com") for index in range(count)]


@pytest.mark.django_db
def test_rating_aggregate_follows_approved_reviews(trip, destination):
    first, second, third = _reviewers(3)
    _review(first, trip, 5)
    _review(second, trip, 4)
    low = _review(third, trip, 3)

    trip.refresh_from_db()
    assert trip.rating_average == Decimal("4.0")
    assert trip.rating_count == 3

    low.delete()

    trip.refresh_from_db()
    destination.refresh_from_db()
    assert trip.rating_average == Decimal("4.5")
    assert trip.rating_count == 2
    assert destination.rating_average == Decimal("4.5")


@pytest.mark.django_db
def test_pending_reviews_do_not_count(trip):
    (user,) = _reviewers(1)
    _review(user, trip, 1, status=Review.PENDING)

    trip.refresh_from_db()
    assert trip.rating_count == 0
    assert trip.rating_average == Decimal("0.0")


@pytest.mark.django_db
def test_rejecting_an_approved_review_recalculates(admin_client, trip):
    first, second = _reviewers(2)
    _review(first, trip, 5)
    harsh = _review(second, trip, 1)
    trip.refresh_from_db()
    assert trip.rating_average == Decimal("3.0")

    response = admin_client.put(
        f"/api/reviews/{harsh.pk}/moderate/",
        {"status": "rejected", "moderation_notes": "Off topic", "response": "Sorry to hear that."},
        format="json",
    )

    assert response.status_code == 200
    assert response.json()["data"]["review"]["response"]["content"] == "Sorry to hear that."
    trip.refresh_from_db()
    assert trip.rating_average == Decimal("5.0")
    assert trip.rating_count == 1


@pytest.mark.django_db
def test_average_rounds_half_up(trip):
    users = _reviewers(4)
    for user, rating in zip(users, [5, 4, 4, 4]):
        _review(user, trip, rating)
    Review.objects.create(
        user=make_user("late@example.com"),
        trip=trip,
        rating_overall=4,
        title="Late",
        content=CONTENT,
        status=Review.PENDING,
    )

    average, count = recalculate_trip_rating(trip.pk)

    assert (average, count) == (Decimal("4.3"), 4)


@pytest.mark.django_db
def test_create_review_marks_verified_purchase(customer_client, customer, trip, trip_date):
    booking = create_booking(
        user=customer,
        trip_id=str(trip.pk),
        departure_date=trip_date.departure_date,
        number_of_travelers=1,
    ).booking
    booking.booking_status = Booking.CONFIRMED
    booking.save()

    response = customer_client.post(
        "/api/reviews/",
        {
            "trip": str(trip.pk),
            "rating": {"overall": 5, "categories": {"guide": 5, "value_for_money": 4}},
            "title": "Unforgettable",
            "content": CONTENT,
            "pros": ["Guides"],
        },
        format="json",
    )

    assert response.status_code == 201
    review = response.json()["data"]["review"]
    assert review["is_verified_purchase"] is True
    assert review["status"] == Review.APPROVED
    assert review["rating"] == {"overall": 5, "categories": {"guide": 5, "value_for_money": 4}}
    trip.refresh_from_db()
    assert trip.rating_count == 1


@pytest.mark.django_db
def test_second_review_for_same_trip_conflicts(customer_client, customer, trip):
    _review(customer, trip, 4)

    response = customer_client.post(
        "/api/reviews/",
        {"trip": str(trip.pk), "rating": {"overall": 2}, "title": "Again", "content": CONTENT},
        format="json",
    )

    assert response.status_code == 409


@pytest.mark.django_db
def test_unknown_rating_category_is_rejected(customer_client, trip):
    response = customer_client.post(
        "/api/reviews/",
        {
            "trip": str(trip.pk),
            "rating": {"overall": 4, "categories": {"weather": 5}},
            "title": "Nice",
            "content": CONTENT,
        },
        format="json",
    )

    assert response.status_code == 422


@pytest.mark.django_db
def test_reviews_start_pending_without_auto_approve(settings, customer_client, trip):
    settings.REVIEW_AUTO_APPROVE = False

    response = customer_client.post(
        "/api/reviews/",
        {"trip": str(trip.pk), "rating": {"overall": 4}, "title": "Nice", "content": CONTENT},
        format="json",
    )

    assert response.json()["data"]["review"]["status"] == Review.PENDING
    assert response.json()["data"]["review"]["is_verified_purchase"] is False


@pytest.mark.django_db
def test_helpful_vote_counts_once(api_client, customer, other_customer, trip):
    review = _review(customer, trip, 5)
    api_client.force_authenticate(other_customer)

    first = api_client.post(f"/api/reviews/{review.pk}/helpful/")
    second = api_client.post(f"/api/reviews/{review.pk}/helpful/")

    assert first.status_code == 200
    assert first.json()["data"]["helpful_votes"] == 1
    assert second.status_code == 400
    review.refresh_from_db()
    assert review.helpful_votes == 1


@pytest.mark.django_db
def test_trip_reviews_include_distribution(api_client, trip):
    first, second, third = _reviewers(3)
    _review(first, trip, 5)
    _review(second, trip, 5)
    _review(third, trip, 2, status=Review.REJECTED)

    response = api_client.get(f"/api/reviews/trip/{trip.slug}/", {"sort": "rating-high"})

    assert response.status_code == 200
    body = response.json()
    assert len(body["data"]) == 2
    assert body["summary"]["count"] == 2
    assert body["summary"]["distribution"] == {"5": 2, "4": 0, "3": 0, "2": 0, "1": 0}


@pytest.mark.django_db
def test_only_author_can_edit(api_client, customer, other_customer, trip):
    review = _review(customer, trip, 3)
    api_client.force_authenticate(other_customer)

    assert api_client.put(f"/api/reviews/{review.pk}/", {"title": "Hijacked"}, format="json").status_code == 403

    api_client.force_authenticate(customer)
    response = api_client.put(f"/api/reviews/{review.pk}/", {"rating": {"overall": 5}}, format="json")
    assert response.status_code == 200
    trip.refresh_from_db()
    assert trip.rating_average == Decimal("5.0")


@pytest.mark.django_db
def test_admin_can_delete_any_review(admin_client, customer, trip):
    review = _review(customer, trip, 4)

    response = admin_client.delete(f"/api/reviews/{review.pk}/")

    assert response.status_code == 200
    assert not Review.objects.exists()
    trip.refresh_from_db()
    assert trip.rating_count == 0
    assert User.objects.filter(pk=customer.pk).exists()


@pytest.mark.django_db
def test_other_customer_cannot_delete_review(api_client, customer, other_customer, trip):
    review = _review(customer, trip, 4)
    api_client.force_authenticate(other_customer)

    response = api_client.delete(f"/api/reviews/{review.pk}/")

    assert response.status_code == 403
    assert Review.objects.filter(pk=review.pk).exists()

    api_client.force_authenticate(customer)
    assert api_client.delete(f"/api/reviews/{review.pk}/").status_code == 200
