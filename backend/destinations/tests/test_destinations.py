import pytest

from destinations.models import Destination


@pytest.mark.django_db
def test_detail_counts_views_and_lists_trips(api_client, destination, trip):
    first = api_client.get(f"/api/destinations/{destination.slug}/")
    second = api_client.get(f"/api/destinations/{destination.pk}/")

    assert first.status_code == 200
    assert first.json()["data"]["destination"]["popularity"] == 1
    assert second.json()["data"]["destination"]["popularity"] == 2
    assert [entry["name"] for entry in second.json()["data"]["trips"]] == [trip.name]


@pytest.mark.django_db
def test_list_filters_by_country_and_tag(api_client, destination):
    Destination.objects.create(name="Kyoto", description="Temples and tea houses.", country="Japan", tags=["culture"])

    response = api_client.get("/api/destinations/", {"country": "italy"})
    assert [entry["name"] for entry in response.json()["data"]] == ["Dolomites"]

    response = api_client.get("/api/destinations/", {"tags": "culture"})
    assert [entry["name"] for entry in response.json()["data"]] == ["Kyoto"]


@pytest.mark.django_db
def test_only_admins_write(customer_client, admin_client):
    payload = {
        "name": "Lofoten Islands",
        "description": "Fishing villages beneath granite walls above the Arctic Circle.",
        "country": "Norway",
        "tags": ["Arctic", " Hiking "],
        "images": [{"url": "https://img.test/lofoten.jpg"}],
    }

    assert customer_client.post("/api/destinations/", payload, format="json").status_code == 403

    response = admin_client.post("/api/destinations/", payload, format="json")
    assert response.status_code == 201
    body = response.json()["data"]["destination"]
    assert body["slug"] == "lofoten-islands"
    assert body["tags"] == ["arctic", "hiking"]
    assert body["primary_image"] == "https://img.test/lofoten.jpg"


@pytest.mark.django_db
def test_delete_hides_destination(admin_client, api_client, destination):
    assert admin_client.delete(f"/api/destinations/{destination.pk}/").status_code == 200

    destination.refresh_from_db()
    assert destination.is_active is False
    assert api_client.get(f"/api/destinations/{destination.slug}/").status_code == 404


@pytest.mark.django_db
def test_countries_summary(api_client, destination):
    Destination.objects.create(name="Cinque Terre", description="Cliffside villages.", country="Italy")

    response = api_client.get("/api/destinations/countries/")

    assert response.json()["data"]["countries"] == [{"country": "Italy", "count": 2}]
