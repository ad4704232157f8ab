import pytest

from inquiries.models import Inquiry

FORM = {
    "name": "Priya Patel",
    "email": "Priya@Example.com",
    "phone": "+44 20 7946 0958",
    "package": "Dolomites Hut to Hut",
    "group_size": "3-5",
    "message": "Do you run this trip in September?",
}


@pytest.mark.django_db
def test_anyone_can_submit_an_inquiry(api_client):
    response = api_client.post("/api/inquiries/", FORM, format="json")

    assert response.status_code == 201
    inquiry = Inquiry.objects.get()
    assert inquiry.email == "priya@example.com"
    assert inquiry.status == Inquiry.NEW


@pytest.mark.django_db
def test_phone_is_required_and_validated(api_client):
    missing = api_client.post("/api/inquiries/", {**FORM, "phone": ""}, format="json")
    garbage = api_client.post("/api/inquiries/", {**FORM, "phone": "call me"}, format="json")

    assert missing.status_code == 422
    assert garbage.status_code == 422
    assert not Inquiry.objects.exists()


@pytest.mark.django_db
def test_only_admins_read_the_queue(api_client, customer_client, admin_client):
    api_client.post("/api/inquiries/", FORM, format="json")

    assert api_client.get("/api/inquiries/").status_code == 401
    assert customer_client.get("/api/inquiries/").status_code == 403

    response = admin_client.get("/api/inquiries/", {"status": "new"})
    assert response.status_code == 200
    assert response.json()["pagination"]["totalItems"] == 1


@pytest.mark.django_db
def test_first_status_change_stamps_responder(admin_client, admin_user):
    inquiry = Inquiry.objects.create(name="Sam", email="sam@example.com", phone="5551234567")

    response = admin_client.patch(
        f"/api/inquiries/{inquiry.pk}/",
        {"status": "contacted", "notes": "Left a voicemail"},
        format="json",
    )

    assert response.status_code == 200
    inquiry.refresh_from_db()
    assert inquiry.status == Inquiry.CONTACTED
    assert inquiry.responded_by == admin_user
    first_response = inquiry.responded_at
    assert first_response is not None

    admin_client.patch(f"/api/inquiries/{inquiry.pk}/", {"status": "resolved"}, format="json")

    inquiry.refresh_from_db()
    assert inquiry.responded_at == first_response


@pytest.mark.django_db
def test_admin_deletes_inquiry(admin_client):
    inquiry = Inquiry.objects.create(name="Sam", email="sam@example.com", phone="5551234567")

    assert admin_client.delete(f"/api/inquiries/{inquiry.pk}/").status_code == 200
    assert admin_client.get(f"/api/inquiries/{inquiry.pk}/").status_code == 404
