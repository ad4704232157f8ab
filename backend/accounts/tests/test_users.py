import pytest
from rest_framework.test import APIClient

from accounts.models import RefreshTokenRecord, User
from accounts.services.tokens import issue_token_pair


@pytest.mark.django_db
def test_profile_update_only_touches_allowed_fields(customer_client, customer):
    response = customer_client.put(
        "/api/users/profile/",
        {"full_name": "Renamed Traveler", "bio": "Loves long walks.", "role": "admin"},
        format="json",
    )

    assert response.status_code == 200
    customer.refresh_from_db()
    assert customer.full_name == "Renamed Traveler"
    assert customer.bio == "Loves long walks."
    assert customer.role == User.CUSTOMER


@pytest.mark.django_db
def test_deleting_profile_deactivates_and_frees_email(customer_client, customer):
    issue_token_pair(customer)

    response = customer_client.delete("/api/users/profile/")

    assert response.status_code == 200
    customer.refresh_from_db()
    assert customer.is_active is False
    assert customer.email.startswith("deleted_")
    assert customer.email.endswith("traveler@example.com")
    assert not RefreshTokenRecord.objects.filter(user=customer).exists()

    again = APIClient().post(
        "/api/auth/register/",
        {"full_name": "New Owner", "email": "traveler@example.com", "password": "secret123"},
        format="json",
    )
    assert again.status_code == 201


@pytest.mark.django_db
def test_deactivated_user_cannot_log_in(customer):
    customer.is_active = False
    customer.save(update_fields=["is_active"])

    response = APIClient().post(
        "/api/auth/login/",
        {"email": customer.email, "password": "password123"},
        format="json",
    )

    assert response.status_code == 401


@pytest.mark.django_db
def test_favorites_behave_as_a_set(customer_client, customer, destination):
    url = f"/api/users/favorites/{destination.pk}/"

    customer_client.post(url)
    response = customer_client.post(url)
    assert response.json()["data"]["favorite_destinations"] == [destination.pk]

    customer_client.delete(url)
    response = customer_client.delete(url)
    assert response.status_code == 200
    assert response.json()["data"]["favorite_destinations"] == []


@pytest.mark.django_db
def test_user_list_is_admin_only(customer_client, admin_client, customer):
    assert customer_client.get("/api/users/").status_code == 403

    response = admin_client.get("/api/users/", {"role": "customer"})
    assert response.status_code == 200
    emails = [user["email"] for user in response.json()["data"]]
    assert emails == [customer.email]


@pytest.mark.django_db
def test_admin_cannot_change_own_role(admin_client, admin_user, customer):
    own = admin_client.put(f"/api/users/{admin_user.pk}/role/", {"role": "customer"}, format="json")
    assert own.status_code == 400

    other = admin_client.put(f"/api/users/{customer.pk}/role/", {"role": "admin"}, format="json")
    assert other.status_code == 200
    customer.refresh_from_db()
    assert customer.role == User.ADMIN
