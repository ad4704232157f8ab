from types import SimpleNamespace

import pytest
from rest_framework.test import APIRequestFactory, force_authenticate
from rest_framework.views import APIView

from accounts.models import User
from accounts.permissions import IsAdminRole, IsOwnerOrAdmin, role_required

factory = APIRequestFactory()


def _request(user):
    request = factory.get("/")
    force_authenticate(request, user=user)
    return APIView().initialize_request(request)


@pytest.mark.django_db
def test_role_required_checks_role(customer, admin_user):
    permission = role_required(User.CUSTOMER)()

    assert permission.has_permission(_request(customer), None) is True
    assert permission.has_permission(_request(admin_user), None) is False
    assert permission.message == "User role admin is not authorized to access this route."


@pytest.mark.django_db
def test_admin_role_rejects_customers(customer, admin_user):
    assert IsAdminRole().has_permission(_request(admin_user), None) is True
    assert IsAdminRole().has_permission(_request(customer), None) is False


@pytest.mark.django_db
def test_owner_or_admin_object_check(customer, other_customer, admin_user):
    permission = IsOwnerOrAdmin()
    owned = SimpleNamespace(user_id=customer.pk)

    assert permission.has_object_permission(_request(customer), None, owned) is True
    assert permission.has_object_permission(_request(other_customer), None, owned) is False
    assert permission.has_object_permission(_request(admin_user), None, owned) is True


@pytest.mark.django_db
def test_owner_field_can_be_overridden_by_view(customer, other_customer):
    view = SimpleNamespace(owner_field="responded_by")
    obj = SimpleNamespace(responded_by_id=other_customer.pk)

    assert IsOwnerOrAdmin().has_object_permission(_request(other_customer), view, obj) is True
    assert IsOwnerOrAdmin().has_object_permission(_request(customer), view, obj) is False
