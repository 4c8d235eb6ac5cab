import pytest

from app.core.exceptions import ForbiddenException, UnauthenticatedException
from app.core.permissions import (
    Identity,
    can_access_addresses,
    can_access_cart,
    ensure_address_access,
    ensure_cart_access,
)
from app.models.user import UserRole

OWNER = Identity(id="u1")
STRANGER = Identity(id="u2")
ADMIN = Identity(id="a1", role=UserRole.ADMIN)


@pytest.mark.parametrize("identity, allowed", [(OWNER, True), (STRANGER, False), (ADMIN, True)])
def test_cart_policy(identity, allowed):
    assert can_access_cart(identity, "u1") is allowed


@pytest.mark.parametrize("identity, allowed", [(OWNER, True), (STRANGER, False), (ADMIN, False)])
def test_address_policy(identity, allowed):
    assert can_access_addresses(identity, "u1") is allowed


@pytest.mark.parametrize("ensure", [ensure_cart_access, ensure_address_access])
def test_anonymous_is_unauthenticated(ensure):
    with pytest.raises(UnauthenticatedException) as exc_info:
        ensure(None, "u1")
    assert exc_info.value.status_code == 401


def test_stranger_is_forbidden():
    with pytest.raises(ForbiddenException):
        ensure_cart_access(STRANGER, "u1")


def test_admin_on_addresses_is_forbidden():
    with pytest.raises(ForbiddenException) as exc_info:
        ensure_address_access(ADMIN, "u1")
    assert exc_info.value.status_code == 403
