import pytest

from daysheets.core.policies import (
    Principal,
    authorize,
    require_artist_access,
    require_role,
    require_staff,
)
from daysheets.models import UserRole
from daysheets.utils.errors import AuthError, ForbiddenError


def principal(role, artist_ids=()):
    return Principal(user_id="u1", email="u@test.com", role=role, artist_ids=frozenset(artist_ids))


def test_missing_principal_is_unauthenticated():
    with pytest.raises(AuthError) as info:
        authorize(None, "queue.view")
    assert info.value.status_code == 401
    with pytest.raises(AuthError):
        require_staff(None)


def test_role_checks():
    agent = principal(UserRole.AGENT)
    fan = principal(UserRole.CLIENT, ["a1"])
    assert require_staff(agent) is agent
    assert require_role(fan, UserRole.CLIENT) is fan
    with pytest.raises(ForbiddenError):
        require_staff(fan)
    with pytest.raises(ForbiddenError) as info:
        authorize(agent, "invites.create")
    assert info.value.message == "Only admins can invite users"


def test_artist_scope():
    fan = principal(UserRole.CLIENT, ["a1"])
    require_artist_access(fan, "a1")
    require_artist_access(principal(UserRole.ADMIN), "anything")
    with pytest.raises(ForbiddenError):
        require_artist_access(fan, "a2")
    with pytest.raises(ForbiddenError):
        require_artist_access(fan, None)
