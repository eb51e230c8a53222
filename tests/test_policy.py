import pytest

from carsense_api.models.user import User, UserRole
from carsense_api.policy import Action, authorize, enforce
from carsense_api.utils.exceptions import ForbiddenException, UnauthorizedException

OWNER = User(id="1", name="Alice", email="alice@example.com", role=UserRole.USER)
STRANGER = User(id="2", name="Bob", email="bob@example.com", role=UserRole.USER)
ADMIN = User(id="9", name="Root", email="root@example.com", role=UserRole.ADMIN)


@pytest.mark.parametrize("action", list(Action))
def test_anonymous_caller_is_always_denied_with_401(action: Action) -> None:
    decision = authorize(None, "1", action)
    assert not decision.allowed
    assert decision.status_code == 401


@pytest.mark.parametrize(
    ("caller", "action", "allowed", "status_code"),
    [
        (OWNER, Action.VIEW, True, 200),
        (ADMIN, Action.VIEW, True, 200),
        (STRANGER, Action.VIEW, False, 401),
        (OWNER, Action.UPDATE, True, 200),
        (ADMIN, Action.UPDATE, True, 200),
        (STRANGER, Action.UPDATE, False, 401),
        (OWNER, Action.TRANSFER, False, 403),
        (ADMIN, Action.TRANSFER, True, 200),
        (OWNER, Action.LIST_ALL, False, 403),
        (ADMIN, Action.LIST_ALL, True, 200),
        (OWNER, Action.MANAGE_LIBRARY, False, 403),
        (ADMIN, Action.MANAGE_LIBRARY, True, 200),
        (OWNER, Action.DELETE, True, 200),
        (ADMIN, Action.DELETE, False, 401),
        (STRANGER, Action.DELETE, False, 401),
        (OWNER, Action.RESTORE, True, 200),
        (ADMIN, Action.RESTORE, False, 401),
    ],
)
def test_decision_table(caller: User, action: Action, allowed: bool, status_code: int) -> None:
    decision = authorize(caller, OWNER.id, action)
    assert decision.allowed is allowed
    assert decision.status_code == status_code


def test_owner_only_actions_need_a_known_owner() -> None:
    assert not authorize(OWNER, None, Action.DELETE).allowed


def test_enforce_returns_caller_when_allowed() -> None:
    assert enforce(ADMIN, OWNER.id, Action.VIEW) is ADMIN


def test_enforce_raises_unauthorized() -> None:
    with pytest.raises(UnauthorizedException) as excinfo:
        enforce(STRANGER, OWNER.id, Action.VIEW)
    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "Unauthorized"


def test_enforce_raises_forbidden_with_custom_message() -> None:
    with pytest.raises(ForbiddenException) as excinfo:
        enforce(OWNER, OWNER.id, Action.TRANSFER, "Only admins can transfer ownership")
    assert excinfo.value.status_code == 403
    assert excinfo.value.message == "Only admins can transfer ownership"
