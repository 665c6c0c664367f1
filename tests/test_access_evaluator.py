"""
Access Evaluator Tests

Super admin detection, role based permission resolution, the legacy
per-profile permission list and fail-closed behaviour on store errors.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.features.permissions.dependencies import (
    AccessDecision,
    SuperAdminRequired,
    check_super_admin_permission,
    evaluate_permission,
    has_permission,
    is_super_admin,
    permission_summary,
    require_super_admin,
    role_grants,
)
from app.features.permissions.models import ProfileSystemRole
from app.features.users.models import User


async def assign(db, user, role, expires_at=None):
    assignment = ProfileSystemRole(profile_id=user.id, system_role_id=role.id, expires_at=expires_at)
    db.add(assignment)
    await db.commit()
    return assignment


# ==================== Super Admin Detection ====================


@pytest.mark.asyncio
async def test_is_super_admin_reads_profile_flag(db_session, super_admin, regular_user):
    assert await is_super_admin(db_session, super_admin.id) is True
    assert await is_super_admin(db_session, regular_user.id) is False


@pytest.mark.asyncio
async def test_is_super_admin_unknown_or_missing_id(db_session):
    assert await is_super_admin(db_session, "01HZZZZZZZZZZZZZZZZZZZZZZZ") is False
    assert await is_super_admin(db_session, None) is False


@pytest.mark.asyncio
async def test_is_super_admin_store_error_is_false(db_session, super_admin):
    with patch.object(db_session, "execute", AsyncMock(side_effect=SQLAlchemyError("down"))):
        assert await is_super_admin(db_session, super_admin.id) is False


# ==================== Permission Resolution ====================


@pytest.mark.asyncio
async def test_super_admin_has_every_permission(db_session, super_admin):
    for permission, resource in [("read", None), ("delete", "system"), ("anything", "nowhere")]:
        assert await has_permission(db_session, super_admin, permission, resource) is True


@pytest.mark.asyncio
async def test_no_assignments_denies_everything(db_session, regular_user):
    decision = await evaluate_permission(db_session, regular_user, "read", "organizations")
    assert decision == AccessDecision(False, "no role assignments")
    assert await has_permission(db_session, regular_user, "read") is False


@pytest.mark.asyncio
async def test_unauthenticated_is_denied(db_session):
    assert await has_permission(db_session, None, "read") is False


@pytest.mark.asyncio
async def test_permanent_assignment_grants_role_permissions(db_session, regular_user, support_role):
    await assign(db_session, regular_user, support_role)

    assert await has_permission(db_session, regular_user, "suspend", "organizations") is True
    # Without a resource any resource in the role counts
    assert await has_permission(db_session, regular_user, "read") is True
    # Scoped to a resource the role lists without that action
    assert await has_permission(db_session, regular_user, "suspend", "users") is False
    assert await has_permission(db_session, regular_user, "delete") is False

    decision = await evaluate_permission(db_session, regular_user, "read", "audit")
    assert decision.granted
    assert decision.reason == "role support_admin"


@pytest.mark.asyncio
async def test_assignment_with_future_expiry_does_not_grant(db_session, regular_user, support_role):
    await assign(db_session, regular_user, support_role, datetime.now(timezone.utc) + timedelta(days=30))

    assert await has_permission(db_session, regular_user, "read", "organizations") is False


@pytest.mark.asyncio
async def test_assignment_with_past_expiry_does_not_grant(db_session, regular_user, support_role):
    await assign(db_session, regular_user, support_role, datetime.now(timezone.utc) - timedelta(days=1))

    assert await has_permission(db_session, regular_user, "read", "organizations") is False


@pytest.mark.asyncio
async def test_store_error_denies(db_session, regular_user, support_role):
    await assign(db_session, regular_user, support_role)

    with patch.object(db_session, "execute", AsyncMock(side_effect=SQLAlchemyError("down"))):
        decision = await evaluate_permission(db_session, regular_user, "read", "organizations")

    assert decision.granted is False
    assert decision.reason == "role lookup failed"


@pytest.mark.asyncio
async def test_store_error_denies_super_admin_too(db_session, super_admin):
    with patch.object(db_session, "execute", AsyncMock(side_effect=SQLAlchemyError("down"))):
        assert await has_permission(db_session, super_admin, "read") is False


def test_role_grants_ignores_malformed_maps():
    assert role_grants(None, "read") is False
    assert role_grants({"users": "read"}, "read", "users") is False
    assert role_grants({"users": ["read"]}, "read", "users") is True


@pytest.mark.asyncio
async def test_permission_summary_merges_roles(support_role):
    billing = type("Role", (), {"permissions": {"users": ["read"], "billing": ["write", "read"]}})()
    assignments = [
        type("Assignment", (), {"system_role": support_role})(),
        type("Assignment", (), {"system_role": billing})(),
    ]

    assert permission_summary(assignments) == {
        "audit": ["read"],
        "billing": ["read", "write"],
        "organizations": ["read", "suspend"],
        "users": ["read"],
    }


# ==================== Super Admin Gate ====================


@pytest.mark.asyncio
async def test_require_super_admin_returns_admin(super_admin):
    assert require_super_admin(super_admin) is super_admin


@pytest.mark.asyncio
async def test_require_super_admin_diverts_others(regular_user):
    with pytest.raises(SuperAdminRequired) as exc_info:
        require_super_admin(regular_user)
    assert exc_info.value.user_id == regular_user.id

    with pytest.raises(SuperAdminRequired) as exc_info:
        require_super_admin(None)
    assert exc_info.value.user_id is None


# ==================== Legacy Permission List ====================


def make_profile(is_super_admin: bool, permissions: list) -> User:
    return User(
        id="01HLEGACY00000000000000000",
        appwrite_id="legacy",
        email="legacy@platform.example",
        is_super_admin=is_super_admin,
        super_admin_permissions=permissions,
    )


@pytest.mark.parametrize(
    "is_admin, permissions, permission, expected",
    [
        (True, [], "anything", True),
        (True, ["*"], "anything", True),
        (True, ["read", "*"], "write", True),
        (True, ["read"], "read", True),
        (True, ["read"], "write", False),
        (False, [], "read", False),
        (False, ["*"], "read", False),
        (False, ["read"], "read", False),
    ],
)
def test_check_super_admin_permission(is_admin, permissions, permission, expected):
    assert check_super_admin_permission(make_profile(is_admin, permissions), permission) is expected


def test_check_super_admin_permission_without_user():
    assert check_super_admin_permission(None, "read") is False
