"""
HTTP Route Tests

Admin endpoints divert non super admins to the landing page; super admins get
JSON. Identity is injected through dependency overrides.
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.core import config
from app.features.audit.models import SuperAdminAuditLog
from app.features.organizations.models import OrganizationStatus


# ==================== Divert ====================


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, path",
    [
        ("GET", "/admin/metrics"),
        ("GET", "/admin/audit-logs"),
        ("GET", "/admin/settings"),
        ("GET", "/admin/organizations/"),
        ("POST", "/admin/organizations/some-id/reactivate"),
    ],
)
async def test_anonymous_callers_are_redirected(async_client: AsyncClient, method, path):
    response = await async_client.request(method, path)

    assert response.status_code == 303
    assert response.headers["location"] == config.NON_ADMIN_REDIRECT_PATH


@pytest.mark.asyncio
async def test_regular_user_is_redirected_and_nothing_changes(
    async_client: AsyncClient, login, db_session, regular_user, organization
):
    login(regular_user)

    response = await async_client.post(
        f"/admin/organizations/{organization.id}/suspend", json={"reason": "not allowed"}
    )

    assert response.status_code == 303
    await db_session.refresh(organization)
    assert organization.status == OrganizationStatus.ACTIVE
    result = await db_session.execute(select(SuperAdminAuditLog))
    assert result.scalars().all() == []


# ==================== Organizations ====================


@pytest.mark.asyncio
async def test_suspend_and_reactivate_flow(async_client: AsyncClient, login, super_admin, organization):
    login(super_admin)

    response = await async_client.post(
        f"/admin/organizations/{organization.id}/suspend",
        json={"reason": "Chargeback"},
        headers={"user-agent": "admin-console"},
    )
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = await async_client.get(f"/admin/organizations/{organization.id}")
    assert response.status_code == 200
    data = response.json()
    assert data["organization"]["status"] == "suspended"
    assert data["organization"]["suspension_reason"] == "Chargeback"

    response = await async_client.post(f"/admin/organizations/{organization.id}/reactivate")
    assert response.status_code == 200

    response = await async_client.get("/admin/audit-logs", params={"target_type": "organization"})
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    actions = {item["action"] for item in data["items"]}
    assert actions == {"suspend_organization", "view_organization_details", "reactivate_organization"}
    suspend = next(item for item in data["items"] if item["action"] == "suspend_organization")
    assert suspend["user_agent"] == "admin-console"
    assert suspend["details"] == {"reason": "Chargeback"}


@pytest.mark.asyncio
async def test_suspend_requires_reason(async_client: AsyncClient, login, super_admin, organization):
    login(super_admin)

    response = await async_client.post(f"/admin/organizations/{organization.id}/suspend", json={"reason": ""})

    assert response.status_code == 400
    assert "reason" in response.json()


@pytest.mark.asyncio
async def test_suspend_unknown_organization(async_client: AsyncClient, login, super_admin):
    login(super_admin)

    response = await async_client.post("/admin/organizations/missing/suspend", json={"reason": "x"})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_and_update_organizations(async_client: AsyncClient, login, super_admin, organization):
    login(super_admin)

    response = await async_client.get("/admin/organizations/", params={"search": "acme"})
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["slug"] == "acme"
    assert data["pages"] == 1

    response = await async_client.patch(
        f"/admin/organizations/{organization.id}",
        json={"name": "Acme Worldwide", "billing_email": "finance@acme.com"},
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Acme Worldwide"
    assert response.json()["billing_email"] == "finance@acme.com"

    response = await async_client.patch(f"/admin/organizations/{organization.id}", json={"billing_email": None})
    assert response.status_code == 200
    assert response.json()["billing_email"] is None
    assert response.json()["name"] == "Acme Worldwide"

    response = await async_client.patch("/admin/organizations/missing", json={"name": "x"})
    assert response.status_code == 404


# ==================== Settings ====================


@pytest.mark.asyncio
async def test_settings_endpoints(async_client: AsyncClient, login, super_admin):
    login(super_admin)

    response = await async_client.put(
        "/admin/settings/platform_name", json={"value": "Inbox Pro", "is_public": True}
    )
    assert response.status_code == 200
    response = await async_client.put(
        "/admin/settings/limits", json={"value": {"max_orgs": 10, "tiers": ["a", "b"]}, "category": "limits"}
    )
    assert response.status_code == 200

    response = await async_client.get("/admin/settings")
    assert response.json()["settings"] == {
        "platform_name": "Inbox Pro",
        "limits": {"max_orgs": 10, "tiers": ["a", "b"]},
    }

    login(None)
    response = await async_client.get("/settings/public")
    assert response.status_code == 200
    assert response.json()["settings"] == {"platform_name": "Inbox Pro"}


# ==================== Roles and Permission Check ====================


@pytest.mark.asyncio
async def test_role_assignment_endpoints(async_client: AsyncClient, login, super_admin, regular_user, support_role):
    login(super_admin)

    response = await async_client.post(f"/admin/users/{regular_user.id}/roles", json={"role_id": support_role.id})
    assert response.status_code == 201

    response = await async_client.get(f"/admin/users/{regular_user.id}/roles")
    assert response.status_code == 200
    data = response.json()
    assert [a["system_role"]["name"] for a in data["assignments"]] == ["support_admin"]
    assert data["effective_permissions"]["organizations"] == ["read", "suspend"]

    login(regular_user)
    response = await async_client.get(
        "/permissions/check", params={"permission": "suspend", "resource": "organizations"}
    )
    assert response.status_code == 200
    assert response.json()["has_permission"] is True

    login(super_admin)
    response = await async_client.delete(f"/admin/users/{regular_user.id}/roles/{support_role.id}")
    assert response.status_code == 204
    response = await async_client.delete(f"/admin/users/{regular_user.id}/roles/{support_role.id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_expiring_assignment_is_listed_but_grants_nothing(
    async_client: AsyncClient, login, super_admin, regular_user, support_role
):
    login(super_admin)
    expiry = (datetime.now(timezone.utc) + timedelta(days=30)).isoformat()

    response = await async_client.post(
        f"/admin/users/{regular_user.id}/roles", json={"role_id": support_role.id, "expires_at": expiry}
    )
    assert response.status_code == 201

    response = await async_client.get(f"/admin/users/{regular_user.id}/roles")
    data = response.json()
    assert [a["system_role"]["name"] for a in data["assignments"]] == ["support_admin"]
    assert data["assignments"][0]["expires_at"] is not None
    assert data["effective_permissions"] == {}

    login(regular_user)
    response = await async_client.get(
        "/permissions/check", params={"permission": "read", "resource": "organizations"}
    )
    assert response.json()["has_permission"] is False


@pytest.mark.asyncio
async def test_permission_check_without_roles(async_client: AsyncClient, login, regular_user):
    login(regular_user)

    response = await async_client.get("/permissions/check", params={"permission": "read"})

    assert response.json() == {
        "permission": "read",
        "resource": None,
        "has_permission": False,
        "reason": "no role assignments",
    }


@pytest.mark.asyncio
async def test_permission_check_requires_authentication(async_client: AsyncClient):
    response = await async_client.get("/permissions/check", params={"permission": "read"})

    assert response.status_code in (401, 403)


# ==================== Users / Metrics ====================


@pytest.mark.asyncio
async def test_users_me(async_client: AsyncClient, login, super_admin):
    login(super_admin)

    response = await async_client.get("/users/me")

    assert response.status_code == 200
    assert response.json()["email"] == super_admin.email
    assert response.json()["is_super_admin"] is True


@pytest.mark.asyncio
async def test_admin_metrics(async_client: AsyncClient, login, super_admin, organization):
    login(super_admin)

    response = await async_client.get("/admin/metrics")

    assert response.status_code == 200
    data = response.json()
    assert data["total_organizations"] == 1
    assert data["super_admins"] == 1
