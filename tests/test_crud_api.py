"""Tests for the company, account, subscription and user endpoints."""

import pytest
from sqlalchemy.exc import IntegrityError

from app.api.v1.endpoints import accounts as accounts_endpoints
from app.models import Account
from tests.factories import auth_headers, make_account, make_company, make_subscription, make_user

PREFIX = "/api/v1"


class TestCompanies:
    async def test_create_with_default_branding(self, client, tenant):
        response = await client.post(
            f"{PREFIX}/companies",
            headers=auth_headers(tenant["admin"]),
            json={"name": "Globex"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["branding"]["app_name"] == "Globex"
        assert data["branding"]["primary_color"] == "#3B82F6"
        assert data["settings"]["default_user_role"] == "user"

    async def test_duplicate_name_conflicts(self, client, tenant):
        response = await client.post(
            f"{PREFIX}/companies",
            headers=auth_headers(tenant["admin"]),
            json={"name": "Acme"},
        )

        assert response.status_code == 409
        assert response.json()["detail"] == "Company with this name already exists"

    async def test_non_admin_is_forbidden(self, client, db_session, tenant):
        manager = await make_user(db_session, tenant["company"], email="m@example.com", role="manager")

        response = await client.get(f"{PREFIX}/companies", headers=auth_headers(manager))

        assert response.status_code == 403
        assert response.json()["detail"] == "Insufficient role"

    async def test_soft_delete_and_restore(self, client, db_session, tenant):
        headers = auth_headers(tenant["admin"])
        other = await make_company(db_session, name="Initech")

        deleted = await client.delete(f"{PREFIX}/companies/{other.id}", headers=headers)
        assert deleted.status_code == 200
        assert deleted.json()["deleted_at"] is not None

        assert (await client.get(f"{PREFIX}/companies/{other.id}", headers=headers)).status_code == 404

        listed = await client.get(f"{PREFIX}/companies/deleted", headers=headers)
        assert [c["id"] for c in listed.json()] == [str(other.id)]

        restored = await client.post(f"{PREFIX}/companies/{other.id}/restore", headers=headers)
        assert restored.status_code == 200
        assert restored.json()["deleted_at"] is None

        again = await client.post(f"{PREFIX}/companies/{other.id}/restore", headers=headers)
        assert again.status_code == 404

    async def test_name_reusable_after_delete(self, client, db_session, tenant):
        headers = auth_headers(tenant["admin"])
        other = await make_company(db_session, name="Initech")
        await client.delete(f"{PREFIX}/companies/{other.id}", headers=headers)

        response = await client.post(f"{PREFIX}/companies", headers=headers, json={"name": "Initech"})
        assert response.status_code == 201

        restore = await client.post(f"{PREFIX}/companies/{other.id}/restore", headers=headers)
        assert restore.status_code == 409

    async def test_list_is_paginated(self, client, db_session, tenant):
        for name in ("B", "C"):
            await make_company(db_session, name=name)

        response = await client.get(
            f"{PREFIX}/companies", headers=auth_headers(tenant["admin"]), params={"page_size": 2}
        )

        data = response.json()
        assert data["total"] == 3
        assert data["total_pages"] == 2
        assert len(data["data"]) == 2


class TestAccounts:
    async def test_one_live_account_per_company(self, client, db_session, tenant):
        headers = auth_headers(tenant["admin"])

        response = await client.post(
            f"{PREFIX}/accounts",
            headers=headers,
            json={
                "company_id": str(tenant["company"].id),
                "subscription_id": str(tenant["subscription"].id),
            },
        )

        assert response.status_code == 409
        assert response.json()["detail"] == "Account already exists for this company"

    async def test_create_requires_existing_subscription(self, client, db_session, tenant):
        company = await make_company(db_session, name="Fresh")

        response = await client.post(
            f"{PREFIX}/accounts",
            headers=auth_headers(tenant["admin"]),
            json={
                "company_id": str(company.id),
                "subscription_id": "00000000-0000-0000-0000-000000000000",
            },
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Subscription not found"

    async def test_create_after_delete(self, client, tenant):
        headers = auth_headers(tenant["admin"])
        account_id = tenant["account"].id

        await client.delete(f"{PREFIX}/accounts/{account_id}", headers=headers)
        created = await client.post(
            f"{PREFIX}/accounts",
            headers=headers,
            json={
                "company_id": str(tenant["company"].id),
                "subscription_id": str(tenant["subscription"].id),
            },
        )
        assert created.status_code == 201

        restore = await client.post(f"{PREFIX}/accounts/{account_id}/restore", headers=headers)
        assert restore.status_code == 409

    async def test_reparenting_onto_company_with_account_conflicts(self, client, db_session, tenant):
        other = await make_company(db_session, name="Other")
        other_account = await make_account(db_session, other, tenant["subscription"])

        response = await client.patch(
            f"{PREFIX}/accounts/{other_account.id}",
            headers=auth_headers(tenant["admin"]),
            json={"company_id": str(tenant["company"].id)},
        )

        assert response.status_code == 409

    async def test_change_plan(self, client, db_session, tenant):
        pro = await make_subscription(db_session, name="Pro")

        response = await client.patch(
            f"{PREFIX}/accounts/{tenant['account'].id}",
            headers=auth_headers(tenant["admin"]),
            json={"subscription_id": str(pro.id)},
        )

        assert response.status_code == 200
        assert response.json()["subscription_id"] == str(pro.id)

    async def test_database_rejects_second_live_account(self, db_session, tenant):
        db_session.add(Account(
            company_id=tenant["company"].id,
            subscription_id=tenant["subscription"].id,
        ))

        with pytest.raises(IntegrityError):
            await db_session.flush()

    async def test_racing_create_is_conflict(self, client, db_session, tenant, monkeypatch):
        async def nobody_has_account(*args, **kwargs):
            return False

        # Both writers passed the pre-check; only the index stands in the way
        monkeypatch.setattr(accounts_endpoints, "_company_has_account", nobody_has_account)

        response = await client.post(
            f"{PREFIX}/accounts",
            headers=auth_headers(tenant["admin"]),
            json={
                "company_id": str(tenant["company"].id),
                "subscription_id": str(tenant["subscription"].id),
            },
        )

        assert response.status_code == 409
        assert response.json()["detail"] == "Account already exists for this company"


class TestSubscriptions:
    async def test_replace_settings(self, client, tenant):
        headers = auth_headers(tenant["admin"])
        subscription_id = tenant["subscription"].id

        response = await client.put(
            f"{PREFIX}/subscriptions/{subscription_id}/settings",
            headers=headers,
            json={"settings": [{"entity": "users", "create_limit_registry": 1}]},
        )
        assert response.status_code == 200

        limit = await client.get(f"{PREFIX}/auth/limits/users", headers=headers)
        assert limit.json() == {"entity": "users", "allowed": False, "limit": 1, "current": 1}

    async def test_duplicate_name_conflicts(self, client, tenant):
        response = await client.post(
            f"{PREFIX}/subscriptions",
            headers=auth_headers(tenant["admin"]),
            json={"name": "Basic"},
        )

        assert response.status_code == 409

    async def test_any_authenticated_user_can_read_catalog(self, client, db_session, tenant):
        user = await make_user(db_session, tenant["company"], email="reader@example.com")

        listing = await client.get(f"{PREFIX}/subscriptions", headers=auth_headers(user))
        create = await client.post(
            f"{PREFIX}/subscriptions", headers=auth_headers(user), json={"name": "Hacked"}
        )

        assert listing.status_code == 200
        assert listing.json()["total"] == 1
        assert create.status_code == 403


class TestUsers:
    async def test_admin_creates_user_in_own_company(self, client, tenant):
        response = await client.post(
            f"{PREFIX}/users",
            headers=auth_headers(tenant["admin"]),
            json={"email": "worker@example.com", "password": "password1", "name": "Worker"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["company_id"] == str(tenant["company"].id)
        assert data["role"] == "user"
        assert data["email_verified"] is False
        assert "password_hash" not in data

    async def test_create_hits_quota(self, client, db_session, tenant):
        for i in range(4):
            await make_user(db_session, tenant["company"], email=f"u{i}@example.com")

        response = await client.post(
            f"{PREFIX}/users",
            headers=auth_headers(tenant["admin"]),
            json={"email": "extra@example.com", "password": "password1", "name": "Extra"},
        )

        assert response.status_code == 403

    async def test_manager_cannot_create(self, client, db_session, tenant):
        manager = await make_user(db_session, tenant["company"], email="m@example.com", role="manager")

        response = await client.post(
            f"{PREFIX}/users",
            headers=auth_headers(manager),
            json={"email": "x@example.com", "password": "password1", "name": "X"},
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Insufficient role"

    async def test_user_lacks_read_permission(self, client, db_session, tenant):
        user = await make_user(db_session, tenant["company"], email="plain@example.com")

        response = await client.get(f"{PREFIX}/users", headers=auth_headers(user))

        assert response.status_code == 403
        assert response.json()["detail"] == "Insufficient permissions"

    async def test_listing_is_company_scoped(self, client, db_session, tenant):
        other = await make_company(db_session, name="Other")
        await make_user(db_session, other, email="stranger@example.com")

        response = await client.get(f"{PREFIX}/users", headers=auth_headers(tenant["admin"]))

        emails = [u["email"] for u in response.json()["data"]]
        assert emails == ["admin@example.com"]

    async def test_user_of_other_company_is_not_found(self, client, db_session, tenant):
        other = await make_company(db_session, name="Other")
        stranger = await make_user(db_session, other, email="stranger@example.com")

        response = await client.get(
            f"{PREFIX}/users/{stranger.id}", headers=auth_headers(tenant["admin"])
        )

        assert response.status_code == 404

    async def test_update_and_verify_email(self, client, db_session, tenant):
        headers = auth_headers(tenant["admin"])
        user = await make_user(db_session, tenant["company"], email="w@example.com")

        updated = await client.patch(
            f"{PREFIX}/users/{user.id}", headers=headers, json={"name": "Renamed", "role": "manager"}
        )
        assert updated.json()["name"] == "Renamed"
        assert updated.json()["role"] == "manager"

        conflict = await client.patch(
            f"{PREFIX}/users/{user.id}", headers=headers, json={"email": "admin@example.com"}
        )
        assert conflict.status_code == 409

        verified = await client.post(f"{PREFIX}/users/{user.id}/verify-email", headers=headers)
        assert verified.json()["email_verified"] is True

    async def test_delete_and_restore(self, client, db_session, tenant):
        headers = auth_headers(tenant["admin"])
        user = await make_user(db_session, tenant["company"], email="w@example.com")

        await client.delete(f"{PREFIX}/users/{user.id}", headers=headers)
        assert (await client.get(f"{PREFIX}/users/{user.id}", headers=headers)).status_code == 404

        deleted = await client.get(f"{PREFIX}/users/deleted", headers=headers)
        assert [u["id"] for u in deleted.json()] == [str(user.id)]

        restored = await client.post(f"{PREFIX}/users/{user.id}/restore", headers=headers)
        assert restored.status_code == 200
        assert (await client.get(f"{PREFIX}/users/{user.id}", headers=headers)).status_code == 200

    async def test_deleted_user_cannot_log_in(self, client, db_session, tenant):
        headers = auth_headers(tenant["admin"])
        user = await make_user(db_session, tenant["company"], email="w@example.com")
        await client.delete(f"{PREFIX}/users/{user.id}", headers=headers)

        response = await client.post(
            f"{PREFIX}/auth/login", json={"email": "w@example.com", "password": "secret123"}
        )

        assert response.status_code == 401
