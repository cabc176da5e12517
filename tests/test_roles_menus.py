import pytest
from sqlalchemy.exc import IntegrityError

from appointment_system.core.exceptions import DuplicateValue
from appointment_system.models import MenuLink, Role, RoleLink
from appointment_system.schemas.role import RoleCreate
from appointment_system.services.role_service import RoleService
from tests.conftest import ids_by_name, make_user


class TestRoles:

    def test_duplicate_role_name_rejected(self, client, admin_headers):
        assert client.post("/api/v1/roles", json={"name": "Reception"}, headers=admin_headers).status_code == 201

        response = client.post("/api/v1/roles", json={"name": "Reception"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["errors"] == {"name": "A role with this name already exists."}

    def test_unique_constraint_on_role_name(self, db):
        db.add(Role(name="Auditor"))
        db.commit()

        db.add(Role(name="Auditor"))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_unique_constraint_on_role_link(self, seeded):
        roles = ids_by_name(seeded, Role)
        user = make_user(seeded, "linked", roles=["Staff"])

        seeded.add(RoleLink(user_id=user.id, role_id=roles["Staff"]))
        with pytest.raises(IntegrityError):
            seeded.commit()
        seeded.rollback()

    def test_rename_to_existing_name_rejected(self, seeded):
        roles = ids_by_name(seeded, Role)

        with pytest.raises(DuplicateValue):
            RoleService(seeded).update_role(roles["Staff"], RoleCreate(name="Admin"))

    def test_delete_role_removes_links(self, client, seeded, admin_headers):
        roles = ids_by_name(seeded, Role)
        user = make_user(seeded, "orphan", roles=["Staff"])

        assert client.delete(f"/api/v1/roles/{roles['Staff']}", headers=admin_headers).status_code == 204
        assert seeded.query(RoleLink).filter(RoleLink.user_id == user.id).count() == 0

    def test_role_list_counts_users(self, client, admin_headers):
        roles = {role["name"]: role for role in client.get("/api/v1/roles", headers=admin_headers).json()}
        assert roles["Admin"]["user_count"] == 1
        assert roles["Staff"]["user_count"] == 1

    def test_update_role(self, client, seeded, admin_headers):
        roles = ids_by_name(seeded, Role)

        response = client.put(
            f"/api/v1/roles/{roles['Staff']}",
            json={"id": roles["Staff"], "name": "Front Desk", "description": "Reception staff"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Front Desk"


class TestMenus:

    def test_menu_crud(self, client, admin_headers):
        created = client.post(
            "/api/v1/menus",
            json={"name": "Reports", "url": "/reports", "display_order": 7},
            headers=admin_headers,
        )
        assert created.status_code == 201
        menu_id = created.json()["id"]
        assert created.headers["location"].endswith(f"/api/v1/menus/{menu_id}")

        updated = client.put(
            f"/api/v1/menus/{menu_id}",
            json={"name": "Reports", "url": "/reports", "display_order": 0, "is_active": False},
            headers=admin_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["is_active"] is False

        listed = client.get("/api/v1/menus", headers=admin_headers).json()
        assert listed[0]["name"] == "Reports"

        assert client.delete(f"/api/v1/menus/{menu_id}", headers=admin_headers).status_code == 204
        assert client.get(f"/api/v1/menus/{menu_id}", headers=admin_headers).status_code == 404

    def test_delete_menu_removes_links(self, client, seeded, admin_headers):
        dashboard_id = client.get("/api/v1/menus", headers=admin_headers).json()[0]["id"]

        assert client.delete(f"/api/v1/menus/{dashboard_id}", headers=admin_headers).status_code == 204
        assert seeded.query(MenuLink).filter(MenuLink.menu_id == dashboard_id).count() == 0

    def test_menu_admin_needs_admin_role(self, client, staff_headers):
        assert client.get("/api/v1/menus", headers=staff_headers).status_code == 403
        assert client.get("/api/v1/menus/mine", headers=staff_headers).status_code == 200
