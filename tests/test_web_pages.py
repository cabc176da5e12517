import time

from itsdangerous import TimestampSigner

from appointment_system.core.config import settings
from appointment_system.core.security import Identity, create_session_value
from appointment_system.models import Menu, Role, RoleLink, Staff, User
from appointment_system.services.user_service import UserService
from tests.conftest import browser_login, ids_by_name, make_staff, make_user, reload_user


class TestAccountPages:

    def test_login_form_redirects_to_return_url(self, client, seeded):
        response = client.post(
            "/account/login",
            data={"username": "staff", "password": "staff123", "return_url": "/appointments"},
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/appointments"
        assert settings.SESSION_COOKIE_NAME in response.cookies

    def test_login_form_ignores_foreign_return_url(self, client, seeded):
        response = client.post(
            "/account/login",
            data={"username": "staff", "password": "staff123", "return_url": "https://evil.example/"},
            follow_redirects=False,
        )
        assert response.headers["location"] == "/dashboard"

    def test_login_form_bad_password(self, client, seeded):
        response = client.post("/account/login", data={"username": "staff", "password": "wrong"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid username or password."

    def test_register_form_goes_to_pending_page(self, client, seeded):
        response = client.post(
            "/account/register",
            data={
                "full_name": "Form User",
                "username": "formuser",
                "password": "secret1",
                "confirm_password": "secret1",
            },
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/account/registration-pending"

    def test_register_form_mismatch_reports_field(self, client, seeded):
        response = client.post(
            "/account/register",
            data={
                "full_name": "Form User",
                "username": "formuser",
                "password": "secret1",
                "confirm_password": "secret2",
            },
        )
        assert response.status_code == 400
        assert response.json()["errors"]["confirm_password"].endswith("Passwords do not match")

    def test_password_whitespace_is_kept_for_form_and_api_login(self, client, seeded):
        response = client.post(
            "/account/register",
            data={
                "full_name": "Spaced Out",
                "username": "spaced",
                "password": " secret1 ",
                "confirm_password": " secret1 ",
            },
            follow_redirects=False,
        )
        assert response.status_code == 303
        user = seeded.query(User).filter(User.username == "spaced").one()
        UserService(seeded).approve_user(user.id)

        response = client.post(
            "/account/login",
            data={"username": "spaced", "password": " secret1 "},
            follow_redirects=False,
        )
        assert response.status_code == 303
        client.cookies.clear()

        response = client.post("/api/v1/auth/login", json={"username": "spaced", "password": " secret1 "})
        assert response.status_code == 200
        assert client.post("/api/v1/auth/login", json={"username": "spaced", "password": "secret1"}).status_code == 401

    def test_logout_form(self, client, seeded):
        browser_login(client, "staff", "staff123")

        response = client.post("/account/logout", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == settings.LOGIN_PATH
        assert "Max-Age=0" in response.headers["set-cookie"]


class TestEntityPages:

    def test_user_edit_page_lists_checkboxes(self, client, seeded):
        user = make_user(seeded, "boxes", roles=["Staff"])
        browser_login(client, "admin", "admin123")

        data = client.get(f"/users/{user.id}/edit").json()
        assert data["account"]["username"] == "boxes"
        assert [option["name"] for option in data["role_options"] if option["selected"]] == ["Staff"]
        assert len(data["menu_options"]) == 6

    def test_user_edit_form_replaces_assignments(self, client, seeded):
        roles = ids_by_name(seeded, Role)
        menus = ids_by_name(seeded, Menu)
        user = make_user(seeded, "formedit", roles=["Staff"])
        browser_login(client, "admin", "admin123")

        response = client.post(
            f"/users/{user.id}/edit",
            data={
                "full_name": "Form Edit",
                "username": "formedit",
                "is_active": "on",
                "role_ids": [str(roles["Admin"])],
                "menu_ids": [str(menus["Dashboard"]), str(menus["Users"])],
            },
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/users"

        links = seeded.query(RoleLink).filter(RoleLink.user_id == user.id).all()
        assert [link.role_id for link in links] == [roles["Admin"]]

    def test_delete_confirmation_does_not_delete(self, client, seeded):
        user = make_user(seeded, "confirm_me")
        browser_login(client, "admin", "admin123")

        assert client.get(f"/users/{user.id}/delete").status_code == 200
        assert reload_user(seeded, user.id) is not None

        response = client.post(f"/users/{user.id}/delete", follow_redirects=False)
        assert response.status_code == 303
        assert reload_user(seeded, user.id) is None

    def test_approve_from_user_list(self, client, seeded):
        user = make_user(seeded, "queued", approved=False)
        browser_login(client, "admin", "admin123")

        assert client.get("/users").json()["pending_count"] == 1
        client.post(f"/users/{user.id}/approve", follow_redirects=False)
        assert reload_user(seeded, user.id).is_approved is True

    def test_unchecked_active_box_deactivates_staff(self, client, seeded):
        staff = make_staff(seeded, "Checkbox Person")
        browser_login(client, "admin", "admin123")

        response = client.post(
            f"/staffs/{staff.id}/edit",
            data={"full_name": "Checkbox Person", "specialty": ""},
            follow_redirects=False,
        )
        assert response.status_code == 303
        seeded.expire_all()
        assert seeded.query(Staff).filter(Staff.id == staff.id).one().is_active is False

    def test_edit_form_with_other_id_is_rejected(self, client, seeded):
        staff = make_staff(seeded, "Fixed Id")
        other = make_staff(seeded, "Other Id")
        browser_login(client, "admin", "admin123")

        response = client.post(
            f"/staffs/{staff.id}/edit",
            data={"id": str(other.id), "full_name": "Renamed", "is_active": "on"},
            follow_redirects=False,
        )
        assert response.status_code == 400
        assert "id" in response.json()["errors"]
        seeded.expire_all()
        assert seeded.query(Staff).filter(Staff.id == other.id).one().full_name == "Other Id"

        role = seeded.query(Role).filter(Role.name == "Staff").one()
        response = client.post(f"/roles/{role.id}/edit", data={"id": str(role.id + 100), "name": "Staff"})
        assert response.status_code == 400

    def test_staff_pages_read_only_for_staff_role(self, client, seeded):
        staff = make_staff(seeded)
        browser_login(client, "staff", "staff123")

        assert client.get("/staffs").status_code == 200
        assert client.get(f"/staffs/{staff.id}").status_code == 200
        response = client.get(f"/staffs/{staff.id}/edit", follow_redirects=False)
        assert response.headers["location"] == settings.ACCESS_DENIED_PATH

    def test_appointment_form_round_trip(self, client, seeded):
        staff = make_staff(seeded, "Form Staff")
        browser_login(client, "staff", "staff123")

        options = client.get("/appointments/create").json()
        assert [member["full_name"] for member in options["staff"]] == ["Form Staff"]
        assert "Scheduled" in options["statuses"]

        response = client.post(
            "/appointments/create",
            data={
                "staff_id": str(staff.id),
                "client_name": "Walk In",
                "client_phone": "555 0199",
                "start_time": "2030-01-02T09:30:00",
                "duration_minutes": "45",
                "status": "Scheduled",
            },
            follow_redirects=False,
        )
        assert response.status_code == 303

        listed = client.get("/appointments").json()
        assert listed["appointments"][0]["client_name"] == "Walk In"
        assert [menu["name"] for menu in listed["menus"]] == ["Appointments"]

    def test_menu_and_role_pages(self, client, seeded):
        browser_login(client, "admin", "admin123")

        assert len(client.get("/menus").json()["items"]) == 6
        response = client.post(
            "/roles/create",
            data={"name": "Reception", "is_active": "on"},
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert "Reception" in [role["name"] for role in client.get("/roles").json()["roles"]]

        duplicate = client.post("/roles/create", data={"name": "Reception", "is_active": "on"})
        assert duplicate.status_code == 400


class TestSlidingSession:

    def _old_cookie(self, monkeypatch, minutes_ago):
        identity = Identity(user_id=1, username="admin", full_name="Administrator", roles=["Admin"])
        signed_at = int(time.time()) - minutes_ago * 60
        with monkeypatch.context() as patch:
            patch.setattr(TimestampSigner, "get_timestamp", lambda self: signed_at)
            return create_session_value(identity)

    def test_cookie_reissued_after_half_its_lifetime(self, client, seeded, monkeypatch):
        cookie = self._old_cookie(monkeypatch, settings.SESSION_EXPIRE_MINUTES // 2 + 5)

        response = client.get("/dashboard", headers={"Cookie": f"{settings.SESSION_COOKIE_NAME}={cookie}"})
        assert response.status_code == 200
        assert response.headers["set-cookie"].startswith(f"{settings.SESSION_COOKIE_NAME}=")

    def test_fresh_cookie_not_reissued(self, client, seeded, monkeypatch):
        cookie = self._old_cookie(monkeypatch, 1)

        response = client.get("/dashboard", headers={"Cookie": f"{settings.SESSION_COOKIE_NAME}={cookie}"})
        assert response.status_code == 200
        assert "set-cookie" not in response.headers

    def test_expired_cookie_is_anonymous(self, client, seeded, monkeypatch):
        cookie = self._old_cookie(monkeypatch, settings.SESSION_EXPIRE_MINUTES + 1)

        response = client.get(
            "/dashboard",
            headers={"Cookie": f"{settings.SESSION_COOKIE_NAME}={cookie}"},
            follow_redirects=False,
        )
        assert response.status_code == 303
