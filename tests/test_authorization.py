from appointment_system.core.config import settings
from appointment_system.core.security import Identity, create_session_value
from tests.conftest import browser_login, login


class TestApiGate:

    def test_anonymous_api_call_gets_401_json(self, client, seeded):
        response = client.get("/api/v1/appointments")
        assert response.status_code == 401
        assert response.json()["message"] == "Unauthorized"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_missing_role_gets_403_json(self, client, staff_headers):
        response = client.get("/api/v1/users", headers=staff_headers)
        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden"

    def test_staff_reads_but_cannot_write_staff_records(self, client, staff_headers):
        assert client.get("/api/v1/staff", headers=staff_headers).status_code == 200

        response = client.post("/api/v1/staff", json={"full_name": "X"}, headers=staff_headers)
        assert response.status_code == 403

    def test_admin_passes_role_gate(self, client, admin_headers):
        assert client.get("/api/v1/users", headers=admin_headers).status_code == 200

    def test_tampered_token_is_anonymous(self, client, admin_headers):
        headers = {"Authorization": admin_headers["Authorization"] + "x"}
        assert client.get("/api/v1/dashboard", headers=headers).status_code == 401

    def test_claims_are_not_reloaded_per_request(self, client, seeded, admin_headers):
        # Role changes take effect at the next login, not mid-session
        client.delete("/api/v1/roles/1", headers=admin_headers)
        assert client.get("/api/v1/users", headers=admin_headers).status_code == 200


class TestBrowserGate:

    def test_anonymous_page_redirects_to_login(self, client, seeded):
        response = client.get("/dashboard", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == f"{settings.LOGIN_PATH}?return_url=%2Fdashboard"

    def test_missing_role_redirects_to_access_denied(self, client, seeded):
        browser_login(client, "staff", "staff123")

        response = client.get("/users", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == settings.ACCESS_DENIED_PATH

    def test_cookie_session_reaches_page_with_menus(self, client, seeded):
        browser_login(client, "admin", "admin123")

        response = client.get("/dashboard")
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["username"] == "admin"
        assert [menu["name"] for menu in data["menus"]] == [
            "Dashboard", "Appointments", "Staff", "Users", "Roles", "Menus"
        ]

    def test_forged_cookie_is_ignored(self, client, seeded):
        cookie = {"Cookie": f"{settings.SESSION_COOKIE_NAME}=not-a-signed-value"}

        response = client.get("/appointments", headers=cookie, follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"].startswith(settings.LOGIN_PATH)

    def test_cookie_works_for_api_calls(self, client, seeded):
        identity = Identity(user_id=1, username="admin", full_name="Administrator", roles=["Admin"])
        cookie = {"Cookie": f"{settings.SESSION_COOKIE_NAME}={create_session_value(identity)}"}

        assert client.get("/api/v1/roles", headers=cookie).status_code == 200

    def test_bearer_takes_precedence_over_cookie(self, client, seeded):
        staff = login(client, "staff", "staff123")
        browser_login(client, "admin", "admin123")

        response = client.get("/api/v1/users", headers=staff)
        assert response.status_code == 403

    def test_public_pages_need_no_login(self, client, seeded):
        response = client.get("/account/login?return_url=/appointments")
        assert response.status_code == 200
        assert response.json()["return_url"] == "/appointments"
        assert response.json()["menus"] == []

        assert client.get("/account/access-denied").status_code == 200
