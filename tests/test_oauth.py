import pytest

from appointment_system.core.exceptions import AccountDisabled, PendingApproval
from appointment_system.models import User
from appointment_system.schemas.auth import OAuthUserInfo
from appointment_system.services import oauth_service
from appointment_system.services.auth_service import AuthService
from appointment_system.services.role_service import RoleService
from tests.conftest import make_user


def google_user(email, name="Jane Doe"):
    return OAuthUserInfo(email=email, name=name, provider="google")


class TestLinkExternalIdentity:

    def test_username_derived_from_email_with_suffixes(self, seeded):
        make_user(seeded, "jane")
        make_user(seeded, "jane1")

        assert AuthService(seeded).derive_username("jane@example.com") == "jane2"
        assert AuthService(seeded).derive_username("fresh@example.com") == "fresh"

    def test_unknown_email_provisions_pending_account(self, seeded):
        with pytest.raises(PendingApproval):
            AuthService(seeded).link_external_identity(google_user("jane@example.com"))

        user = seeded.query(User).filter(User.email == "jane@example.com").one()
        assert user.username == "jane"
        assert user.full_name == "Jane Doe"
        assert user.is_approved is False
        assert RoleService(seeded).role_names_for_user(user.id) == ["Staff"]

    def test_known_approved_email_reuses_account(self, seeded):
        existing = make_user(seeded, "janedoe")
        existing.email = "jane@example.com"
        seeded.commit()

        user = AuthService(seeded).link_external_identity(google_user("jane@example.com"))
        assert user.id == existing.id
        assert seeded.query(User).count() == 3

    def test_known_unapproved_email_is_pending(self, seeded):
        existing = make_user(seeded, "waiting", approved=False)
        existing.email = "wait@example.com"
        seeded.commit()

        with pytest.raises(PendingApproval):
            AuthService(seeded).link_external_identity(google_user("wait@example.com"))

    def test_known_inactive_email_is_disabled(self, seeded):
        existing = make_user(seeded, "retired", active=False)
        existing.email = "retired@example.com"
        seeded.commit()

        with pytest.raises(AccountDisabled):
            AuthService(seeded).link_external_identity(google_user("retired@example.com"))


class TestGoogleFlow:

    def test_login_requires_configuration(self, client, monkeypatch):
        monkeypatch.setattr(oauth_service.settings, "GOOGLE_CLIENT_ID", None)

        response = client.get("/api/v1/auth/oauth/google/login")
        assert response.status_code == 400

    def test_login_stores_state(self, client, fake_redis, monkeypatch):
        monkeypatch.setattr(oauth_service.settings, "GOOGLE_CLIENT_ID", "client-id")

        response = client.get("/api/v1/auth/oauth/google/login")
        assert response.status_code == 200
        assert response.json()["auth_url"].startswith(oauth_service.GOOGLE_AUTH_URL)
        assert len(fake_redis.store) == 1

    def test_unsupported_provider(self, client):
        assert client.get("/api/v1/auth/oauth/github/login").status_code == 400

    def test_callback_rejects_unknown_state(self, client, seeded):
        response = client.post("/api/v1/auth/oauth/callback", json={"code": "abc", "state": "forged"})
        assert response.status_code == 400

    def test_callback_signs_in_linked_account(self, client, seeded, fake_redis, monkeypatch):
        existing = seeded.query(User).filter(User.username == "staff").one()
        existing.email = "staff@example.com"
        seeded.commit()

        async def fake_fetch(code):
            return google_user("staff@example.com", "Staff User")

        monkeypatch.setattr(oauth_service, "fetch_google_user", fake_fetch)
        fake_redis.setex("oauth_state:known", 600, "google")

        response = client.post("/api/v1/auth/oauth/callback", json={"code": "abc", "state": "known"})
        assert response.status_code == 200
        assert response.json()["username"] == "staff"
        assert response.json()["roles"] == ["Staff"]
        assert fake_redis.get("oauth_state:known") is None

    def test_page_callback_sends_new_accounts_to_pending(self, client, seeded, fake_redis, monkeypatch):
        async def fake_fetch(code):
            return google_user("brand.new@example.com", "Brand New")

        monkeypatch.setattr(oauth_service, "fetch_google_user", fake_fetch)
        fake_redis.setex("oauth_state:page", 600, "google")

        response = client.get(
            "/account/google-callback",
            params={"code": "abc", "state": "page"},
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/account/registration-pending"
