from datetime import timedelta

from app.core.security import create_access_token, decode_access_token, verify_password
from app.models.user import User, UserRole
from app.services.auth import AuthService
from tests.conftest import auth_headers


class TestRegister:

    def test_register_returns_public_profile(self, client, session):
        response = client.post("/api/v1/auth/register", json={
            "email": "carol@example.com",
            "password": "SecurePassword123!",
            "firstName": "Carol",
            "lastName": "Dupont",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "carol@example.com"
        assert body["name"] == "Carol Dupont"
        assert body["role"] == "USER"
        assert "passwordHash" not in body
        stored = session.get(User, body["id"])
        assert verify_password("SecurePassword123!", stored.password_hash)

    def test_duplicate_email_is_rejected(self, client, alice):
        response = client.post("/api/v1/auth/register", json={
            "email": "ALICE@example.com",
            "password": "SecurePassword123!",
        })

        assert response.status_code == 400
        assert response.json()["errorCode"] == "EMAIL_TAKEN"

    def test_email_with_underscore_is_not_taken_by_a_lookalike(self, client, make_user):
        make_user("johnxdoe@example.com")

        response = client.post("/api/v1/auth/register", json={
            "email": "john_doe@example.com",
            "password": "SecurePassword123!",
        })

        assert response.status_code == 201
        assert response.json()["email"] == "john_doe@example.com"

    def test_concurrent_duplicate_is_reported_as_taken(self, client, alice, monkeypatch):
        # The pre-check misses the row another request has just committed
        monkeypatch.setattr(AuthService, "get_user_by_email", lambda self, email: None)

        response = client.post("/api/v1/auth/register", json={
            "email": "alice@example.com",
            "password": "SecurePassword123!",
        })

        assert response.status_code == 400
        assert response.json()["errorCode"] == "EMAIL_TAKEN"

    def test_short_password_is_rejected(self, client):
        response = client.post("/api/v1/auth/register", json={"email": "dan@example.com", "password": "short"})

        assert response.status_code == 400


class TestLogin:

    def test_login_issues_token_for_user(self, client, alice):
        response = client.post("/api/v1/auth/token", data={
            "username": "alice@example.com",
            "password": "Password123!",
        })

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        claims = decode_access_token(body["access_token"])
        assert claims["sub"] == alice.id
        assert claims["role"] == "USER"

    def test_issued_token_opens_own_cart(self, client, alice):
        token = client.post("/api/v1/auth/token", data={
            "username": "alice@example.com",
            "password": "Password123!",
        }).json()["access_token"]

        response = client.get(f"/api/v1/cart/{alice.id}", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200

    def test_wrong_password(self, client, alice):
        response = client.post("/api/v1/auth/token", data={
            "username": "alice@example.com",
            "password": "wrong",
        })

        assert response.status_code == 401
        assert response.json()["message"] == "Incorrect password. Please try again."

    def test_unknown_user(self, client):
        response = client.post("/api/v1/auth/token", data={"username": "nobody@example.com", "password": "x"})

        assert response.status_code == 401

    def test_oauth_account_cannot_use_password_login(self, client, session):
        AuthService(session).sign_in_with_provider("google", "gina@example.com", "Gina Rossi")

        response = client.post("/api/v1/auth/token", data={"username": "gina@example.com", "password": "anything"})

        assert response.status_code == 401


class TestSessionResolution:

    def test_expired_token_is_anonymous(self, client, alice):
        token = create_access_token({"sub": alice.id, "role": "USER"}, expires_delta=timedelta(minutes=-1))

        response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_token_for_deleted_user_is_anonymous(self, client):
        token = create_access_token({"sub": "missing-user", "role": "ADMIN"})

        response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_deactivated_user_is_anonymous(self, client, session, alice):
        headers = auth_headers(alice)
        alice.is_active = False
        session.add(alice)
        session.commit()

        assert client.get(f"/api/v1/cart/{alice.id}", headers=headers).status_code == 401

    def test_role_comes_from_the_store_not_the_token(self, client, session, alice, bob):
        forged = create_access_token({"sub": bob.id, "role": "ADMIN"})

        response = client.get(f"/api/v1/cart/{alice.id}", headers={"Authorization": f"Bearer {forged}"})

        assert response.status_code == 403


class TestOAuthProvisioning:

    def test_creates_passwordless_user(self, session):
        user = AuthService(session).sign_in_with_provider("google", "gina@example.com", "Gina Rossi")

        assert user.id
        assert user.password_hash is None
        assert user.auth_provider == "google"
        assert user.role == UserRole.USER
        assert user.name == "Gina Rossi"

    def test_reuses_existing_account(self, session, alice):
        user = AuthService(session).sign_in_with_provider("google", "alice@example.com", "Alice A")

        assert user.id == alice.id
        assert user.auth_provider == "credentials"

    def test_wildcard_characters_do_not_match_other_accounts(self, session, make_user):
        victim = make_user("johnxdoe@example.com")
        service = AuthService(session)

        user = service.sign_in_with_provider("google", "john_doe@example.com")
        other = service.sign_in_with_provider("google", "%@example.com")

        assert user.id != victim.id
        assert user.email == "john_doe@example.com"
        assert other.id not in (victim.id, user.id)

    def test_lookup_ignores_case(self, session, alice):
        assert AuthService(session).get_user_by_email("Alice@Example.COM").id == alice.id

    def test_token_for_provisioned_user_is_accepted(self, client, session):
        service = AuthService(session)
        user = service.sign_in_with_provider("google", "gina@example.com")
        token = service.create_access_token(user)

        response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["email"] == "gina@example.com"
