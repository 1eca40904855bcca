"""
Identity resolution, registration and self-service account endpoints.
"""

import pytest
from jose import jwt

from unistudious_backend.permissions.auth import create_access_token, decode_access_token
from unistudious_backend.api.exceptions import UnauthorizedException
from unistudious_backend.interface.tokens import encrypt_secret, verify_password
from unistudious_backend.services.provisioning import ProvisioningError, init_admin_user
from unistudious_backend.tests.fixtures import DEFAULT_PASSWORD, auth_headers, data, error


def register_payload(**kwargs):
    payload = {
        "given_name": "Amira",
        "family_name": "Ben Salah",
        "email": "amira@unistudious.org",
        "password": "secret123",
        "school_level": "1st year",
    }
    payload.update(kwargs)
    return payload


class TestTokens:

    def test_round_trip(self):
        payload = decode_access_token(create_access_token("user-1", "student"))
        assert payload["sub"] == "user-1"
        assert payload["role"] == "student"

    def test_expired_token_rejected(self):
        token = create_access_token("user-1", "student", expires_minutes=-1)
        with pytest.raises(UnauthorizedException):
            decode_access_token(token)

    def test_foreign_signature_rejected(self):
        token = jwt.encode({"sub": "user-1", "role": "admin"}, "another-key", algorithm="HS256")
        with pytest.raises(UnauthorizedException):
            decode_access_token(token)


class TestPasswords:

    def test_verify_password(self):
        stored = encrypt_secret("secret123")
        assert verify_password("secret123", stored)
        assert not verify_password("secret124", stored)
        assert not verify_password("sécret123", stored)

    def test_unreadable_secret_rejected(self):
        assert not verify_password("secret123", "not-a-fernet-token")
        assert not verify_password("secret123", "")


class TestIdentityResolution:

    def test_missing_credentials(self, client):
        response = client.get("/api/courses")
        assert response.status_code == 401
        assert error(response)["message"] == "No authorization provided"

    def test_malformed_header(self, client):
        response = client.get("/api/courses", headers={"Authorization": "Token abc"})
        assert response.status_code == 401

    def test_unknown_subject(self, client):
        headers = {"Authorization": f"Bearer {create_access_token('missing-user', 'admin')}"}
        assert client.get("/api/users/me", headers=headers).status_code == 401

    def test_role_is_read_from_database(self, client, student):
        # a token claiming admin does not grant admin rights
        headers = {"Authorization": f"Bearer {create_access_token(student.id, 'admin')}"}
        response = client.get("/api/users", headers=headers)
        assert response.status_code == 403

    def test_cookie_authentication(self, client, student):
        response = client.post("/api/users/login", json={"email": student.email, "password": DEFAULT_PASSWORD})
        assert response.status_code == 200
        assert response.cookies.get("token")

        me = client.get("/api/users/me")
        assert me.status_code == 200
        assert data(me)["id"] == student.id


class TestRegistration:

    def test_student_registration(self, client):
        response = client.post("/api/users/register", json=register_payload())

        assert response.status_code == 201
        payload = data(response)
        assert payload["token"]
        assert payload["user"]["role"] == "student"
        assert payload["user"]["username"] == "amira.bensalah"
        assert payload["user"]["section"] is None
        assert "password" not in payload["user"]

    def test_role_cannot_be_chosen(self, client):
        response = client.post("/api/users/register", json=register_payload(role="admin"))
        assert response.status_code == 201
        assert data(response)["user"]["role"] == "student"

    def test_first_year_with_section_rejected(self, client):
        response = client.post("/api/users/register", json=register_payload(section="Science"))

        assert response.status_code == 400
        err = error(response)
        assert "section must be empty" in err["message"]
        assert err["details"]

    def test_duplicate_email_rejected(self, client, student):
        response = client.post("/api/users/register", json=register_payload(email=student.email))
        assert response.status_code == 400
        assert error(response)["message"] == "Email already registered"

    def test_username_collision_gets_suffix(self, client):
        client.post("/api/users/register", json=register_payload())
        response = client.post("/api/users/register", json=register_payload(email="other@unistudious.org"))
        assert data(response)["user"]["username"] == "amira.bensalah2"


class TestLogin:

    def test_wrong_password(self, client, student):
        response = client.post("/api/users/login", json={"email": student.email, "password": "wrong-password"})
        assert response.status_code == 401
        assert error(response)["message"] == "Invalid credentials"

    def test_unknown_email(self, client):
        response = client.post("/api/users/login", json={"email": "nobody@unistudious.org", "password": "whatever"})
        assert response.status_code == 401

    def test_logout_clears_cookie(self, client, student):
        client.post("/api/users/login", json={"email": student.email, "password": DEFAULT_PASSWORD})
        response = client.post("/api/users/logout")
        assert response.status_code == 200

        client.cookies.clear()
        assert client.get("/api/users/me").status_code == 401


class TestSelfService:

    def test_profile_update(self, client, student):
        response = client.put("/api/users/profile", headers=auth_headers(student),
                              json={"school_level": "2nd year", "bio": "Hello"})

        assert response.status_code == 200
        payload = data(response)
        assert payload["school_level"] == "2nd year"
        assert payload["section"] == "Science"
        assert payload["bio"] == "Hello"

    def test_profile_update_keeps_academic_invariant(self, client, student):
        response = client.put("/api/users/profile", headers=auth_headers(student), json={"section": "Science"})
        assert response.status_code == 400

    def test_profile_cannot_change_role(self, client, student):
        response = client.put("/api/users/profile", headers=auth_headers(student), json={"role": "admin"})
        assert response.status_code == 200
        assert data(response)["role"] == "student"

    def test_password_change(self, client, student):
        headers = auth_headers(student)

        wrong = client.put("/api/users/security", headers=headers,
                           json={"current_password": "nope", "new_password": "newsecret"})
        assert wrong.status_code == 400

        ok = client.put("/api/users/security", headers=headers,
                        json={"current_password": DEFAULT_PASSWORD, "new_password": "newsecret"})
        assert ok.status_code == 200

        login = client.post("/api/users/login", json={"email": student.email, "password": "newsecret"})
        assert login.status_code == 200


class TestAdministratorProvisioning:

    def test_seeded_admin_logs_in_and_reads_everything(self, client, session, professor, student, make_course):
        course = make_course(professor, [student])

        admin = init_admin_user(session, email="head@unistudious.org", password="admin-secret")
        assert admin.role == "admin"

        login = client.post("/api/users/login", json={"email": "head@unistudious.org", "password": "admin-secret"})
        assert login.status_code == 200
        headers = {"Authorization": f"Bearer {data(login)['token']}"}

        courses = client.get("/api/courses", headers=headers)
        assert [c["id"] for c in data(courses)] == [course.id]
        assert client.get(f"/api/courses/{course.id}", headers=headers).status_code == 200
        assert len(data(client.get("/api/users", headers=headers))) == 3

    def test_provisioning_is_idempotent(self, session):
        first = init_admin_user(session, email="head@unistudious.org", password="admin-secret")
        second = init_admin_user(session, email="head@unistudious.org", password="other-secret")
        assert first.id == second.id

    def test_existing_account_is_promoted(self, session, professor):
        promoted = init_admin_user(session, email=professor.email, password="ignored")
        assert promoted.id == professor.id
        assert promoted.role == "admin"
        assert promoted.speciality is None

    def test_missing_credentials_refused(self, session, monkeypatch):
        from unistudious_backend.settings import settings
        monkeypatch.setattr(settings, "ADMIN_PASSWORD", None)
        with pytest.raises(ProvisioningError):
            init_admin_user(session, email="head@unistudious.org")


class TestEnvelope:

    def test_not_found_envelope(self, client, admin):
        response = client.get("/api/courses/does-not-exist", headers=auth_headers(admin))
        assert response.status_code == 404
        err = error(response)
        assert "not found" in err["message"]

    def test_forbidden_envelope(self, client, student):
        response = client.get("/api/users", headers=auth_headers(student))
        assert response.status_code == 403
        err = error(response)
        assert err["message"] == "Forbidden"
        assert err["details"]["entity"] == "user"

    def test_status_head(self, client):
        assert client.head("/").status_code == 204
