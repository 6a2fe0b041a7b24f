"""
Tests for bearer-token authentication and role gating.
"""
import jwt

from core.auth import create_access_token, decode_access_token


class TestAuthentication:
    """Test suite for token verification."""

    def test_missing_token_returns_401(self, client):
        response = client.get("/api/v1/lab-tests")
        assert response.status_code == 401
        assert response.json()["detail"] == "No token provided"

    def test_garbage_token_returns_401(self, client):
        response = client.get(
            "/api/v1/lab-tests",
            headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"

    def test_expired_token_returns_401(self, client, users):
        admin = users["admin"]
        token = create_access_token(admin["id"], "admin", expires_minutes=-5)
        response = client.get(
            "/api/v1/lab-tests",
            headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"

    def test_token_signed_with_other_secret_returns_401(self, client, users):
        token = jwt.encode(
            {"id": users["admin"]["id"], "role": "admin"},
            "some-other-secret-that-is-long-enough-123",
            algorithm="HS256",
        )
        response = client.get(
            "/api/v1/lab-tests",
            headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    def test_unknown_role_returns_403(self, client):
        token = create_access_token(999, "janitor")
        response = client.get(
            "/api/v1/lab-tests",
            headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 403
        assert "Access denied" in response.json()["detail"]

    def test_valid_token_allows_access(self, client, auth):
        response = client.get("/api/v1/lab-tests", headers=auth("doctor"))
        assert response.status_code == 200

    def test_operational_endpoints_need_no_token(self, client):
        assert client.get("/").status_code == 200
        assert client.get("/health").status_code == 200
        assert client.get("/metrics").status_code == 200


class TestRoleGating:
    """Routes admit only the roles listed in permissions.yaml."""

    def test_forbidden_role_gets_403_with_roles_listed(self, client, auth):
        response = client.get("/api/v1/lab/inventory", headers=auth("patient"))
        assert response.status_code == 403
        detail = response.json()["detail"]
        assert "Required role: admin or lab_technician" in detail
        assert "Your role: patient" in detail

    def test_allowed_role_passes(self, client, auth):
        response = client.get("/api/v1/lab/inventory", headers=auth("lab_technician"))
        assert response.status_code == 200

    def test_admin_only_route_rejects_doctor(self, client, auth):
        response = client.get("/api/v1/users", headers=auth("doctor"))
        assert response.status_code == 403

    def test_self_access_admits_own_id(self, client, auth, users):
        patient_id = users["patient"]["id"]
        response = client.get(f"/api/v1/users/{patient_id}", headers=auth("patient"))
        assert response.status_code == 200
        assert response.json()["user"]["id"] == patient_id

    def test_self_access_rejects_other_id(self, client, auth, users):
        response = client.get(f"/api/v1/users/{users['admin']['id']}", headers=auth("patient"))
        assert response.status_code == 403


class TestTokenHelpers:

    def test_round_trip_keeps_identity(self):
        token = create_access_token(7, "pharmacist", name="Nimal")
        user = decode_access_token(token)
        assert user.id == 7
        assert user.role == "pharmacist"
        assert user.name == "Nimal"
