"""
Tests for the YAML permission registry and the public meta endpoints.
"""
import pytest

from core.permission_registry import (
    AUTHENTICATED,
    _parse_permission,
    get_permission,
    is_allowed,
    list_permissions,
    list_roles,
)
from models.user import Role


class TestRegistry:

    def test_roles_match_role_enum(self):
        assert set(list_roles()) == {role.value for role in Role}

    def test_permissions_are_sorted(self):
        names = [p.name for p in list_permissions()]
        assert names == sorted(names)
        assert "lab_inventory.manage" in names

    def test_role_list_permission(self):
        permission = get_permission("lab_inventory.manage")
        assert permission.roles == ("admin", "lab_technician")
        assert permission.any_authenticated is False

    def test_authenticated_admits_every_role(self):
        permission = get_permission("notifications.read")
        assert permission.any_authenticated is True
        for role in Role:
            assert permission.allows(role.value)

    @pytest.mark.parametrize("permission,role,expected", [
        ("lab_tests.create", "doctor", True),
        ("lab_tests.create", "patient", False),
        ("leaves.request", "admin", False),
        ("leaves.review", "admin", True),
        ("prescriptions.dispense", "pharmacist", True),
        ("prescriptions.dispense", "doctor", False),
        ("appointments.book", "patient", True),
    ])
    def test_is_allowed(self, permission, role, expected):
        assert is_allowed(permission, role) is expected

    def test_unknown_permission_raises(self):
        with pytest.raises(KeyError):
            get_permission("reports.read")


class TestParsing:
    ROLES = ("admin", "doctor")

    def test_authenticated_keyword(self):
        parsed = _parse_permission("x.read", AUTHENTICATED, self.ROLES)
        assert parsed.any_authenticated is True
        assert parsed.roles == self.ROLES

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError, match="unknown roles"):
            _parse_permission("x.write", ["admin", "janitor"], self.ROLES)

    @pytest.mark.parametrize("raw", [[], "everyone", None])
    def test_malformed_entry_rejected(self, raw):
        with pytest.raises(ValueError):
            _parse_permission("x.write", raw, self.ROLES)


class TestMetaEndpoints:

    def test_list_is_public(self, client):
        response = client.get("/api/v1/meta/permissions")
        assert response.status_code == 200
        body = response.json()
        assert "lab_technician" in body["roles"]
        by_name = {p["name"]: p for p in body["permissions"]}
        assert by_name["leaves.review"]["roles"] == ["admin"]

    def test_single_permission(self, client):
        response = client.get("/api/v1/meta/permissions/doctors.schedule")
        assert response.status_code == 200
        assert response.json() == {
            "name": "doctors.schedule",
            "roles": ["admin", "doctor"],
            "any_authenticated": False,
        }

    def test_unknown_permission_returns_404(self, client):
        assert client.get("/api/v1/meta/permissions/reports.read").status_code == 404
