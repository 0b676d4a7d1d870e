from datetime import timedelta

import pytest
from jose import jwt

from clinic.core.config import settings
from clinic.core.security import (
    GateOutcome, Profile, UserRole, create_access_token, create_token_pair, evaluate_gate
)

from .conftest import auth_headers, sign_in, DEMO_CREDENTIALS

# One protected endpoint per dashboard
VIEWS = {
    UserRole.ADMIN: "/api/v1/admin/appointments",
    UserRole.DOCTOR: "/api/v1/doctor/appointments",
    UserRole.PATIENT: "/api/v1/patient/appointments",
}

def make_profile(role):
    return Profile(id=1, email=f"{role.value}@demo.test", role=role, full_name="Someone")

class TestEvaluateGate:

    @pytest.mark.parametrize("allowed", [
        [UserRole.ADMIN], [UserRole.DOCTOR], [UserRole.PATIENT],
        [UserRole.ADMIN, UserRole.DOCTOR], [UserRole.DOCTOR, UserRole.PATIENT],
        [UserRole.ADMIN, UserRole.PATIENT], [],
    ])
    def test_roles_outside_allowed_set_are_denied(self, allowed):
        for role in UserRole:
            outcome = evaluate_gate(make_profile(role), allowed)
            if role in allowed:
                assert outcome == GateOutcome.GRANTED
            else:
                assert outcome == GateOutcome.ACCESS_DENIED

    @pytest.mark.parametrize("allowed", [[], [UserRole.ADMIN], list(UserRole)])
    def test_absent_profile_asks_for_sign_in(self, allowed):
        assert evaluate_gate(None, allowed) == GateOutcome.SIGN_IN

class TestGateOverHttp:

    @pytest.mark.parametrize("view_role", list(UserRole))
    @pytest.mark.parametrize("caller_role", list(UserRole))
    def test_dashboards_open_only_to_their_role(self, client, test_db, view_role, caller_role):
        headers = auth_headers(client, caller_role.value)
        response = client.get(VIEWS[view_role], headers=headers)

        if caller_role == view_role:
            assert response.status_code == 200
        else:
            assert response.status_code == 403
            assert response.json()["detail"] == f"Access denied. Your role: {caller_role.value}"

    @pytest.mark.parametrize("view", list(VIEWS.values()) + ["/api/v1/dashboard", "/api/v1/auth/me"])
    @pytest.mark.parametrize("header", [
        None,
        "Bearer",
        "Bearer not-a-jwt",
        "Bearer a.b.c",
        "Basic YWRtaW46YWRtaW4xMjM=",
        "Token abc",
    ])
    def test_absent_or_malformed_session_gets_sign_in(self, client, test_db, view, header):
        headers = {"Authorization": header} if header else {}
        response = client.get(view, headers=headers)

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert "sign in" in response.json()["detail"].lower()

    def test_token_signed_with_other_key_is_ignored(self, client, test_db):
        forged = jwt.encode(
            {"sub": "1", "role": "admin", "sid": "x", "token_type": "access"},
            "not-the-secret",
            algorithm=settings.ALGORITHM
        )
        response = client.get(VIEWS[UserRole.ADMIN], headers={"Authorization": f"Bearer {forged}"})
        assert response.status_code == 401

    def test_expired_token_gets_sign_in(self, client, test_db):
        tokens = sign_in(client, *DEMO_CREDENTIALS["admin"])
        claims = jwt.get_unverified_claims(tokens["access_token"])
        expired = create_access_token(
            {"sub": claims["sub"], "email": claims["email"], "role": claims["role"], "sid": claims["sid"]},
            expires_delta=timedelta(minutes=-5)
        )
        response = client.get(VIEWS[UserRole.ADMIN], headers={"Authorization": f"Bearer {expired}"})
        assert response.status_code == 401

    def test_refresh_token_is_not_an_access_token(self, client, test_db):
        tokens = sign_in(client, *DEMO_CREDENTIALS["admin"])
        headers = {"Authorization": f"Bearer {tokens['refresh_token']}"}
        assert client.get(VIEWS[UserRole.ADMIN], headers=headers).status_code == 401

    def test_token_without_live_session_gets_sign_in(self, client, test_db):
        """A correctly signed token for a session the server never opened."""
        tokens = create_token_pair(1, "admin@demo.test", UserRole.ADMIN, "unknown-session")
        headers = {"Authorization": f"Bearer {tokens.access_token}"}
        assert client.get(VIEWS[UserRole.ADMIN], headers=headers).status_code == 401

    def test_deactivated_account_loses_access(self, client, test_db):
        admin = auth_headers(client, "admin")
        patient = auth_headers(client, "patient")

        users = client.get("/api/v1/admin/users", headers=admin).json()
        patient_id = next(u["id"] for u in users if u["email"] == "patient@demo.test")

        response = client.patch(
            f"/api/v1/admin/users/{patient_id}/status",
            params={"is_active": False},
            headers=admin
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        assert client.get(VIEWS[UserRole.PATIENT], headers=patient).status_code == 401

        login = client.post("/api/v1/auth/login", json={
            "email": "patient@demo.test", "password": "patient123"
        })
        assert login.status_code == 401

    def test_admin_cannot_deactivate_own_account(self, client, test_db):
        admin = auth_headers(client, "admin")
        users = client.get("/api/v1/admin/users", headers=admin).json()
        admin_id = next(u["id"] for u in users if u["email"] == "admin@demo.test")

        response = client.patch(
            f"/api/v1/admin/users/{admin_id}/status",
            params={"is_active": False},
            headers=admin
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "You cannot deactivate your own account"

        assert client.get(VIEWS[UserRole.ADMIN], headers=admin).status_code == 200

    def test_self_registered_admin_is_refused(self, client, test_db):
        response = client.post("/api/v1/auth/register", json={
            "email": "mallory@example.com",
            "password": "mallory123",
            "full_name": "Mallory",
            "role": "admin"
        })
        assert response.status_code == 422

        login = client.post("/api/v1/auth/login", json={
            "email": "mallory@example.com", "password": "mallory123"
        })
        assert login.status_code == 401
        assert sign_in(client, *DEMO_CREDENTIALS["admin"])["profile"]["role"] == "admin"

class TestDashboardSwitch:

    @pytest.mark.parametrize("role,title", [
        ("admin", "Admin Dashboard"),
        ("doctor", "Doctor Dashboard"),
        ("patient", "Patient Portal"),
    ])
    def test_profile_lands_on_its_dashboard(self, client, test_db, role, title):
        response = client.get("/api/v1/dashboard", headers=auth_headers(client, role))
        assert response.status_code == 200

        data = response.json()
        assert data["dashboard"] == role
        assert data["title"] == title
        assert data["profile"]["role"] == role
        assert data["panels"]
