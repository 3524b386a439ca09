from conftest import DEFAULT_PASSWORD, auth_headers, make_user

from salon_api.models import ROLE_STAFF, User


class TestLogin:
    def test_login_returns_token(self, client, admin_user):
        response = client.post("/api/auth/login", json={"phone": "0788000001", "password": DEFAULT_PASSWORD})
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["role"] == "ADMIN"

        profile = client.get(
            "/api/auth/profile", headers={"Authorization": f"Bearer {body['data']['token']}"}
        )
        assert profile.status_code == 200
        assert profile.json()["data"]["phone"] == "0788000001"

    def test_wrong_password(self, client, admin_user):
        response = client.post("/api/auth/login", json={"phone": "0788000001", "password": "nope"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials"}

    def test_inactive_user_cannot_login(self, client, db_session):
        make_user(db_session, "Former Stylist", "0788000009", ROLE_STAFF, is_active=False)
        response = client.post("/api/auth/login", json={"phone": "0788000009", "password": DEFAULT_PASSWORD})
        assert response.status_code == 401


class TestAuthentication:
    def test_missing_token(self, client):
        response = client.get("/api/auth/profile")
        assert response.status_code == 401
        assert response.json() == {"error": "Access token required"}

    def test_invalid_token(self, client):
        response = client.get("/api/auth/profile", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    def test_deactivated_user_token_rejected(self, client, db_session, staff_user, staff_headers):
        staff_user.is_active = False
        db_session.commit()
        response = client.get("/api/auth/profile", headers=staff_headers)
        assert response.status_code == 401

    def test_role_check(self, client, staff_headers):
        response = client.get("/api/auth/users", headers=staff_headers)
        assert response.status_code == 403
        assert response.json() == {"error": "Insufficient permissions"}


class TestRegister:
    def test_register_sends_credentials_by_sms(self, client, admin_headers, db_session, no_outbound_messages):
        response = client.post(
            "/api/auth/register",
            json={"name": "New Stylist", "phone": "0788999999", "role": "superuser"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user"]["role"] == "STAFF"
        assert data["credentialsSent"] is True

        [(phone, message)] = no_outbound_messages["sms"]
        assert phone == "0788999999"
        assert "0788999999" in message

        user = db_session.query(User).filter(User.phone == "0788999999").one()
        assert user.password_hash

    def test_register_prefers_email(self, client, admin_headers, monkeypatch, no_outbound_messages):
        emails = []

        async def fake_email(to, user_name, phone, password):
            emails.append((to, password))
            return {"success": True}

        monkeypatch.setattr(
            "salon_api.services.notification_service.send_welcome_credentials_email", fake_email
        )
        response = client.post(
            "/api/auth/register",
            json={"name": "Mail User", "phone": "0788999998", "email": "Mail@Example.com", "password": "chosen1"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert emails == [("mail@example.com", "chosen1")]
        assert no_outbound_messages["sms"] == []

    def test_duplicate_phone(self, client, admin_headers, staff_user):
        response = client.post(
            "/api/auth/register", json={"name": "Copy", "phone": staff_user.phone}, headers=admin_headers
        )
        assert response.status_code == 400
        assert "phone" in response.json()["error"]

    def test_invalid_phone_is_validation_error(self, client, admin_headers):
        response = client.post(
            "/api/auth/register", json={"name": "Bad", "phone": "07123"}, headers=admin_headers
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation error"
        assert body["details"][0]["field"] == "phone"

    def test_only_admin_can_register(self, client, manager_headers):
        response = client.post(
            "/api/auth/register", json={"name": "X", "phone": "0788999997"}, headers=manager_headers
        )
        assert response.status_code == 403


class TestProfile:
    def test_change_password(self, client, staff_user, staff_headers):
        wrong = client.put(
            "/api/auth/change-password",
            json={"currentPassword": "wrong", "newPassword": "newpass1"},
            headers=staff_headers,
        )
        assert wrong.status_code == 400

        ok = client.put(
            "/api/auth/change-password",
            json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "newpass1", "confirmPassword": "newpass1"},
            headers=staff_headers,
        )
        assert ok.status_code == 200

        login = client.post("/api/auth/login", json={"phone": staff_user.phone, "password": "newpass1"})
        assert login.status_code == 200

    def test_update_profile_rejects_taken_phone(self, client, admin_user, staff_headers):
        response = client.put("/api/auth/profile", json={"phone": admin_user.phone}, headers=staff_headers)
        assert response.status_code == 400

    def test_update_profile(self, client, staff_headers):
        response = client.put("/api/auth/profile", json={"name": "  Aline U.  "}, headers=staff_headers)
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Aline U."


class TestUserAdministration:
    def test_list_users_paginated(self, client, admin_headers, manager_user, staff_user):
        response = client.get("/api/auth/users?limit=2", headers=admin_headers)
        body = response.json()
        assert response.status_code == 200
        assert len(body["data"]) == 2
        assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

        filtered = client.get("/api/auth/users?role=staff", headers=admin_headers).json()
        assert [u["id"] for u in filtered["data"]] == [staff_user.id]

    def test_delete_deactivates(self, client, admin_headers, admin_user, staff_user):
        assert client.delete(f"/api/auth/users/{admin_user.id}", headers=admin_headers).status_code == 400

        response = client.delete(f"/api/auth/users/{staff_user.id}", headers=admin_headers)
        assert response.status_code == 200
        login = client.post("/api/auth/login", json={"phone": staff_user.phone, "password": DEFAULT_PASSWORD})
        assert login.status_code == 401

    def test_reset_password(self, client, admin_headers, staff_user, no_outbound_messages):
        response = client.post(f"/api/auth/users/{staff_user.id}/reset-password", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["channel"] == "sms"

        login = client.post("/api/auth/login", json={"phone": staff_user.phone, "password": DEFAULT_PASSWORD})
        assert login.status_code == 401

    def test_update_user_role(self, client, admin_headers, staff_user):
        response = client.put(
            f"/api/auth/users/{staff_user.id}", json={"role": "manager"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["role"] == "MANAGER"

    def test_unknown_user(self, client, admin_headers):
        assert client.get("/api/auth/users/999", headers=admin_headers).status_code == 404

    def test_manager_token_reads_profile(self, client, manager_user):
        assert client.get("/api/auth/profile", headers=auth_headers(manager_user)).status_code == 200

    def test_reactivation_refused_while_contact_taken(self, client, db_session, admin_headers):
        former = make_user(
            db_session, "Former Stylist", "0788000050", ROLE_STAFF, email="aline@example.com", is_active=False
        )
        current = make_user(db_session, "New Stylist", "0788000050", ROLE_STAFF)

        response = client.put(f"/api/auth/users/{former.id}", json={"isActive": True}, headers=admin_headers)
        assert response.status_code == 400
        assert "phone" in response.json()["error"]

        current.phone, current.email = "0788000051", "aline@example.com"
        db_session.commit()
        response = client.put(f"/api/auth/users/{former.id}", json={"isActive": True}, headers=admin_headers)
        assert response.status_code == 400
        assert "email" in response.json()["error"]

        current.is_active = False
        db_session.commit()
        response = client.put(f"/api/auth/users/{former.id}", json={"isActive": True}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["isActive"] is True
