from decimal import Decimal


class TestGetProfile:
    def test_returns_contact_and_role(self, client, physician, auth):
        resp = client.get("/api/v1/user", headers=auth(physician))
        assert resp.status_code == 200
        data = resp.json()
        assert data["email"] == "patel@example.com"
        assert data["role"] == "PHYSICIAN"
        assert data["phone"] is None
        assert data["physician_profile"] is None
        assert data["investor_profile"] is None

    def test_requires_session(self, client):
        assert client.get("/api/v1/user").status_code == 401

    def test_unknown_user(self, client):
        resp = client.get("/api/v1/user", headers={"Authorization": "Bearer sb-ghost"})
        assert resp.status_code == 404


class TestUpdateProfile:
    def test_contact_fields(self, client, store, physician, auth):
        resp = client.patch(
            "/api/v1/user",
            json={"name": "Dr. Anika Patel", "phone": "555-0100", "avatar_url": "https://cdn.example.com/a.png"},
            headers=auth(physician),
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "Dr. Anika Patel"
        assert data["phone"] == "555-0100"
        assert data["avatar_url"] == "https://cdn.example.com/a.png"
        assert store.users[physician.supabase_id].name == "Dr. Anika Patel"

    def test_omitted_fields_unchanged(self, client, physician, auth):
        client.patch("/api/v1/user", json={"phone": "555-0100"}, headers=auth(physician))
        resp = client.patch("/api/v1/user", json={"name": "Dr. Patel"}, headers=auth(physician))
        data = resp.json()
        assert data["phone"] == "555-0100"
        assert data["name"] == "Dr. Patel"

    def test_physician_profile(self, client, physician, auth):
        resp = client.patch(
            "/api/v1/user",
            json={"physician_profile": {"specialty": "Cardiology", "estimated_income": "350000"}},
            headers=auth(physician),
        )
        assert resp.status_code == 200
        profile = resp.json()["physician_profile"]
        assert profile["specialty"] == "Cardiology"
        assert Decimal(profile["estimated_income"]) == Decimal("350000")

        resp = client.patch(
            "/api/v1/user",
            json={"physician_profile": {"years_in_practice": 4}},
            headers=auth(physician),
        )
        profile = resp.json()["physician_profile"]
        assert profile["years_in_practice"] == 4
        assert profile["specialty"] == "Cardiology"

    def test_investor_profile(self, client, investor, auth):
        resp = client.patch(
            "/api/v1/user",
            json={"investor_profile": {"accredited": True, "firm_name": "Nguyen Family Office"}},
            headers=auth(investor),
        )
        assert resp.status_code == 200
        profile = resp.json()["investor_profile"]
        assert profile["accredited"] is True
        assert profile["firm_name"] == "Nguyen Family Office"
        assert resp.json()["physician_profile"] is None

    def test_profile_for_other_role_rejected(self, client, store, investor, auth):
        resp = client.patch(
            "/api/v1/user",
            json={"name": "Changed", "physician_profile": {"specialty": "Cardiology"}},
            headers=auth(investor),
        )
        assert resp.status_code == 422
        assert store.users[investor.supabase_id].name == "Nguyen"

    def test_unknown_profile_field_rejected(self, client, physician, auth):
        resp = client.patch(
            "/api/v1/user",
            json={"physician_profile": {"blood_type": "O+"}},
            headers=auth(physician),
        )
        assert resp.status_code == 422
