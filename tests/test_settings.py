"""Tests for event settings and the public endpoints."""
from app.models.invitation_settings import InvitationSettings

URL = "/api/settings"


def settings_payload(**overrides):
    payload = {
        "event_date": "2026-12-12",
        "event_time": "19:30",
        "rsvp_enabled": True,
        "rsvp_deadline": "2026-11-30",
        "rsvp_phone": "+52 55 1234 5678",
        "rsvp_whatsapp": "5215512345678",
        "is_published": True,
        "thank_you_page_enabled": True,
    }
    payload.update(overrides)
    return payload


class TestSettings:
    def test_get_creates_defaults(self, client, db_session, admin_headers):
        response = client.get(URL, headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["rsvp_enabled"] is True
        assert data["is_published"] is False
        assert data["thank_you_page_enabled"] is False
        assert data["event_date"] is None
        assert db_session.query(InvitationSettings).count() == 1

        client.get(URL, headers=admin_headers)
        assert db_session.query(InvitationSettings).count() == 1

    def test_put_without_row_returns_404(self, client, admin_headers):
        response = client.put(URL, json=settings_payload(), headers=admin_headers)

        assert response.status_code == 404

    def test_put_updates_all_fields(self, client, admin_headers):
        client.get(URL, headers=admin_headers)

        response = client.put(URL, json=settings_payload(), headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["event_date"] == "2026-12-12"
        assert data["event_time"] == "19:30"
        assert data["is_published"] is True
        assert data["rsvp_whatsapp"] == "5215512345678"

    def test_put_validates_formats(self, client, admin_headers):
        client.get(URL, headers=admin_headers)

        assert client.put(URL, json=settings_payload(event_date="12/12/2026"), headers=admin_headers).status_code == 400
        assert client.put(URL, json=settings_payload(event_time="7pm"), headers=admin_headers).status_code == 400
        assert client.put(URL, json=settings_payload(event_date="2026-02-30"), headers=admin_headers).status_code == 400

    def test_requires_authentication(self, client):
        assert client.get(URL).status_code == 401


class TestPublicSettings:
    def test_defaults_when_no_row(self, client):
        response = client.get("/api/public/settings")

        assert response.status_code == 200
        assert response.json()["data"] == {"is_published": False, "event_date": None, "event_time": None}

    def test_exposes_only_public_fields(self, client, admin_headers):
        client.get(URL, headers=admin_headers)
        client.put(URL, json=settings_payload(), headers=admin_headers)

        data = client.get("/api/public/settings").json()["data"]

        assert data == {"is_published": True, "event_date": "2026-12-12", "event_time": "19:30"}


class TestClientInfo:
    def test_echoes_request_details(self, client):
        response = client.get(
            "/api/client-info",
            headers={
                "X-Real-IP": "192.0.2.44",
                "User-Agent": "Chrome",
                "Accept-Language": "es-MX",
                "CF-IPCountry": "MX",
            },
        )

        assert response.status_code == 200
        assert "no-store" in response.headers["cache-control"]
        data = response.json()["data"]
        assert data["ip"] == "192.0.2.44"
        assert data["user_agent"] == "Chrome"
        assert data["accept_language"] == "es-MX"
        assert data["cf_country"] == "MX"
        assert data["timestamp"].endswith("Z")


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
