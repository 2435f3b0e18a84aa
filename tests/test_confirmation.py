"""Tests for POST /api/invitations/confirm."""
from app.models.analytics_event import EVENT_RSVP_ACTION_SUCCESS, AnalyticsEvent
from app.models.invitation import Invitation


class TestConfirmInvitation:
    def test_confirm_sets_flag_and_logs_event(self, client, db_session, create_invitation):
        invitation = create_invitation("ana-lopez")

        response = client.post(
            "/api/invitations/confirm",
            json={"slug": "ana-lopez", "action": "confirm"},
            headers={"X-Forwarded-For": "198.51.100.4, 10.0.0.1", "User-Agent": "Mobile Safari"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["data"] == {"slug": "ana-lopez", "action": "confirm", "is_confirmed": True}

        db_session.expire_all()
        assert db_session.get(Invitation, invitation.id).is_confirmed is True

        events = db_session.query(AnalyticsEvent).all()
        assert len(events) == 1
        event = events[0]
        assert event.event_type == EVENT_RSVP_ACTION_SUCCESS
        assert event.invitation_id == invitation.id
        assert event.ip_address == "198.51.100.4"
        assert event.user_agent == "Mobile Safari"
        assert event.event_data["slug"] == "ana-lopez"
        assert event.event_data["action"] == "confirm"
        assert event.event_data["is_confirmed"] is True
        assert event.event_data["source"] == "server"
        assert "timestamp" in event.event_data

    def test_unconfirm_clears_flag(self, client, db_session, create_invitation):
        invitation = create_invitation("ana-lopez", is_confirmed=True)

        response = client.post("/api/invitations/confirm", json={"slug": "ana-lopez", "action": "unconfirm"})

        assert response.status_code == 200
        assert response.json()["data"]["is_confirmed"] is False
        db_session.expire_all()
        assert db_session.get(Invitation, invitation.id).is_confirmed is False

    def test_repeated_confirm_appends_an_event_each_time(self, client, db_session, create_invitation):
        create_invitation("ana-lopez")

        for _ in range(2):
            response = client.post("/api/invitations/confirm", json={"slug": "ana-lopez", "action": "confirm"})
            assert response.status_code == 200

        count = db_session.query(AnalyticsEvent).filter(AnalyticsEvent.event_type == EVENT_RSVP_ACTION_SUCCESS).count()
        assert count == 2

    def test_unknown_slug_returns_404_without_event(self, client, db_session):
        response = client.post("/api/invitations/confirm", json={"slug": "nadie", "action": "confirm"})

        assert response.status_code == 404
        assert response.json()["status"] == "error"
        assert db_session.query(AnalyticsEvent).count() == 0

    def test_inactive_invitation_is_not_found(self, client, db_session, create_invitation):
        create_invitation("inactiva", is_active=False)

        response = client.post("/api/invitations/confirm", json={"slug": "inactiva", "action": "confirm"})

        assert response.status_code == 404
        assert db_session.query(AnalyticsEvent).count() == 0

    def test_invalid_action_returns_400(self, client, create_invitation):
        create_invitation("ana-lopez")

        response = client.post("/api/invitations/confirm", json={"slug": "ana-lopez", "action": "maybe"})

        assert response.status_code == 400
        assert "error" in response.json()

    def test_missing_slug_returns_400(self, client):
        response = client.post("/api/invitations/confirm", json={"action": "confirm"})

        assert response.status_code == 400

    def test_peer_address_used_without_proxy_headers(self, client, db_session, create_invitation):
        create_invitation("ana-lopez")

        client.post("/api/invitations/confirm", json={"slug": "ana-lopez", "action": "confirm"})

        event = db_session.query(AnalyticsEvent).one()
        assert event.ip_address == "testclient"
