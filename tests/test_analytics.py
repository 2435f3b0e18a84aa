"""Tests for analytics tracking and aggregation endpoints."""
from datetime import timedelta

from app.models.analytics_event import (
    EVENT_MESSAGE,
    EVENT_RSVP_ACTION_SUCCESS,
    EVENT_RSVP_BUTTON_CLICK,
    EVENT_VIEW,
    AnalyticsEvent,
)
from app.utils.dates import utcnow


class TestTrackEvent:
    """Tests for POST /api/analytics."""

    def test_track_resolves_invitation_from_slug(self, client, db_session, create_invitation):
        invitation = create_invitation("ana-lopez")

        response = client.post(
            "/api/analytics",
            json={"event_type": "view", "slug": "ana-lopez", "event_data": {"page": "home"}},
            headers={"CF-Connecting-IP": "192.0.2.10", "User-Agent": "Firefox"},
        )

        assert response.status_code == 201
        event_id = response.json()["data"]["id"]
        event = db_session.get(AnalyticsEvent, event_id)
        assert event.invitation_id == invitation.id
        assert event.ip_address == "192.0.2.10"
        assert event.user_agent == "Firefox"
        assert event.event_data == {"page": "home"}

    def test_unknown_slug_is_recorded_with_null_invitation(self, client, db_session):
        response = client.post("/api/analytics", json={"event_type": "view", "slug": "no-existe"})

        assert response.status_code == 201
        event = db_session.get(AnalyticsEvent, response.json()["data"]["id"])
        assert event.invitation_id is None
        assert event.event_type == "view"

    def test_body_user_agent_wins_over_header(self, client, db_session):
        response = client.post(
            "/api/analytics",
            json={"event_type": "view", "user_agent": "Custom Agent"},
            headers={"User-Agent": "Header Agent"},
        )

        event = db_session.get(AnalyticsEvent, response.json()["data"]["id"])
        assert event.user_agent == "Custom Agent"

    def test_missing_event_type_returns_400(self, client):
        response = client.post("/api/analytics", json={"slug": "ana-lopez"})

        assert response.status_code == 400

    def test_invalid_payload_for_known_type_returns_400(self, client, db_session):
        response = client.post("/api/analytics", json={"event_type": "message", "event_data": {"guest_name": "Tía"}})

        assert response.status_code == 400
        assert db_session.query(AnalyticsEvent).count() == 0

    def test_message_without_payload_returns_400(self, client, db_session):
        response = client.post("/api/analytics", json={"event_type": "message"})

        assert response.status_code == 400
        assert db_session.query(AnalyticsEvent).count() == 0

    def test_rsvp_success_without_payload_returns_400(self, client, db_session):
        response = client.post("/api/analytics", json={"event_type": "rsvp_action_success", "slug": "x"})

        assert response.status_code == 400
        assert db_session.query(AnalyticsEvent).count() == 0

    def test_view_without_payload_is_stored_with_null_data(self, client, db_session):
        response = client.post("/api/analytics", json={"event_type": "view", "referrer": "https://wa.me"})

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["event_type"] == "view"
        assert data["event_data"] is None
        assert data["referrer"] == "https://wa.me"
        assert db_session.get(AnalyticsEvent, data["id"]).event_data is None

    def test_unknown_event_type_accepts_free_form_payload(self, client, db_session):
        response = client.post(
            "/api/analytics",
            json={"event_type": "gallery_open", "event_data": {"photo": 3, "nested": {"a": 1}}},
        )

        assert response.status_code == 201
        event = db_session.get(AnalyticsEvent, response.json()["data"]["id"])
        assert event.event_data == {"photo": 3, "nested": {"a": 1}}

    def test_known_payload_keeps_extra_keys(self, client, db_session):
        response = client.post(
            "/api/analytics",
            json={"event_type": "message", "event_data": {"message": "¡Felicidades!", "color": "rosa"}},
        )

        event = db_session.get(AnalyticsEvent, response.json()["data"]["id"])
        assert event.event_data["message"] == "¡Felicidades!"
        assert event.event_data["color"] == "rosa"


class TestDashboard:
    """Tests for GET /api/analytics/dashboard."""

    def test_requires_authentication(self, client):
        response = client.get("/api/analytics/dashboard")

        assert response.status_code == 401

    def test_counts_and_lists(self, client, admin_headers, create_invitation, create_event):
        ana = create_invitation("ana-lopez")
        luis = create_invitation("luis-perez", name="Luis", lastname="Pérez")
        now = utcnow()

        create_event(EVENT_VIEW, ana, timestamp=now - timedelta(minutes=5))
        create_event(EVENT_VIEW, ana, timestamp=now - timedelta(days=10))
        create_event(EVENT_VIEW, luis, timestamp=now - timedelta(days=40))
        create_event(EVENT_VIEW, None, timestamp=now - timedelta(minutes=1))
        create_event(EVENT_RSVP_BUTTON_CLICK, ana, data={"slug": "ana-lopez"})
        create_event(EVENT_MESSAGE, ana, data={"message": "Hola"})

        response = client.get("/api/analytics/dashboard?tz=UTC", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["timezone"] == "UTC"
        assert data["total_views"] == 4
        assert data["views_last_7_days"] == 2
        assert data["views_last_30_days"] == 3

        assert len(data["recent_views"]) == 4
        # newest first, orphan view tolerated with null guest fields
        assert data["recent_views"][0]["slug"] is None
        assert data["recent_views"][1]["slug"] == "ana-lopez"

        assert [e["event_type"] for e in data["recent_rsvp_events"]] == [EVENT_RSVP_BUTTON_CLICK]

        top = data["top_invitations"]
        assert top[0]["slug"] == "ana-lopez"
        assert top[0]["view_count"] == 2
        assert top[1]["slug"] == "luis-perez"
        assert top[1]["view_count"] == 1

    def test_views_by_day_covers_last_seven_local_days(self, client, admin_headers, create_invitation, create_event):
        ana = create_invitation("ana-lopez")
        now = utcnow()
        create_event(EVENT_VIEW, ana, timestamp=now)
        create_event(EVENT_VIEW, ana, timestamp=now)
        create_event(EVENT_VIEW, ana, timestamp=now - timedelta(days=2))
        create_event(EVENT_VIEW, ana, timestamp=now - timedelta(days=20))

        response = client.get("/api/analytics/dashboard?tz=UTC", headers=admin_headers)

        series = response.json()["data"]["views_by_day"]
        assert len(series) == 7
        assert series[0] == {"date": now.date().isoformat(), "count": 2}
        assert series[2] == {"date": (now - timedelta(days=2)).date().isoformat(), "count": 1}
        assert sum(day["count"] for day in series) == 3

    def test_confirmations_grouped_by_day_and_action(self, client, admin_headers, create_invitation, create_event):
        ana = create_invitation("ana-lopez")
        now = utcnow()
        for action in ("confirm", "confirm", "unconfirm"):
            create_event(
                EVENT_RSVP_ACTION_SUCCESS,
                ana,
                data={"slug": "ana-lopez", "action": action, "is_confirmed": action == "confirm"},
                timestamp=now,
            )

        data = client.get("/api/analytics/dashboard?tz=UTC", headers=admin_headers).json()["data"]

        today = now.date().isoformat()
        grouped = {(row["date"], row["action"]): row["count"] for row in data["recent_confirmations"]}
        assert grouped == {(today, "confirm"): 2, (today, "unconfirm"): 1}

        assert len(data["confirmation_events"]) == 3
        assert {e["slug"] for e in data["confirmation_events"]} == {"ana-lopez"}
        assert {e["action"] for e in data["confirmation_events"]} == {"confirm", "unconfirm"}

    def test_unknown_timezone_returns_400(self, client, admin_headers):
        response = client.get("/api/analytics/dashboard?tz=Mars/Olympus", headers=admin_headers)

        assert response.status_code == 400
        assert "Mars/Olympus" in response.json()["error"]


class TestRecentActivity:
    """Tests for GET /api/analytics/recent-activity."""

    def test_paginates_activity_newest_first(self, client, admin_headers, create_invitation, create_event):
        ana = create_invitation("ana-lopez")
        now = utcnow()
        for minutes in range(5):
            create_event(EVENT_VIEW, ana, timestamp=now - timedelta(minutes=minutes))
        create_event(EVENT_MESSAGE, ana, data={"message": "no es actividad"})

        response = client.get("/api/analytics/recent-activity?page=2&limit=2", headers=admin_headers)

        body = response.json()
        assert response.status_code == 200
        assert body["pagination"] == {"page": 2, "limit": 2, "total": 5, "total_pages": 3}
        assert len(body["data"]) == 2
        first, second = body["data"]
        assert first["timestamp"] > second["timestamp"]

    def test_filters_by_event_type_and_slug(self, client, admin_headers, create_invitation, create_event):
        ana = create_invitation("ana-lopez")
        luis = create_invitation("luis-perez", name="Luis", lastname="Pérez")
        create_event(EVENT_VIEW, ana)
        create_event(EVENT_VIEW, luis)
        create_event(EVENT_RSVP_BUTTON_CLICK, ana)

        response = client.get(
            "/api/analytics/recent-activity?event_type=view&invite=ana-lopez",
            headers=admin_headers,
        )

        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["slug"] == "ana-lopez"
        assert data[0]["event_type"] == EVENT_VIEW
        assert data[0]["display_name"] == "Ana López"


class TestTopInvitations:
    """Tests for GET /api/analytics/top-invitations."""

    def _seed(self, create_invitation, create_event):
        viewed = create_invitation("vista", name="Vista")
        create_invitation("sin-vistas", name="Sin")
        confirmed = create_invitation("confirmada", name="Confirmada", is_confirmed=True)
        hidden = create_invitation("inactiva", name="Inactiva", is_active=False)
        create_event(EVENT_VIEW, viewed)
        create_event(EVENT_VIEW, viewed)
        create_event(EVENT_VIEW, confirmed)
        create_event(EVENT_VIEW, hidden)

    def test_orders_active_invitations_by_views(self, client, admin_headers, create_invitation, create_event):
        self._seed(create_invitation, create_event)

        body = client.get("/api/analytics/top-invitations", headers=admin_headers).json()

        assert [row["slug"] for row in body["data"]] == ["vista", "confirmada", "sin-vistas"]
        assert [row["view_count"] for row in body["data"]] == [2, 1, 0]
        assert body["pagination"]["total"] == 3

    def test_state_viewed_only_returns_invitations_with_views(
        self, client, admin_headers, create_invitation, create_event
    ):
        self._seed(create_invitation, create_event)

        body = client.get("/api/analytics/top-invitations?state=viewed", headers=admin_headers).json()

        assert {row["slug"] for row in body["data"]} == {"vista", "confirmada"}
        assert all(row["view_count"] > 0 for row in body["data"])
        assert body["pagination"]["total"] == 2

    def test_state_not_viewed(self, client, admin_headers, create_invitation, create_event):
        self._seed(create_invitation, create_event)

        body = client.get("/api/analytics/top-invitations?state=not_viewed", headers=admin_headers).json()

        assert [row["slug"] for row in body["data"]] == ["sin-vistas"]
        assert body["pagination"]["total"] == 1

    def test_status_filters(self, client, admin_headers, create_invitation, create_event):
        self._seed(create_invitation, create_event)

        confirmed = client.get("/api/analytics/top-invitations?status=confirmed", headers=admin_headers).json()
        pending = client.get("/api/analytics/top-invitations?status=pending", headers=admin_headers).json()

        assert [row["slug"] for row in confirmed["data"]] == ["confirmada"]
        assert {row["slug"] for row in pending["data"]} == {"vista", "sin-vistas"}

    def test_invalid_filters_return_400(self, client, admin_headers):
        assert client.get("/api/analytics/top-invitations?state=popular", headers=admin_headers).status_code == 400
        assert client.get("/api/analytics/top-invitations?status=maybe", headers=admin_headers).status_code == 400


class TestFilterOptions:
    def test_lists_types_and_invitations_with_activity(self, client, admin_headers, create_invitation, create_event):
        ana = create_invitation("ana-lopez", secondary_name="Iván", secondary_lastname="Ruiz")
        create_invitation("sin-actividad", name="Beto")
        luis = create_invitation("luis-perez", name="Luis", lastname="Pérez")
        create_event(EVENT_VIEW, ana)
        create_event(EVENT_RSVP_BUTTON_CLICK, ana)
        create_event(EVENT_MESSAGE, luis, data={"message": "Hola"})

        data = client.get("/api/analytics/filter-options", headers=admin_headers).json()["data"]

        assert data["event_types"] == [EVENT_RSVP_BUTTON_CLICK, EVENT_VIEW]
        assert data["invites"] == [{"slug": "ana-lopez", "name": "Ana López", "couple_name": "Iván Ruiz"}]
