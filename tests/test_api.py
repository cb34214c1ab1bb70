import json
from datetime import timedelta

import pytest

from courtbook.core.errors import ContentionError


def _create(client, auth_headers, *starts):
    response = client.post(
        "/windows",
        json={"start_times": [s.isoformat() for s in starts]},
        headers=auth_headers("ops", admin=True),
    )
    assert response.status_code == 201, response.text
    return response.json()


def _admit(client, auth_headers, requester, window_id, court_index, mode):
    return client.post(
        "/reservations",
        json={"window_id": window_id, "court_index": court_index, "game_mode": mode},
        headers=auth_headers(requester),
    )


@pytest.fixture
def window_id(client, auth_headers, future_start):
    return _create(client, auth_headers, future_start)["created"][0]["id"]


class TestAuth:
    def test_missing_token(self, client, window_id):
        response = client.post("/reservations", json={"window_id": window_id, "court_index": 0, "game_mode": "singles"})
        assert response.status_code == 401

    def test_bad_token(self, client, window_id):
        response = client.post(
            "/reservations",
            json={"window_id": window_id, "court_index": 0, "game_mode": "singles"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "invalid_token"

    def test_create_windows_is_admin_only(self, client, auth_headers, future_start):
        response = client.post(
            "/windows", json={"start_times": [future_start.isoformat()]}, headers=auth_headers("student-1")
        )
        assert response.status_code == 403


class TestAdmitEndpoint:
    def test_confirmation(self, client, auth_headers, window_id, future_start):
        response = _admit(client, auth_headers, "alice", window_id, 3, "doubles")

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Booking confirmed successfully!"
        assert body["booking"]["court_index"] == 3
        assert body["booking"]["game_mode"] == "doubles"
        assert body["booking"]["occupancy_units"] == 1
        assert body["booking"]["start_time"] == future_start.isoformat()

    @pytest.mark.parametrize(
        "payload",
        [
            {"window_id": "abc", "court_index": 0, "game_mode": "singles"},
            {"window_id": 1, "court_index": -1, "game_mode": "singles"},
            {"window_id": 1, "court_index": 0, "game_mode": "mixed"},
            {"window_id": 1, "court_index": 0},
            {"window_id": 2**70, "court_index": 0, "game_mode": "singles"},
            {"window_id": 1, "court_index": 2**40, "game_mode": "singles"},
        ],
    )
    def test_validation_errors(self, client, auth_headers, payload):
        response = client.post("/reservations", json=payload, headers=auth_headers("alice"))
        assert response.status_code == 422

    def test_each_rejection_has_its_own_code(self, client, auth_headers, window_id, future_start):
        past = _create(client, auth_headers, future_start - timedelta(days=2))["created"][0]["id"]
        for player in ("p1", "p2"):
            assert _admit(client, auth_headers, player, window_id, 1, "singles").status_code == 201
        assert _admit(client, auth_headers, "p1-other", window_id, 0, "singles").status_code == 201

        cases = [
            (_admit(client, auth_headers, "x", 9999, 0, "singles"), 404, "window_not_found"),
            (_admit(client, auth_headers, "x", past, 0, "singles"), 410, "window_expired"),
            (_admit(client, auth_headers, "x", window_id, 9, "singles"), 400, "invalid_court"),
            (_admit(client, auth_headers, "x", window_id, 0, "doubles"), 400, "mode_mismatch"),
            (_admit(client, auth_headers, "p1", window_id, 4, "doubles"), 409, "duplicate_reservation"),
            (_admit(client, auth_headers, "x", window_id, 1, "singles"), 409, "capacity_exceeded"),
        ]
        for response, status, code in cases:
            assert response.status_code == status, (code, response.text)
            assert response.json()["detail"]["code"] == code
            assert response.json()["detail"]["message"]

    def test_contention_is_retryable(self, client, auth_headers, window_id, monkeypatch):
        def busy(*args, **kwargs):
            raise ContentionError(5)

        monkeypatch.setattr("courtbook.api.routes.reservations.try_admit", busy)
        response = _admit(client, auth_headers, "alice", window_id, 0, "singles")

        assert response.status_code == 503
        assert response.headers["retry-after"] == "1"
        assert response.json()["detail"]["code"] == "contention"


class TestCancelEndpoints:
    def test_cancel_flow(self, client, auth_headers, window_id):
        booking_id = _admit(client, auth_headers, "alice", window_id, 0, "singles").json()["id"]

        stranger = client.post("/reservations/cancel", json={"reservation_id": booking_id}, headers=auth_headers("bob"))
        assert stranger.status_code == 404
        assert stranger.json()["detail"]["code"] == "not_found"

        ok = client.post("/reservations/cancel", json={"reservation_id": booking_id}, headers=auth_headers("alice"))
        assert ok.status_code == 200
        assert ok.json()["reservation"]["cancelled_at"] is not None

        again = client.post("/reservations/cancel", json={"reservation_id": booking_id}, headers=auth_headers("alice"))
        assert again.status_code == 409
        assert again.json()["detail"]["code"] == "already_cancelled"

    def test_oversized_reservation_id_is_rejected(self, client, auth_headers):
        response = client.post("/reservations/cancel", json={"reservation_id": 2**70}, headers=auth_headers("alice"))
        assert response.status_code == 422

    def test_admin_cancel(self, client, auth_headers, window_id):
        booking_id = _admit(client, auth_headers, "alice", window_id, 0, "singles").json()["id"]

        forbidden = client.post(
            "/reservations/admin-cancel", json={"reservation_id": booking_id}, headers=auth_headers("bob")
        )
        assert forbidden.status_code == 403

        ok = client.post(
            "/reservations/admin-cancel", json={"reservation_id": booking_id}, headers=auth_headers("ops", admin=True)
        )
        assert ok.status_code == 200
        again = client.post(
            "/reservations/admin-cancel", json={"reservation_id": booking_id}, headers=auth_headers("ops", admin=True)
        )
        assert again.json()["detail"]["code"] == "already_cancelled"


class TestListings:
    def test_my_and_all_reservations(self, client, auth_headers, window_id):
        _admit(client, auth_headers, "alice", window_id, 0, "singles")
        _admit(client, auth_headers, "bob", window_id, 3, "doubles")

        mine = client.get("/reservations/mine", headers=auth_headers("alice")).json()["reservations"]
        assert [(r["requester_id"], r["court_index"]) for r in mine] == [("alice", 0)]
        assert "start_time" in mine[0]

        assert client.get("/reservations", headers=auth_headers("alice")).status_code == 403
        everyone = client.get("/reservations", headers=auth_headers("ops", admin=True)).json()["reservations"]
        assert {r["requester_id"] for r in everyone} == {"alice", "bob"}

    def test_admin_listing_pages_through_everything(self, client, auth_headers, window_id):
        for i in range(5):
            _admit(client, auth_headers, f"player-{i}", window_id, 3 + i % 3, "doubles")
        admin = auth_headers("ops", admin=True)

        seen, offset = [], 0
        while offset is not None:
            page = client.get("/reservations", params={"limit": 2, "offset": offset}, headers=admin).json()
            assert page["total"] == 5
            assert len(page["reservations"]) <= 2
            seen.extend(r["id"] for r in page["reservations"])
            offset = page["next_offset"]

        assert len(seen) == len(set(seen)) == 5


class TestWindowsEndpoints:
    def test_availability(self, client, auth_headers, window_id):
        _admit(client, auth_headers, "alice", window_id, 0, "singles")

        body = client.get(f"/windows/{window_id}/availability").json()

        assert body["status"] == "partial"
        assert body["courts"][0]["occupied_units"] == 1
        assert body["courts"][0]["available"] == 1
        assert body["courts"][0]["eligibility"] == {"singles": True, "doubles": False}
        assert client.get("/windows/9999/availability").status_code == 404
        assert client.get(f"/windows/{2**70}/availability").status_code == 422

    def test_create_reports_duplicates(self, client, auth_headers, future_start):
        first = _create(client, auth_headers, future_start)
        assert first["count"] == 1

        partial = _create(client, auth_headers, future_start, future_start + timedelta(minutes=45))
        assert partial["count"] == 1
        assert partial["duplicates"] == [future_start.strftime("%I:%M %p")]

        all_dupes = client.post(
            "/windows",
            json={"start_times": [future_start.isoformat()]},
            headers=auth_headers("ops", admin=True),
        )
        assert all_dupes.status_code == 400
        assert all_dupes.json()["detail"]["code"] == "all_duplicates"
        assert all_dupes.json()["detail"]["duplicates"] == [future_start.strftime("%I:%M %p")]

    def test_create_requires_start_times(self, client, auth_headers):
        response = client.post("/windows", json={"start_times": []}, headers=auth_headers("ops", admin=True))
        assert response.status_code == 422

    def test_streamed_listing(self, client, auth_headers, future_start):
        starts = [future_start + timedelta(minutes=45 * i) for i in range(3)]
        created = _create(client, auth_headers, *reversed(starts))["created"]
        by_start = {c["start_time"]: c["id"] for c in created}
        _admit(client, auth_headers, "alice", by_start[starts[1].isoformat()], 0, "singles")

        response = client.get(
            "/windows",
            params={"from": starts[0].isoformat(), "to": (starts[-1] + timedelta(minutes=1)).isoformat()},
        )

        assert response.status_code == 200
        windows = json.loads(response.content)
        assert [w["start_time"] for w in windows] == [s.isoformat() for s in starts]
        assert [w["status"] for w in windows] == ["available", "partial", "available"]
        assert len(windows[0]["courts"]) == 6

    def test_empty_listing_is_valid_json(self, client, future_start):
        response = client.get(
            "/windows", params={"from": future_start.isoformat(), "to": (future_start + timedelta(days=1)).isoformat()}
        )
        assert json.loads(response.content) == []

    def test_listing_range_must_be_ordered(self, client, future_start):
        response = client.get(
            "/windows", params={"from": future_start.isoformat(), "to": future_start.isoformat()}
        )
        assert response.status_code == 422


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
