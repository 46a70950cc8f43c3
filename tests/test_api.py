"""
HTTP tests for the swap routes. Engine behaviour is covered in the service
tests; these check wiring, auth and error mapping.
"""
import pytest
from datetime import timedelta

from fastapi.testclient import TestClient

from shiftswap.api.deps import get_db
from shiftswap.core.timeutils import utcnow
from shiftswap.db.models.shifts import Shifts
from shiftswap.core.security import create_access_token
from shiftswap.main import app

from swap_seed import (
    ALICE_SHIFT_ID,
    ALICE_USER_ID,
    BOB_USER_ID,
    CAROL_USER_ID,
    ERIN_USER_ID,
    MANAGER_USER_ID,
)


@pytest.fixture
def client(session_factory):
    # routes run on the real clock, so move the seeded shift into the future
    session = session_factory()
    start = utcnow() + timedelta(days=3)
    shift = session.query(Shifts).filter(Shifts.id == ALICE_SHIFT_ID).one()
    shift.start_datetime_utc = start
    shift.end_datetime_utc = start + timedelta(hours=8)
    session.commit()
    session.close()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


def _create(client, to_user_id=BOB_USER_ID):
    return client.post(
        "/api/v1/swaps",
        json={"shift_id": ALICE_SHIFT_ID, "to_user_id": to_user_id},
        headers=auth(ALICE_USER_ID),
    )


class TestAuth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_missing_token(self, client):
        assert client.get("/api/v1/swaps").status_code in (401, 403)

    def test_bad_token(self, client):
        resp = client.get("/api/v1/swaps", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401

    def test_expired_token(self, client):
        token = create_access_token({"sub": ALICE_USER_ID}, expires_delta=timedelta(minutes=-1))
        resp = client.get("/api/v1/swaps", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_disabled_account(self, client):
        assert client.get("/api/v1/swaps", headers=auth(ERIN_USER_ID)).status_code == 403


class TestSwapRoutes:
    def test_full_flow(self, client):
        resp = _create(client)
        assert resp.status_code == 201
        swap = resp.json()
        assert swap["status"] == "PENDING"
        assert swap["from_user_id"] == ALICE_USER_ID

        incoming = client.get("/api/v1/swaps/incoming", headers=auth(BOB_USER_ID)).json()
        assert [s["id"] for s in incoming] == [swap["id"]]

        resp = client.post(f"/api/v1/swaps/{swap['id']}/respond", json={"accept": True}, headers=auth(BOB_USER_ID))
        assert resp.status_code == 200
        assert resp.json()["status"] == "ACCEPTED"

        waiting = client.get("/api/v1/swaps/pending-approval", headers=auth(MANAGER_USER_ID)).json()
        assert [s["id"] for s in waiting] == [swap["id"]]

        resp = client.post(f"/api/v1/swaps/{swap['id']}/approve", json={"approve": True}, headers=auth(MANAGER_USER_ID))
        assert resp.status_code == 200
        assert resp.json()["status"] == "APPROVED"
        assert resp.json()["approved_by_id"] == MANAGER_USER_ID

        history = client.get(f"/api/v1/swaps/{swap['id']}/history", headers=auth(ALICE_USER_ID)).json()
        assert [h["change_type"] for h in history] == ["SWAP_REQUESTED", "ACCEPTED_BY_EMPLOYEE", "SWAP_APPROVED"]

    def test_outgoing_and_get(self, client):
        swap_id = _create(client).json()["id"]
        outgoing = client.get("/api/v1/swaps/outgoing", headers=auth(ALICE_USER_ID)).json()
        assert [s["id"] for s in outgoing] == [swap_id]

        resp = client.get(f"/api/v1/swaps/{swap_id}", headers=auth(BOB_USER_ID))
        assert resp.status_code == 200

    def test_list_with_status_filter(self, client):
        _create(client)
        resp = client.get("/api/v1/swaps", params={"swap_status": "ACCEPTED"}, headers=auth(MANAGER_USER_ID))
        assert resp.json() == []
        resp = client.get("/api/v1/swaps", params={"swap_status": "PENDING"}, headers=auth(MANAGER_USER_ID))
        assert len(resp.json()) == 1


class TestErrorMapping:
    def test_duplicate_is_400(self, client):
        _create(client)
        resp = _create(client, to_user_id=MANAGER_USER_ID)
        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "SWAP_ALREADY_EXISTS"

    def test_unknown_shift_is_404(self, client):
        resp = client.post("/api/v1/swaps", json={"shift_id": 404, "to_user_id": BOB_USER_ID}, headers=auth(ALICE_USER_ID))
        assert resp.status_code == 404
        assert resp.json()["detail"]["error"] == "SHIFT_NOT_FOUND"

    def test_wrong_responder_is_403(self, client):
        swap_id = _create(client).json()["id"]
        resp = client.post(f"/api/v1/swaps/{swap_id}/respond", json={"accept": True}, headers=auth(MANAGER_USER_ID))
        assert resp.status_code == 403
        assert resp.json()["detail"]["error"] == "NOT_AUTHORIZED"

    def test_outsider_cannot_read(self, client):
        swap_id = _create(client).json()["id"]
        assert client.get(f"/api/v1/swaps/{swap_id}", headers=auth(CAROL_USER_ID)).status_code == 403
        assert client.get(f"/api/v1/swaps/{swap_id}/history", headers=auth(CAROL_USER_ID)).status_code == 403

    def test_missing_swap_is_404(self, client):
        resp = client.post("/api/v1/swaps/404/approve", json={"approve": True}, headers=auth(MANAGER_USER_ID))
        assert resp.status_code == 404
        assert resp.json()["detail"]["error"] == "SWAP_NOT_FOUND"

    def test_approving_pending_is_400(self, client):
        swap_id = _create(client).json()["id"]
        resp = client.post(f"/api/v1/swaps/{swap_id}/approve", json={"approve": True}, headers=auth(MANAGER_USER_ID))
        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "INVALID_STATUS_TRANSITION"


class TestSwapHistoryRoute:
    def test_manager_sees_restaurant_history(self, client):
        _create(client)
        rows = client.get("/api/v1/swap-history", headers=auth(MANAGER_USER_ID)).json()
        assert [r["change_type"] for r in rows] == ["SWAP_REQUESTED"]

    def test_outsider_sees_nothing(self, client):
        _create(client)
        assert client.get("/api/v1/swap-history", headers=auth(CAROL_USER_ID)).json() == []
