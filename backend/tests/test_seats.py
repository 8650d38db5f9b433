"""
Tests for seat assignment, including the one-seat-per-participant /
one-participant-per-seat invariant and the conflict retry path.
"""

import pytest
from httpx import AsyncClient
from pydantic import ValidationError
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, OperationalError

from app.core.config import Settings
from app.core.exceptions import InvalidSeatNumber
from app.models.seat import Seat, SeatAssignment
from app.services import seat_service


def assign_url(event_id: int) -> str:
    return f"/api/v1/events/{event_id}/assignments"


async def assign(client: AsyncClient, event_id: int, code: str, table: int, seat: int):
    return await client.post(
        assign_url(event_id),
        json={"participant_code": code, "table_number": table, "seat_number": seat},
    )


async def seat_map(client: AsyncClient, event_id: int) -> dict:
    response = await client.get(f"/api/v1/events/{event_id}/seats")
    assert response.status_code == 200
    return {
        (entry["table_number"], entry["seat_number"]): entry["participant_code"]
        for entry in response.json()["data"]
    }


async def assignment_count(db_session, event_id: int) -> int:
    result = await db_session.execute(
        select(func.count(SeatAssignment.id)).where(SeatAssignment.event_id == event_id)
    )
    return result.scalar_one()


@pytest.mark.asyncio
async def test_assign_creates_seat_lazily(client: AsyncClient, active_event, participant, db_session):
    response = await assign(client, active_event.id, "A100", 3, 5)
    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "data": {"event_id": active_event.id, "participant_code": "A100", "table_number": 3, "seat_number": 5},
    }

    assert await seat_map(client, active_event.id) == {(3, 5): "A100"}
    seats = await db_session.execute(select(func.count(Seat.id)).where(Seat.event_id == active_event.id))
    assert seats.scalar_one() == 1


@pytest.mark.asyncio
async def test_assign_twice_is_idempotent(client: AsyncClient, active_event, participant, db_session):
    await assign(client, active_event.id, "A100", 3, 5)
    response = await assign(client, active_event.id, "A100", 3, 5)
    assert response.status_code == 200

    assert await assignment_count(db_session, active_event.id) == 1
    assert await seat_map(client, active_event.id) == {(3, 5): "A100"}


@pytest.mark.asyncio
async def test_reassign_participant_releases_old_seat(client: AsyncClient, active_event, participant):
    """A100 -> 3/5 then A100 -> 4/1: ends at 4/1, 3/5 is empty."""
    await assign(client, active_event.id, "A100", 3, 5)
    await assign(client, active_event.id, "A100", 4, 1)

    assert await seat_map(client, active_event.id) == {(3, 5): None, (4, 1): "A100"}

    scan = await client.post(
        "/api/v1/attendance/scan",
        json={"event_id": active_event.id, "participant_code": "A100"},
    )
    data = scan.json()["data"]
    assert (data["table_number"], data["seat_number"]) == (4, 1)


@pytest.mark.asyncio
async def test_assign_occupied_seat_displaces_occupant(
    client: AsyncClient, active_event, participant, make_participant, db_session
):
    await make_participant(active_event, "A200", "Rina Wijaya")
    await assign(client, active_event.id, "A100", 1, 1)
    await assign(client, active_event.id, "A200", 1, 1)

    assert await seat_map(client, active_event.id) == {(1, 1): "A200"}
    assert await assignment_count(db_session, active_event.id) == 1

    scan = await client.post(
        "/api/v1/attendance/scan",
        json={"event_id": active_event.id, "participant_code": "A100"},
    )
    assert scan.json()["data"]["table_number"] is None


@pytest.mark.asyncio
async def test_bijection_holds_after_shuffle(client: AsyncClient, active_event, make_participant, db_session):
    """No seat has two occupants and nobody holds two seats, whatever the order."""
    for code in ("P1", "P2", "P3"):
        await make_participant(active_event, code)

    moves = [
        ("P1", 1, 1), ("P2", 1, 2), ("P3", 1, 3),
        ("P1", 1, 2), ("P2", 1, 1), ("P3", 1, 2), ("P1", 2, 1),
    ]
    for code, table, seat in moves:
        response = await assign(client, active_event.id, code, table, seat)
        assert response.status_code == 200

    rows = (
        await db_session.execute(
            select(SeatAssignment.participant_id, SeatAssignment.seat_id)
            .where(SeatAssignment.event_id == active_event.id)
        )
    ).all()
    participant_ids = [r.participant_id for r in rows]
    seat_ids = [r.seat_id for r in rows]
    assert len(participant_ids) == len(set(participant_ids))
    assert len(seat_ids) == len(set(seat_ids))

    assert await seat_map(client, active_event.id) == {
        (1, 1): "P2", (1, 2): "P3", (1, 3): None, (2, 1): "P1",
    }


@pytest.mark.asyncio
async def test_same_seat_numbers_in_different_events_are_independent(
    client: AsyncClient, make_event, make_participant
):
    e1 = await make_event("Hall A")
    e2 = await make_event("Hall B")
    await make_participant(e1, "A100")
    await make_participant(e2, "A100")

    await assign(client, e1.id, "A100", 3, 5)
    await assign(client, e2.id, "A100", 3, 5)

    assert await seat_map(client, e1.id) == {(3, 5): "A100"}
    assert await seat_map(client, e2.id) == {(3, 5): "A100"}


@pytest.mark.asyncio
async def test_assign_unknown_participant(client: AsyncClient, active_event):
    response = await assign(client, active_event.id, "NOBODY", 1, 1)
    assert response.status_code == 404
    assert response.json()["code"] == "ParticipantNotFound"


@pytest.mark.asyncio
async def test_assign_participant_from_other_event(client: AsyncClient, make_event, make_participant):
    """Codes are scoped to their event."""
    e1 = await make_event("Hall A")
    e2 = await make_event("Hall B")
    await make_participant(e1, "A100")

    response = await assign(client, e2.id, "A100", 1, 1)
    assert response.json()["code"] == "ParticipantNotFound"


@pytest.mark.asyncio
async def test_assign_unknown_event(client: AsyncClient):
    response = await assign(client, 99999, "A100", 1, 1)
    assert response.status_code == 404
    assert response.json()["code"] == "EventNotFound"


@pytest.mark.asyncio
@pytest.mark.parametrize("table,seat", [(0, 1), (1, 0), (-2, 3)])
async def test_assign_rejects_non_positive_numbers(client: AsyncClient, active_event, participant, table, seat):
    response = await assign(client, active_event.id, "A100", table, seat)
    assert response.status_code == 422
    assert response.json()["code"] == "ValidationFailed"


@pytest.mark.asyncio
async def test_service_guards_seat_numbers(db_session, active_event, participant):
    with pytest.raises(InvalidSeatNumber):
        await seat_service.assign_seat(db_session, active_event.id, "A100", 0, 1)


@pytest.mark.asyncio
async def test_unassign_frees_seat(client: AsyncClient, active_event, participant, db_session):
    await assign(client, active_event.id, "A100", 3, 5)

    response = await client.delete(f"{assign_url(active_event.id)}/3/5")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "data": None}

    assert await assignment_count(db_session, active_event.id) == 0
    # The seat itself stays, just empty
    assert await seat_map(client, active_event.id) == {(3, 5): None}


@pytest.mark.asyncio
async def test_unassign_missing_seat_is_noop(client: AsyncClient, active_event, db_session):
    response = await client.delete(f"{assign_url(active_event.id)}/9/9")
    assert response.status_code == 200
    assert response.json()["ok"] is True

    seats = await db_session.execute(select(func.count(Seat.id)))
    assert seats.scalar_one() == 0
    assert await assignment_count(db_session, active_event.id) == 0


@pytest.mark.asyncio
async def test_unassign_twice(client: AsyncClient, active_event, participant):
    await assign(client, active_event.id, "A100", 3, 5)
    first = await client.delete(f"{assign_url(active_event.id)}/3/5")
    second = await client.delete(f"{assign_url(active_event.id)}/3/5")
    assert first.status_code == second.status_code == 200


@pytest.mark.asyncio
async def test_unassign_rejects_non_positive_numbers(client: AsyncClient, active_event):
    response = await client.delete(f"{assign_url(active_event.id)}/0/1")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_seat_map_unknown_event(client: AsyncClient):
    response = await client.get("/api/v1/events/99999/seats")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_assign_retries_after_integrity_conflict(
    client: AsyncClient, active_event, participant, monkeypatch
):
    """A concurrent writer's constraint violation is retried, not surfaced."""
    event_id = active_event.id
    real_assign_once = seat_service._assign_once
    calls = {"n": 0}

    async def flaky_assign_once(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            raise IntegrityError("INSERT INTO seat_assignments", {}, Exception("duplicate key"))
        return await real_assign_once(*args, **kwargs)

    monkeypatch.setattr(seat_service, "_assign_once", flaky_assign_once)

    response = await assign(client, event_id, "A100", 2, 2)
    assert response.status_code == 200
    assert calls["n"] == 2
    assert await seat_map(client, event_id) == {(2, 2): "A100"}


@pytest.mark.asyncio
async def test_assign_gives_up_after_max_retries(client: AsyncClient, active_event, participant, monkeypatch):
    event_id = active_event.id

    async def always_conflicts(*args, **kwargs):
        raise IntegrityError("INSERT INTO seat_assignments", {}, Exception("duplicate key"))

    monkeypatch.setattr(seat_service, "_assign_once", always_conflicts)

    response = await assign(client, event_id, "A100", 2, 2)
    assert response.status_code == 409
    assert response.json()["code"] == "AssignmentConflict"


class FakeDriverError(Exception):
    def __init__(self, message: str, sqlstate: str):
        super().__init__(message)
        self.sqlstate = sqlstate


@pytest.mark.asyncio
async def test_assign_retries_after_deadlock(client: AsyncClient, active_event, participant, monkeypatch):
    """PostgreSQL aborts one side of a deadlocked swap; that attempt is retried."""
    event_id = active_event.id
    real_assign_once = seat_service._assign_once
    calls = {"n": 0}

    async def deadlocks_once(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            raise OperationalError(
                "DELETE FROM seat_assignments", {}, FakeDriverError("deadlock detected", "40P01")
            )
        return await real_assign_once(*args, **kwargs)

    monkeypatch.setattr(seat_service, "_assign_once", deadlocks_once)

    response = await assign(client, event_id, "A100", 1, 4)
    assert response.status_code == 200
    assert calls["n"] == 2
    assert await seat_map(client, event_id) == {(1, 4): "A100"}


@pytest.mark.asyncio
async def test_assign_does_not_retry_other_storage_errors(
    client: AsyncClient, active_event, participant, monkeypatch
):
    calls = {"n": 0}

    async def connection_lost(*args, **kwargs):
        calls["n"] += 1
        raise OperationalError("SELECT 1", {}, FakeDriverError("connection reset", "08006"))

    monkeypatch.setattr(seat_service, "_assign_once", connection_lost)

    response = await assign(client, active_event.id, "A100", 1, 1)
    assert response.status_code == 500
    assert response.json()["code"] == "InternalFailure"
    assert calls["n"] == 1


@pytest.mark.asyncio
async def test_swap_keeps_one_seat_per_participant(
    client: AsyncClient, active_event, make_participant, db_session
):
    await make_participant(active_event, "P1")
    await make_participant(active_event, "P2")
    await assign(client, active_event.id, "P1", 1, 2)
    await assign(client, active_event.id, "P2", 1, 1)

    # Each takes the seat the other holds
    assert (await assign(client, active_event.id, "P1", 1, 1)).status_code == 200
    assert (await assign(client, active_event.id, "P2", 1, 2)).status_code == 200

    assert await seat_map(client, active_event.id) == {(1, 1): "P1", (1, 2): "P2"}
    assert await assignment_count(db_session, active_event.id) == 2


def test_max_retries_must_allow_one_attempt():
    with pytest.raises(ValidationError):
        Settings(SEAT_ASSIGN_MAX_RETRIES=0)
    assert Settings(SEAT_ASSIGN_MAX_RETRIES=1).SEAT_ASSIGN_MAX_RETRIES == 1


@pytest.mark.asyncio
async def test_database_rejects_double_occupancy(db_session, active_event, make_participant):
    """The unique constraints back the invariant even if the service is bypassed."""
    p1 = await make_participant(active_event, "P1")
    p2 = await make_participant(active_event, "P2")
    seat = Seat(event_id=active_event.id, table_number=1, seat_number=1)
    db_session.add(seat)
    await db_session.flush()

    db_session.add(SeatAssignment(event_id=active_event.id, participant_id=p1.id, seat_id=seat.id))
    await db_session.flush()
    db_session.add(SeatAssignment(event_id=active_event.id, participant_id=p2.id, seat_id=seat.id))

    with pytest.raises(IntegrityError):
        await db_session.flush()
    await db_session.rollback()
