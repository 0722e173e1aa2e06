from datetime import date

from sqlalchemy import func, select

from app.models.events import Event, VenueDayLock
from conftest import auth_headers, event_payload


async def create(client, headers, **overrides):
    return await client.post("/api/events", json=event_payload(**overrides), headers=headers)


class TestAuth:
    async def test_missing_token(self, client):
        r = await client.post("/api/events", json=event_payload())
        assert r.status_code == 401
        assert r.json() == {"error": "Token missing"}

    async def test_invalid_token(self, client):
        r = await client.get("/api/admin/events", headers={"Authorization": "Bearer not-a-jwt"})
        assert r.status_code == 401
        assert r.json() == {"error": "Invalid token"}


class TestCreateEvent:
    async def test_created_with_canonical_id(self, client, headers):
        r = await create(client, headers, startTime="9:00", endTime="10:30:00")
        assert r.status_code == 201
        body = r.json()
        assert body["success"] is True
        assert body["message"] == "Event created successfully"
        data = body["data"]
        assert len(data["id"]) == 32
        assert data["start_time"] == "09:00"
        assert data["end_time"] == "10:30"
        assert data["status"] == "pending"
        assert data["participant_count"] == 0

    async def test_overlap_is_rejected_with_conflicts(self, client, headers):
        first = (await create(client, headers, title="Robotics")).json()["data"]

        r = await create(client, headers, title="Chess", startTime="11:00", endTime="13:00")
        assert r.status_code == 409
        body = r.json()
        assert body["success"] is False
        assert body["error"] == "Conflict Detected"
        assert body["message"] == "Conflict detected: The venue is already booked for this time."
        assert [c["eventId"] for c in body["conflictingEvents"]] == [first["id"]]
        assert body["conflictingEvents"][0]["overlapMinutes"] == 60

    async def test_back_to_back_and_other_venue_succeed(self, client, headers):
        assert (await create(client, headers)).status_code == 201
        assert (await create(client, headers, startTime="12:00", endTime="13:00")).status_code == 201
        assert (await create(client, headers, venue="Hall B")).status_code == 201
        assert (await create(client, headers, date="2025-01-11")).status_code == 201

    async def test_rejected_event_is_not_stored(self, client, headers):
        await create(client, headers)
        await create(client, headers, startTime="11:00", endTime="13:00")

        r = await client.get("/api/admin/events", headers=headers)
        assert len(r.json()) == 1

    async def test_inverted_times_are_invalid(self, client, headers):
        r = await create(client, headers, startTime="12:00", endTime="10:00")
        assert r.status_code == 422
        assert r.json()["success"] is False

    async def test_missing_fields(self, client, headers):
        r = await client.post("/api/events", json={"title": "x"}, headers=headers)
        assert r.status_code == 422
        assert "detail" in r.json()

    async def test_enum_values_are_case_insensitive(self, client, headers):
        r = await create(client, headers, eventType="Paid", entryFee=150, status="APPROVED")
        assert r.status_code == 201
        data = r.json()["data"]
        assert data["event_type"] == "paid"
        assert data["status"] == "approved"
        assert data["entry_fee"] == 150.0


class TestVenueDayLock:
    async def test_lock_row_is_created_once(self, client, headers, db):
        await create(client, headers)
        await create(client, headers, startTime="13:00", endTime="14:00")

        rows = (await db.execute(select(VenueDayLock.date, VenueDayLock.venue))).all()
        assert [tuple(r) for r in rows] == [(date(2025, 1, 10), "Hall A")]

    async def test_lock_row_is_rolled_back_with_a_conflict(self, client, headers, db):
        # booked without going through the API, so no lock row exists yet
        db.add(Event(
            title="Seeded", date=date(2025, 1, 10), start_time="10:00", end_time="12:00",
            venue="Hall C", organizer_id="org-9", organizer_name="Seeder",
        ))
        await db.commit()

        r = await create(client, headers, venue="Hall C", startTime="11:00", endTime="13:00")
        assert r.status_code == 409

        locks = (await db.execute(select(func.count(VenueDayLock.id)))).scalar()
        events = (await db.execute(select(func.count(Event.id)))).scalar()
        assert locks == 0
        assert events == 1


class TestCheckConflicts:
    async def test_agrees_with_create(self, client, headers):
        first = (await create(client, headers)).json()["data"]

        probe = {"date": "2025-01-10", "startTime": "11:00", "endTime": "13:00", "venue": "Hall A"}
        r = await client.post("/api/events/check-conflicts", json=probe, headers=headers)
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["hasConflict"] is True
        assert data["conflictType"] == "venue_booked"
        assert data["conflictingEvents"][0]["eventId"] == first["id"]
        assert data["suggestions"] == []

        r = await create(client, headers, startTime="11:00", endTime="13:00")
        assert r.status_code == 409

    async def test_free_slot(self, client, headers):
        await create(client, headers)
        probe = {"date": "2025-01-10", "startTime": "12:00", "endTime": "13:00", "venue": "Hall A"}
        r = await client.post("/api/events/check-conflicts", json=probe, headers=headers)
        data = r.json()["data"]
        assert data["hasConflict"] is False
        assert data["conflictingEvents"] == []
        assert "conflictType" not in data

    async def test_exclude_event_id(self, client, headers):
        first = (await create(client, headers)).json()["data"]
        probe = {
            "date": "2025-01-10", "startTime": "10:00", "endTime": "12:00",
            "venue": "Hall A", "excludeEventId": first["id"],
        }
        r = await client.post("/api/events/check-conflicts", json=probe, headers=headers)
        assert r.json()["data"]["hasConflict"] is False


class TestDeleteEvent:
    async def test_delete_frees_the_slot(self, client, headers):
        first = (await create(client, headers)).json()["data"]

        r = await client.delete(f"/api/events/{first['id']}", headers=headers)
        assert r.status_code == 200
        assert r.json()["success"] is True

        assert (await create(client, headers)).status_code == 201

    async def test_unknown_id(self, client, headers):
        r = await client.delete("/api/events/does-not-exist", headers=headers)
        assert r.status_code == 404
        assert r.json() == {
            "success": False,
            "message": "Event not found",
            "error": "No event with id does-not-exist",
        }


class TestAdmin:
    async def test_events_newest_date_first(self, client, headers):
        await create(client, headers, title="Old", date="2025-01-05")
        await create(client, headers, title="New", date="2025-02-01")
        await create(client, headers, title="Mid", date="2025-01-20")

        r = await client.get("/api/admin/events", headers=headers)
        assert r.status_code == 200
        assert [e["title"] for e in r.json()] == ["New", "Mid", "Old"]

    async def test_stats(self, client, headers):
        await create(client, headers)
        ev = (await create(client, headers, venue="Hall B")).json()["data"]
        await client.post(f"/api/student/events/{ev['id']}/generate-certificate", headers=headers)

        r = await client.get("/api/admin/certificates/stats", headers=headers)
        assert r.json() == {"total_students": 1, "total_events": 2, "certificates_generated": 1}


async def test_health(client):
    assert (await client.get("/health")).json() == {"status": "healthy"}


async def test_other_subject_is_still_authorized(client):
    r = await client.get("/api/admin/events", headers=auth_headers("someone-else"))
    assert r.status_code == 200
