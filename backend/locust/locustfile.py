"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags seats      # Concurrent reassignment of a few seats
  locust -f locustfile.py --tags scan       # Check-in burst at the door
  locust -f locustfile.py --tags edge       # Test bad input
  locust -f locustfile.py                   # All tests
"""

import random
import string
from locust import HttpUser, task, between, tag, events
from locust.clients import HttpSession

# Shared state, filled in by on_test_start
EVENT_ID = None
PARTICIPANT_CODES = []
SEAT_TABLES = 2
SEATS_PER_TABLE = 5
PARTICIPANT_COUNT = 50


def random_code():
    return "L" + "".join(random.choices(string.digits, k=6))


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Setup: one active event with a roster of participants."""
    global EVENT_ID
    print("\n" + "=" * 60)
    print("SETUP: Creating load test event and participants...")
    print("=" * 60)

    client = HttpSession(
        base_url=environment.host,
        request_event=environment.events.request,
        user=None,
    )

    resp = client.post("/api/v1/events/", json={"name": "Load Test Gala", "is_active": True})
    if resp.status_code != 201:
        print(f"✗ Could not create event: {resp.status_code}")
        return
    EVENT_ID = resp.json()["data"]["id"]

    for _ in range(PARTICIPANT_COUNT):
        code = random_code()
        resp = client.post(
            f"/api/v1/events/{EVENT_ID}/participants/",
            json={"participant_code": code, "full_name": f"Guest {code}"},
        )
        if resp.status_code == 201:
            PARTICIPANT_CODES.append(code)

    print(f"\n✓ Created event {EVENT_ID} with {len(PARTICIPANT_CODES)} participants\n")


class SeatShuffleUser(HttpUser):
    """
    TEST 1: Concurrency - 50 participants fight over 10 seats

    Run: locust -f locustfile.py --tags seats -u 100 -r 50 --run-time 30s

    After test, verify no seat or participant appears twice:
      SELECT seat_id, COUNT(*) FROM seat_assignments WHERE event_id = X
        GROUP BY seat_id HAVING COUNT(*) > 1;
      SELECT participant_id, COUNT(*) FROM seat_assignments WHERE event_id = X
        GROUP BY participant_id HAVING COUNT(*) > 1;
    Both should return zero rows.
    """
    wait_time = between(0, 0.1)

    @tag("seats")
    @task(5)
    def assign_random_seat(self):
        if not EVENT_ID or not PARTICIPANT_CODES:
            return

        with self.client.post(
            f"/api/v1/events/{EVENT_ID}/assignments",
            json={
                "participant_code": random.choice(PARTICIPANT_CODES),
                "table_number": random.randint(1, SEAT_TABLES),
                "seat_number": random.randint(1, SEATS_PER_TABLE),
            },
            name="/api/v1/events/{id}/assignments",
            catch_response=True,
        ) as resp:
            if resp.status_code == 200:
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # Expected under contention: retries exhausted
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("seats")
    @task(1)
    def unassign_random_seat(self):
        if not EVENT_ID:
            return
        table = random.randint(1, SEAT_TABLES)
        seat = random.randint(1, SEATS_PER_TABLE)
        self.client.delete(
            f"/api/v1/events/{EVENT_ID}/assignments/{table}/{seat}",
            name="/api/v1/events/{id}/assignments/{table}/{seat}",
        )


class DoorScannerUser(HttpUser):
    """
    TEST 2: Check-in burst - scanners at the entrance

    Run: locust -f locustfile.py --tags scan -u 50 -r 10 --run-time 60s

    Every scan must succeed and append a row, including re-scans.
    """
    wait_time = between(0.2, 1.0)

    @tag("scan")
    @task(8)
    def scan_qualified(self):
        if not EVENT_ID or not PARTICIPANT_CODES:
            return
        with self.client.post(
            "/api/v1/attendance/scan",
            json={"payload": f"{EVENT_ID}:{random.choice(PARTICIPANT_CODES)}"},
            name="/api/v1/attendance/scan [qualified]",
            catch_response=True,
        ) as resp:
            if resp.status_code == 200 and resp.json().get("ok"):
                resp.success()
            else:
                resp.failure(f"Scan failed: {resp.status_code}")

    @tag("scan")
    @task(2)
    def scan_bare_code(self):
        if not PARTICIPANT_CODES:
            return
        with self.client.post(
            "/api/v1/attendance/scan",
            json={"participant_code": random.choice(PARTICIPANT_CODES)},
            name="/api/v1/attendance/scan [bare]",
            catch_response=True,
        ) as resp:
            # 400 is legitimate if the same code exists in another active event
            if resp.status_code in [200, 400]:
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("scan")
    @task(1)
    def recent_feed(self):
        """The scanner page polls the recent list after each scan."""
        self.client.get("/api/v1/attendance/recent?limit=20")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_event(self):
        with self.client.post(
            "/api/v1/attendance/scan",
            json={"event_id": 999999, "participant_code": "A100"},
            catch_response=True,
        ) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def unknown_code(self):
        with self.client.post(
            "/api/v1/attendance/scan",
            json={"participant_code": random_code() + "X"},
            catch_response=True,
        ) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def zero_seat(self):
        with self.client.post(
            f"/api/v1/events/{EVENT_ID or 1}/assignments",
            json={"participant_code": "A100", "table_number": 0, "seat_number": 1},
            catch_response=True,
        ) as resp:
            self._expect(resp, [422])

    @tag("edge")
    @task
    def empty_payload(self):
        with self.client.post(
            "/api/v1/attendance/scan",
            json={"payload": "   "},
            catch_response=True,
        ) as resp:
            self._expect(resp, [422])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(
            "/api/v1/attendance/scan",
            data="not json at all",
            catch_response=True,
        ) as resp:
            self._expect(resp, [400, 422])
