"""Web API tests.

Uses FastAPI's TestClient against a temp SQLite database.
"""
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from business.budget_aggregation import BudgetAggregator
from business.budget_link import BudgetLinker
from database.models import BudgetItem
from interface import WebAPI, create_app

EVENT = {
    "title": "Tech Summit",
    "start_date": "2025-06-12T09:00:00",
    "end_date": "2025-06-13T18:00:00",
    "location": "Milano",
}


@pytest.fixture
def client(temp_db):
    """Client with authentication disabled."""
    return TestClient(create_app(temp_db, auth_enabled=False))


@pytest.fixture
def secured_api(temp_db):
    return WebAPI(temp_db, username="admin", password="s3cret")


def _login(client):
    response = client.post(
        "/api/login", json={"username": "admin", "password": "s3cret"}
    )
    return {"Authorization": f"Bearer {response.json()['token']}"}


class TestAuth:

    def test_health_is_public(self, secured_api):
        response = TestClient(secured_api.app).get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_api_requires_token(self, secured_api):
        response = TestClient(secured_api.app).get("/api/events")
        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_bad_credentials(self, secured_api):
        response = TestClient(secured_api.app).post(
            "/api/login", json={"username": "admin", "password": "wrong"}
        )
        assert response.status_code == 401
        assert response.json() == {
            "success": False, "error": "Invalid username or password"
        }

    def test_login_then_call(self, secured_api):
        client = TestClient(secured_api.app)
        response = client.get("/api/events", headers=_login(client))
        assert response.status_code == 200
        assert response.json() == {"data": []}

    def test_expired_token(self, secured_api):
        token = secured_api._generate_token()
        secured_api._valid_tokens[token] = datetime.now() - timedelta(seconds=1)

        assert secured_api._verify_token(token) is False
        assert token not in secured_api._valid_tokens


class TestEvents:

    def test_create_and_read(self, client):
        created = client.post("/api/events", json=EVENT)
        assert created.status_code == 201
        event_id = created.json()["data"]["id"]

        detail = client.get(f"/api/events/{event_id}")
        assert detail.status_code == 200
        assert detail.json()["data"]["participants"]["pending"] == 0

        listed = client.get("/api/events", params={"status": "draft"})
        assert [e["id"] for e in listed.json()["data"]] == [event_id]

    def test_validation_error_is_422(self, client):
        response = client.post("/api/events", json=dict(EVENT, title=""))
        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation errors"
        assert "title" in body["errors"]

    def test_unknown_event(self, client):
        assert client.get("/api/events/99").status_code == 404
        assert client.get("/api/events/99/budget").status_code == 404
        assert client.post("/api/events/99/duplicate").status_code == 400

    def test_duplicate(self, client, event):
        response = client.post(f"/api/events/{event.id}/duplicate")
        assert response.status_code == 201
        assert response.json()["data"]["title"] == "Tech Summit (Copy)"
        assert response.json()["data"]["start_date"] == "2026-06-12T09:00:00"


class TestBudgetRoutes:

    def test_budget_flow(self, client, event):
        category = client.post(
            f"/api/events/{event.id}/budget/categories",
            json={"name": "Catering", "allocated_amount": 1000},
        )
        assert category.status_code == 201
        category_id = category.json()["data"]["id"]

        item = client.post(
            f"/api/budget/categories/{category_id}/items",
            json={"description": "Coffee break", "estimated_cost": 600,
                  "actual_cost": 500},
        )
        assert item.status_code == 201

        summary = client.get(f"/api/events/{event.id}/budget").json()["data"]
        assert summary["total_allocated"] == 1000
        assert summary["total_spent"] == 500
        assert summary["percentage_used"] == 50.0

        breakdown = client.get(
            f"/api/events/{event.id}/budget/categories"
        ).json()["data"]
        assert breakdown[0]["remaining"] == 500

    def test_item_status_and_delete(self, client, event, make_category,
                                    make_item):
        item = make_item(make_category(event.id))

        invalid = client.put(f"/api/budget/items/{item.id}/status",
                             json={"status": "paid"})
        assert invalid.status_code == 422

        paid = client.put(f"/api/budget/items/{item.id}/status", json={
            "status": "paid", "payment_date": "2025-06-20", "actual_cost": 90,
        })
        assert paid.status_code == 200
        assert paid.json()["data"]["payment_date"] == "2025-06-20"

        assert client.delete(f"/api/budget/items/{item.id}").status_code == 200
        assert client.delete(f"/api/budget/items/{item.id}").status_code == 400

    def test_category_update_and_delete(self, client, event, make_category):
        category = make_category(event.id)

        updated = client.put(f"/api/budget/categories/{category.id}",
                             json={"allocated_amount": 1500})
        assert updated.json()["data"]["allocated_amount"] == 1500

        deleted = client.delete(f"/api/budget/categories/{category.id}")
        assert deleted.json() == {
            "success": True, "message": "Budget category deleted"
        }

    def test_default_categories(self, client, event):
        response = client.post(f"/api/events/{event.id}/budget/defaults")
        assert response.status_code == 201
        assert len(response.json()["data"]) == 6

    def test_report_and_financials(self, client, event, make_category,
                                   make_item):
        make_item(make_category(event.id, "Entrate"), "Tickets", estimated=900)
        make_item(make_category(event.id, "Venue"), "Hall", estimated=300)

        report = client.get(f"/api/events/{event.id}/budget/report")
        assert set(report.json()["data"]) == {
            "summary", "variance", "overdue_items", "sponsors"
        }

        financials = client.get("/api/financials").json()["data"]
        assert financials["revenue"] == 900
        assert financials["costs"] == 300
        assert financials["net_profit"] == 600


class TestPartnerRoutes:

    def test_speaker_round_trip(self, client, event, make_category, temp_db):
        category = make_category(event.id, "Speakers")
        payload = {
            "first_name": "Marco", "last_name": "Rossi",
            "email": "marco@acme.com", "fee": 800,
            "budget_category_id": category.id,
        }

        created = client.post(f"/api/events/{event.id}/speakers", json=payload)
        assert created.status_code == 201
        speaker = created.json()["data"]

        updated = client.put(f"/api/speakers/{speaker['id']}",
                             json=dict(payload, fee=950))
        assert updated.status_code == 200
        item = temp_db.budget_items.get_by_id(BudgetItem, speaker["budget_item_id"])
        assert float(item.estimated_cost) == 950

        deleted = client.delete(f"/api/speakers/{speaker['id']}")
        assert deleted.json()["message"] == "Speaker deleted"
        assert temp_db.budget_items.get_by_id(
            BudgetItem, speaker["budget_item_id"]
        ) is None

    def test_sponsor_and_service(self, client, event, make_category):
        sponsor = client.post(f"/api/events/{event.id}/sponsors", json={
            "company_name": "Acme", "sponsorship_level": "gold",
            "sponsorship_amount": 5000,
        })
        assert sponsor.json()["data"]["budget_item_id"] is not None

        category = make_category(event.id, "Catering")
        service = client.post(f"/api/events/{event.id}/services", json={
            "service_name": "Catering lunch", "quoted_price": 1000,
            "budget_category_id": category.id,
        }).json()["data"]
        status = client.put(f"/api/services/{service['id']}/status",
                            json={"contract_status": "delivered"})
        assert status.json()["data"]["contract_status"] == "delivered"

    def test_staff_assignment_unknown_staff(self, client, event):
        response = client.post(f"/api/events/{event.id}/staff-assignments",
                               json={
                                   "staff_id": 42,
                                   "start_time": "2025-06-12T08:00:00",
                                   "end_time": "2025-06-12T18:00:00",
                               })
        assert response.status_code == 400
        assert response.json()["message"] == "Staff member not found"

    def test_orphans_and_repair(self, client, event, make_category, temp_db):
        category = make_category(event.id, "Speakers")
        speaker = client.post(f"/api/events/{event.id}/speakers", json={
            "first_name": "Marco", "last_name": "Rossi",
            "email": "marco@acme.com", "fee": 800,
            "budget_category_id": category.id,
        }).json()["data"]
        temp_db.budget_items.delete_by_id(BudgetItem, speaker["budget_item_id"])

        orphans = client.get("/api/links/orphans",
                             params={"event_id": event.id}).json()["data"]
        assert [o["id"] for o in orphans["orphaned"]] == [speaker["id"]]

        repaired = client.post("/api/links/repair").json()["data"]
        assert repaired["repaired"] == 1
        after = client.get("/api/links/orphans").json()["data"]
        assert after == {"checked": 0, "orphaned": [], "repaired": 0}


class TestStoreFailures:

    @staticmethod
    def _locked(*args, **kwargs):
        raise RuntimeError("/var/lib/events.db is locked")

    def test_financials_hide_error_detail(self, client, monkeypatch):
        monkeypatch.setattr(BudgetAggregator, "get_global_financials",
                            self._locked)

        response = client.get("/api/financials")

        assert response.status_code == 500
        assert response.json() == {
            "success": False, "error": "Could not load the financials"
        }

    def test_budget_summary_failure(self, client, event, monkeypatch):
        monkeypatch.setattr(BudgetAggregator, "get_event_budget_summary",
                            self._locked)

        response = client.get(f"/api/events/{event.id}/budget")

        assert response.status_code == 500
        assert "events.db" not in response.text
        assert response.json()["error"] == "Could not load the budget summary"

    def test_event_list_failure(self, client, temp_db, monkeypatch):
        monkeypatch.setattr(temp_db, "get_event_list", self._locked)

        response = client.get("/api/events")

        assert response.status_code == 500
        assert response.json()["error"] == "Could not load events"

    def test_orphan_report_failure(self, client, monkeypatch):
        monkeypatch.setattr(BudgetLinker, "reconcile_links", self._locked)

        response = client.get("/api/links/orphans")

        assert response.status_code == 500
        assert response.json()["error"] == "Could not load the budget links"

    def test_missing_event_still_404(self, client, monkeypatch):
        monkeypatch.setattr(BudgetAggregator, "get_budget_report", self._locked)
        assert client.get("/api/events/99/budget/report").status_code == 404


class TestScheduleRoutes:

    def test_agenda(self, client, event):
        created = client.post(f"/api/events/{event.id}/agenda", json={
            "title": "Opening keynote", "session_type": "keynote",
            "start_time": "2025-06-12T10:00:00",
            "end_time": "2025-06-12T11:00:00",
        })
        assert created.status_code == 201
        assert created.json()["data"]["duration"] == 60

        agenda = client.get(f"/api/events/{event.id}/agenda").json()["data"]
        assert [s["title"] for s in agenda] == ["Opening keynote"]

        session_id = created.json()["data"]["id"]
        assert client.delete(f"/api/agenda/{session_id}").status_code == 200
        assert client.get("/api/events/99/agenda").status_code == 404

    def test_deadlines(self, client, event):
        created = client.post(f"/api/events/{event.id}/deadlines", json={
            "title": "Book the venue", "due_date": "2025-05-01T09:00:00",
            "category": "logistics", "priority": "critical",
        })
        assert created.status_code == 201
        deadline_id = created.json()["data"]["id"]

        summary = client.get(f"/api/events/{event.id}/deadlines").json()["data"]
        assert summary["stats"]["total"] == 1
        assert [d["id"] for d in summary["overdue"]] == [deadline_id]
        assert [d["id"] for d in summary["high_priority"]] == [deadline_id]

        done = client.put(f"/api/deadlines/{deadline_id}/status",
                          json={"status": "completed"})
        assert done.json()["data"]["status"] == "completed"
        invalid = client.put(f"/api/deadlines/{deadline_id}/status",
                             json={"status": "done"})
        assert invalid.status_code == 422

    def test_checkins(self, client, event, make_staff):
        staff = make_staff()
        created = client.post(f"/api/events/{event.id}/checkins", json={
            "person_type": "staff", "person_id": staff.id,
        })
        assert created.status_code == 201
        again = client.post(f"/api/events/{event.id}/checkins", json={
            "person_type": "staff", "person_id": staff.id,
        })
        assert again.status_code == 400
        assert again.json()["message"] == "Already checked in"

        data = client.get(f"/api/events/{event.id}/checkins").json()["data"]
        assert data["stats"]["by_type"]["staff"] == 1
        assert len(data["badge_queue"]) == 1
