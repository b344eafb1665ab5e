"""JSON API over the event store.

Exposes budget summaries, global financials, link reconciliation and the
budget/partner mutation entry points.

Usage:
    ```python
    api = WebAPI(db, username="admin", password="secret")
    uvicorn.run(api.app, host="0.0.0.0", port=8080)
    ```
"""
import secrets
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from loguru import logger

from business.agenda_actions import AgendaActions
from business.budget_actions import BudgetActions
from business.budget_aggregation import BudgetAggregator
from business.budget_link import BudgetLinker
from business.checkin_actions import CheckinActions
from business.deadline_actions import DeadlineActions
from business.event_actions import EventActions
from business.partner_actions import (
    LinkedEntityActions, ServiceActions, SpeakerActions, SponsorActions,
    StaffAssignmentActions
)
from business.results import ActionResult
from database import DatabaseManager
from database.models import Event


def _read(what: str, loader: Callable[[], Any]):
    """Run a read query and wrap its result as ``{"data": ...}``.

    HTTP errors pass through; any other failure is logged and answered with
    a 500 carrying a fixed message.
    """
    try:
        return {"data": loader()}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to load {what}: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": f"Could not load {what}"},
        )


def _respond(result: ActionResult, created: bool = False):
    """Map an ActionResult to a JSON response.

    Validation failures are 422, other failures 400.
    """
    if result.success:
        status = 201 if created else 200
    else:
        status = 422 if result.errors else 400
    return JSONResponse(status_code=status,
                        content=jsonable_encoder(result.to_dict()))


class WebAPI:
    """FastAPI application bound to one DatabaseManager.

    Routes:
    - GET  /health                              → health check
    - POST /api/login                           → token login
    - GET  /api/events                          → event list
    - POST /api/events                          → create an event
    - POST /api/events/{id}/duplicate           → copy an event a year later
    - GET  /api/events/{id}                     → event info
    - GET  /api/events/{id}/budget              → budget summary
    - GET  /api/events/{id}/budget/categories   → category breakdown
    - GET  /api/events/{id}/budget/report       → full budget report
    - GET  /api/financials                      → totals across events
    - GET  /api/links/orphans                   → orphaned budget links
    - POST /api/links/repair                    → clear orphaned links
    - GET  /api/events/{id}/agenda              → sessions with speakers
    - GET  /api/events/{id}/deadlines           → deadline stats and lists
    - GET  /api/events/{id}/checkins            → attendance figures
    - POST/PUT/DELETE for budget categories and items, speakers, services,
      sponsors, staff assignments, agenda sessions, deadlines and check-ins
    """

    def __init__(
        self,
        db: DatabaseManager,
        username: str = "admin",
        password: str = "admin123",
        auth_enabled: bool = True,
        token_ttl_hours: int = 24,
    ):
        self.db = db
        self.username = username
        self.password = password
        self.auth_enabled = auth_enabled
        self.token_ttl_hours = token_ttl_hours
        self._valid_tokens: Dict[str, datetime] = {}

        self.events = EventActions(db)
        self.budget = BudgetActions(db)
        self.agenda = AgendaActions(db)
        self.deadlines = DeadlineActions(db)
        self.checkins = CheckinActions(db)
        self.partners: Dict[str, LinkedEntityActions] = {
            "speakers": SpeakerActions(db),
            "services": ServiceActions(db),
            "sponsors": SponsorActions(db),
            "staff-assignments": StaffAssignmentActions(db),
        }
        self.app = self._create_app()

    def _generate_token(self) -> str:
        token = secrets.token_hex(32)
        self._valid_tokens[token] = (
            datetime.now() + timedelta(hours=self.token_ttl_hours)
        )
        return token

    def _verify_token(self, token: str) -> bool:
        if token not in self._valid_tokens:
            return False
        if datetime.now() > self._valid_tokens[token]:
            del self._valid_tokens[token]
            return False
        return True

    def _require_event(self, event_id: int) -> None:
        if self.db.events.get_by_id(Event, event_id) is None:
            raise HTTPException(status_code=404, detail="Event not found")

    def _create_app(self) -> FastAPI:
        app = FastAPI(
            title="Event management API",
            description="Events, budgets and partner linkage",
            version="1.0.0",
        )

        def get_current_user(request: Request):
            """Check the bearer token unless auth is disabled."""
            if not self.auth_enabled:
                return True
            auth = request.headers.get("Authorization", "")
            if auth.startswith("Bearer ") and self._verify_token(auth[7:]):
                return True
            raise HTTPException(status_code=401, detail="Not authenticated")

        @app.exception_handler(Exception)
        async def unhandled_error(request: Request, exc: Exception):
            logger.error(f"Unhandled error on {request.url.path}: {exc}")
            return JSONResponse(
                status_code=500,
                content={"success": False, "error": "Internal server error"},
            )

        # ==================== Health & auth ====================

        @app.get("/health")
        async def health():
            return {"status": "ok", "timestamp": datetime.now().isoformat()}

        @app.post("/api/login")
        async def login(data: dict):
            username = data.get("username", "")
            password = data.get("password", "")
            if username == self.username and password == self.password:
                return {"success": True, "token": self._generate_token()}
            return JSONResponse(
                status_code=401,
                content={"success": False, "error": "Invalid username or password"},
            )

        # ==================== Read API ====================

        @app.get("/api/events")
        async def events_list(status: Optional[str] = None,
                              _=Depends(get_current_user)):
            return _read("events", lambda: self.db.get_event_list(status=status))

        @app.post("/api/events")
        async def create_event(data: dict, _=Depends(get_current_user)):
            return _respond(self.events.create_event(data), created=True)

        @app.post("/api/events/{event_id}/duplicate")
        async def duplicate_event(event_id: int, _=Depends(get_current_user)):
            return _respond(self.events.duplicate_event(event_id), created=True)

        @app.get("/api/events/{event_id}")
        async def event_detail(event_id: int, _=Depends(get_current_user)):
            def load():
                info = self.db.get_event_info(event_id)
                if info is None:
                    raise HTTPException(status_code=404, detail="Event not found")
                return info
            return _read("the event", load)

        @app.get("/api/events/{event_id}/budget")
        async def event_budget(event_id: int, _=Depends(get_current_user)):
            def load():
                self._require_event(event_id)
                return BudgetAggregator(self.db).get_event_budget_summary(event_id)
            return _read("the budget summary", load)

        @app.get("/api/events/{event_id}/budget/categories")
        async def event_budget_categories(event_id: int,
                                          _=Depends(get_current_user)):
            def load():
                self._require_event(event_id)
                return BudgetAggregator(self.db).get_category_breakdown(event_id)
            return _read("the category breakdown", load)

        @app.get("/api/events/{event_id}/budget/report")
        async def event_budget_report(event_id: int,
                                      _=Depends(get_current_user)):
            def load():
                self._require_event(event_id)
                return BudgetAggregator(self.db).get_budget_report(event_id)
            return _read("the budget report", load)

        @app.get("/api/financials")
        async def financials(_=Depends(get_current_user)):
            return _read(
                "the financials",
                lambda: BudgetAggregator(self.db).get_global_financials()
            )

        @app.get("/api/links/orphans")
        async def orphaned_links(event_id: Optional[int] = None,
                                 _=Depends(get_current_user)):
            return _read(
                "the budget links",
                lambda: BudgetLinker(self.db).reconcile_links(event_id=event_id)
            )

        @app.post("/api/links/repair")
        async def repair_links(event_id: Optional[int] = None,
                               _=Depends(get_current_user)):
            def repair():
                report = BudgetLinker(self.db).reconcile_links(
                    event_id=event_id, repair=True
                )
                logger.info(f"Repaired {report['repaired']} orphaned budget links")
                return report
            return _read("the budget links", repair)

        # ==================== Budget mutations ====================

        @app.post("/api/events/{event_id}/budget/categories")
        async def create_category(event_id: int, data: dict,
                                  _=Depends(get_current_user)):
            return _respond(self.budget.create_category(event_id, data),
                            created=True)

        @app.post("/api/events/{event_id}/budget/defaults")
        async def create_default_categories(event_id: int,
                                            _=Depends(get_current_user)):
            return _respond(self.budget.create_default_categories(event_id),
                            created=True)

        @app.put("/api/budget/categories/{category_id}")
        async def update_category(category_id: int, data: dict,
                                  _=Depends(get_current_user)):
            return _respond(self.budget.update_category(category_id, data))

        @app.delete("/api/budget/categories/{category_id}")
        async def delete_category(category_id: int,
                                  _=Depends(get_current_user)):
            return _respond(self.budget.delete_category(category_id))

        @app.post("/api/budget/categories/{category_id}/items")
        async def create_item(category_id: int, data: dict,
                              _=Depends(get_current_user)):
            return _respond(self.budget.create_item(category_id, data),
                            created=True)

        @app.put("/api/budget/items/{item_id}")
        async def update_item(item_id: int, data: dict,
                              _=Depends(get_current_user)):
            return _respond(self.budget.update_item(item_id, data))

        @app.put("/api/budget/items/{item_id}/status")
        async def update_item_status(item_id: int, data: dict,
                                     _=Depends(get_current_user)):
            return _respond(self.budget.update_item_status(item_id, data))

        @app.delete("/api/budget/items/{item_id}")
        async def delete_item(item_id: int, _=Depends(get_current_user)):
            return _respond(self.budget.delete_item(item_id))

        # ==================== Partner mutations ====================

        for path, actions in self.partners.items():
            self._add_partner_routes(app, path, actions, get_current_user)

        @app.put("/api/services/{service_id}/status")
        async def update_service_status(service_id: int, data: dict,
                                        _=Depends(get_current_user)):
            return _respond(
                self.partners["services"].update_status(service_id, data)
            )

        # ==================== Schedule and on-site ====================

        @app.get("/api/events/{event_id}/agenda")
        async def event_agenda(event_id: int, _=Depends(get_current_user)):
            def load():
                self._require_event(event_id)
                return self.agenda.get_event_agenda(event_id)
            return _read("the agenda", load)

        @app.post("/api/events/{event_id}/agenda")
        async def create_session(event_id: int, data: dict,
                                 _=Depends(get_current_user)):
            return _respond(self.agenda.create_session(event_id, data),
                            created=True)

        @app.put("/api/agenda/{session_id}")
        async def update_session(session_id: int, data: dict,
                                 _=Depends(get_current_user)):
            return _respond(self.agenda.update_session(session_id, data))

        @app.delete("/api/agenda/{session_id}")
        async def delete_session(session_id: int, _=Depends(get_current_user)):
            return _respond(self.agenda.delete_session(session_id))

        @app.get("/api/events/{event_id}/deadlines")
        async def event_deadlines(event_id: int, days: int = 7,
                                  _=Depends(get_current_user)):
            def load():
                self._require_event(event_id)
                return {
                    "stats": self.deadlines.get_deadline_stats(event_id),
                    "upcoming": self.deadlines.get_upcoming_deadlines(
                        event_id, days
                    ),
                    "overdue": self.deadlines.get_overdue_deadlines(event_id),
                    "high_priority":
                        self.deadlines.get_high_priority_deadlines(event_id),
                }
            return _read("the deadlines", load)

        @app.post("/api/events/{event_id}/deadlines")
        async def create_deadline(event_id: int, data: dict,
                                  _=Depends(get_current_user)):
            return _respond(self.deadlines.create_deadline(event_id, data),
                            created=True)

        @app.put("/api/deadlines/{deadline_id}")
        async def update_deadline(deadline_id: int, data: dict,
                                  _=Depends(get_current_user)):
            return _respond(self.deadlines.update_deadline(deadline_id, data))

        @app.put("/api/deadlines/{deadline_id}/status")
        async def update_deadline_status(deadline_id: int, data: dict,
                                         _=Depends(get_current_user)):
            return _respond(
                self.deadlines.update_deadline_status(deadline_id, data)
            )

        @app.delete("/api/deadlines/{deadline_id}")
        async def delete_deadline(deadline_id: int,
                                  _=Depends(get_current_user)):
            return _respond(self.deadlines.delete_deadline(deadline_id))

        @app.get("/api/events/{event_id}/checkins")
        async def event_checkins(event_id: int, _=Depends(get_current_user)):
            def load():
                self._require_event(event_id)
                return {
                    "stats": self.checkins.get_checkin_stats(event_id),
                    "recent": self.checkins.get_recent_checkins(event_id),
                    "badge_queue": self.checkins.get_badge_queue(event_id),
                }
            return _read("the check-ins", load)

        @app.post("/api/events/{event_id}/checkins")
        async def record_checkin(event_id: int, data: dict,
                                 _=Depends(get_current_user)):
            return _respond(self.checkins.record_checkin(event_id, data),
                            created=True)

        @app.put("/api/checkins/{checkin_id}/status")
        async def update_checkin_status(checkin_id: int, data: dict,
                                        _=Depends(get_current_user)):
            return _respond(
                self.checkins.update_checkin_status(checkin_id, data)
            )

        return app

    @staticmethod
    def _add_partner_routes(app: FastAPI, path: str,
                            actions: LinkedEntityActions, auth) -> None:
        """Register create/update/delete routes of one linked entity type."""

        @app.post(f"/api/events/{{event_id}}/{path}")
        async def create_entity(event_id: int, data: dict,
                                _=Depends(auth)):
            return _respond(actions.create(event_id, data), created=True)

        @app.put(f"/api/{path}/{{entity_id}}")
        async def update_entity(entity_id: int, data: dict,
                                _=Depends(auth)):
            return _respond(actions.update(entity_id, data))

        @app.delete(f"/api/{path}/{{entity_id}}")
        async def delete_entity(entity_id: int, _=Depends(auth)):
            return _respond(actions.delete(entity_id))


def create_app(db: DatabaseManager, **kwargs: Any) -> FastAPI:
    """Build the FastAPI app for ``db``; kwargs go to WebAPI."""
    return WebAPI(db, **kwargs).app
