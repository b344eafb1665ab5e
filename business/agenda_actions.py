"""Agenda sessions of an event.

The session duration is not taken from the payload: it is recomputed from
the start and end times on every write.
"""
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger

from database import DatabaseManager
from database.models import AgendaSession, Event, Speaker
from validation import validate
from validation.schedule import AgendaSessionForm
from .results import ActionResult
from .serialization import row_to_dict

Payload = Optional[Mapping[str, Any]]


class AgendaActions:
    """Create, update, delete and list agenda sessions."""

    def __init__(self, db: DatabaseManager) -> None:
        self.db = db

    def _speaker_error(self, event_id: int,
                       data: AgendaSessionForm) -> Optional[ActionResult]:
        if data.speaker_id is None:
            return None
        speaker = self.db.speakers.get_by_id(Speaker, data.speaker_id)
        if speaker is None or speaker.event_id != event_id:
            return ActionResult.invalid({"speaker_id": ["Speaker not found"]})
        return None

    def create_session(self, event_id: int, payload: Payload) -> ActionResult:
        result = validate(AgendaSessionForm, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)
        data = result.data

        try:
            if self.db.events.get_by_id(Event, event_id) is None:
                return ActionResult.fail("Event not found")
            error = self._speaker_error(event_id, data)
            if error:
                return error
            session = self.db.agenda.create(
                AgendaSession, event_id=event_id, duration=data.duration,
                **data.model_dump()
            )
        except Exception as e:
            logger.error(f"Failed to create agenda session: {e}")
            return ActionResult.fail("Could not create the session")

        logger.info(f"Agenda session {session.id} created for event {event_id}")
        return ActionResult.ok("Session created", row_to_dict(session))

    def update_session(self, session_id: int, payload: Payload) -> ActionResult:
        """Replace a session; the payload carries every field, as on create."""
        result = validate(AgendaSessionForm, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)
        data = result.data

        try:
            current = self.db.agenda.get_by_id(AgendaSession, session_id)
            if current is None:
                return ActionResult.fail("Session not found")
            error = self._speaker_error(current.event_id, data)
            if error:
                return error
            session = self.db.agenda.update_by_id(
                AgendaSession, session_id, duration=data.duration,
                **data.model_dump()
            )
        except Exception as e:
            logger.error(f"Failed to update agenda session {session_id}: {e}")
            return ActionResult.fail("Could not update the session")

        return ActionResult.ok("Session updated", row_to_dict(session))

    def delete_session(self, session_id: int) -> ActionResult:
        try:
            deleted = self.db.agenda.delete_by_id(AgendaSession, session_id)
        except Exception as e:
            logger.error(f"Failed to delete agenda session {session_id}: {e}")
            return ActionResult.fail("Could not delete the session")

        if not deleted:
            return ActionResult.fail("Session not found")
        return ActionResult.ok("Session deleted")

    def _with_speakers(self, sessions: List[AgendaSession]
                       ) -> List[Dict[str, Any]]:
        speakers: Dict[int, Optional[Speaker]] = {}
        rows = []
        for session in sessions:
            row = row_to_dict(session)
            speaker = None
            if session.speaker_id is not None:
                if session.speaker_id not in speakers:
                    speakers[session.speaker_id] = self.db.speakers.get_by_id(
                        Speaker, session.speaker_id
                    )
                speaker = speakers[session.speaker_id]
            row["speaker"] = {
                "id": speaker.id,
                "first_name": speaker.first_name,
                "last_name": speaker.last_name,
                "company": speaker.company,
                "job_title": speaker.job_title,
            } if speaker is not None else None
            rows.append(row)
        return rows

    def get_event_agenda(self, event_id: int) -> List[Dict[str, Any]]:
        """Sessions of an event by start time, each with its speaker (or None)."""
        return self._with_speakers(self.db.agenda.list_by_event(event_id))

    def get_speaker_sessions(self, speaker_id: int) -> List[Dict[str, Any]]:
        return self._with_speakers(self.db.agenda.list_by_speaker(speaker_id))
