"""Survey repositories - surveys, questions, responses and answers."""
from typing import Optional, List, Dict, Any
from sqlalchemy.orm import Session, selectinload

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .models import Survey, SurveyQuestion, SurveyResponse, SurveyAnswer


class SurveyRepository(BaseCRUD):
    """Survey repository.

    Surveys are written together with their questions, and responses together
    with their answers, each inside one session.
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def create_with_questions(self, event_id: int,
                              survey_data: Dict[str, Any],
                              questions: List[Dict[str, Any]]) -> int:
        """Create a survey and its questions.

        Args:
            event_id: Owning event ID.
            survey_data: Survey columns (title, description, flags).
            questions: Question column dicts; ``position`` defaults to the
                list index.

        Returns:
            New survey ID.
        """
        with self._get_session() as session:
            survey = Survey(event_id=event_id, **survey_data)
            for index, question in enumerate(questions):
                question = dict(question)
                question.setdefault("position", index)
                survey.questions.append(SurveyQuestion(**question))
            session.add(survey)
            session.commit()
            session.refresh(survey)
            return survey.id

    def get_with_questions(self, survey_id: int,
                           session: Optional[Session] = None
                           ) -> Optional[Survey]:
        """Survey with its questions eager-loaded, or None."""
        def _query(sess):
            return sess.query(Survey).options(
                selectinload(Survey.questions)
            ).filter(Survey.id == survey_id).first()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def list_by_event(self, event_id: int,
                      session: Optional[Session] = None) -> List[Survey]:
        """Surveys of an event."""
        return self.get_all(
            Survey, filters={"event_id": event_id}, order_by=Survey.id,
            session=session
        )

    def count_questions(self, survey_id: int,
                        session: Optional[Session] = None) -> int:
        return self.count(
            SurveyQuestion, filters={"survey_id": survey_id}, session=session
        )

    def has_response_from(self, survey_id: int, participant_id: int,
                          session: Optional[Session] = None) -> bool:
        """Whether a participant already answered the survey."""
        return self.count(
            SurveyResponse,
            filters={"survey_id": survey_id, "participant_id": participant_id},
            session=session
        ) > 0

    def save_response(self, survey_id: int, participant_id: Optional[int],
                      answers: Dict[int, Optional[str]]) -> int:
        """Store a response and its answers.

        Args:
            survey_id: Survey ID.
            participant_id: Responding participant (None when anonymous).
            answers: Question ID to serialized answer text.

        Returns:
            New response ID.
        """
        with self._get_session() as session:
            response = SurveyResponse(
                survey_id=survey_id, participant_id=participant_id
            )
            for question_id, text in answers.items():
                response.answers.append(
                    SurveyAnswer(question_id=question_id, answer_text=text)
                )
            session.add(response)
            session.commit()
            session.refresh(response)
            return response.id

    def list_responses(self, survey_id: int,
                       session: Optional[Session] = None
                       ) -> List[SurveyResponse]:
        """Responses of a survey with their answers eager-loaded."""
        def _query(sess):
            return sess.query(SurveyResponse).options(
                selectinload(SurveyResponse.answers)
            ).filter(
                SurveyResponse.survey_id == survey_id
            ).order_by(SurveyResponse.id).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)
