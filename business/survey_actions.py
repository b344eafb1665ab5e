"""Survey lifecycle, responses and results."""
import json
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger

from database import DatabaseManager
from database.models import Event, Participant, Survey, SurveyResponse
from validation import validate
from validation.surveys import (
    CHOICE_TYPES, NUMERIC_RANGES, SurveyForm, validate_response
)
from .results import ActionResult
from .serialization import row_to_dict

Payload = Optional[Mapping[str, Any]]


def _survey_to_dict(survey: Survey) -> Dict[str, Any]:
    data = row_to_dict(survey)
    data["questions"] = [row_to_dict(q) for q in survey.questions]
    return data


class SurveyActions:
    """Survey mutations.

    A survey moves draft -> active -> closed and can be reopened. Responses
    are accepted only while it is active.
    """

    def __init__(self, db: DatabaseManager) -> None:
        self.db = db

    def create_survey(self, event_id: int, payload: Payload) -> ActionResult:
        """Create a draft survey together with its questions."""
        result = validate(SurveyForm, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)
        form = result.data

        try:
            if self.db.events.get_by_id(Event, event_id) is None:
                return ActionResult.fail("Event not found")
            survey_id = self.db.surveys.create_with_questions(
                event_id,
                form.model_dump(exclude={"questions"}),
                [q.model_dump() for q in form.questions],
            )
            survey = self.db.surveys.get_with_questions(survey_id)
            data = _survey_to_dict(survey)
        except Exception as e:
            logger.error(f"Failed to create survey: {e}")
            return ActionResult.fail("Could not create the survey")

        logger.info(f"Survey {survey_id} created for event {event_id}")
        return ActionResult.ok("Survey created", data)

    def publish_survey(self, survey_id: int) -> ActionResult:
        try:
            survey = self.db.surveys.get_by_id(Survey, survey_id)
            if survey is None:
                return ActionResult.fail("Survey not found")
            if self.db.surveys.count_questions(survey_id) == 0:
                return ActionResult.fail(
                    "Add at least one question before publishing"
                )
            survey = self.db.surveys.update_by_id(
                Survey, survey_id, status="active",
                published_at=datetime.utcnow(), closed_at=None
            )
        except Exception as e:
            logger.error(f"Failed to publish survey {survey_id}: {e}")
            return ActionResult.fail("Could not publish the survey")

        return ActionResult.ok("Survey published", row_to_dict(survey))

    def close_survey(self, survey_id: int) -> ActionResult:
        return self._set_status(
            survey_id, "Survey closed",
            status="closed", closed_at=datetime.utcnow()
        )

    def reopen_survey(self, survey_id: int) -> ActionResult:
        return self._set_status(
            survey_id, "Survey reopened", status="active", closed_at=None
        )

    def duplicate_survey(self, survey_id: int) -> ActionResult:
        """Copy a survey and its questions as a new draft."""
        try:
            source = self.db.surveys.get_with_questions(survey_id)
            if source is None:
                return ActionResult.fail("Survey not found")
            copy_id = self.db.surveys.create_with_questions(
                source.event_id,
                {
                    "title": f"{source.title} (Copy)",
                    "description": source.description,
                    "is_anonymous": source.is_anonymous,
                    "allow_multiple_responses": source.allow_multiple_responses,
                    "status": "draft",
                },
                [
                    {
                        "question_text": q.question_text,
                        "question_type": q.question_type,
                        "options": list(q.options or []),
                        "is_required": q.is_required,
                        "position": q.position,
                    }
                    for q in source.questions
                ],
            )
            data = _survey_to_dict(self.db.surveys.get_with_questions(copy_id))
        except Exception as e:
            logger.error(f"Failed to duplicate survey {survey_id}: {e}")
            return ActionResult.fail("Could not duplicate the survey")

        return ActionResult.ok("Survey duplicated", data)

    def delete_survey(self, survey_id: int) -> ActionResult:
        try:
            deleted = self.db.surveys.delete_by_id(Survey, survey_id)
        except Exception as e:
            logger.error(f"Failed to delete survey {survey_id}: {e}")
            return ActionResult.fail("Could not delete the survey")

        if not deleted:
            return ActionResult.fail("Survey not found")
        return ActionResult.ok("Survey deleted")

    # ================================================================
    # Responses
    # ================================================================

    def submit_response(self, survey_id: int, answers: Mapping[Any, Any],
                        participant_id: Optional[int] = None) -> ActionResult:
        """Validate and store a response.

        Args:
            survey_id: Survey being answered.
            answers: Question ID to raw answer.
            participant_id: Responding participant; ignored for anonymous
                surveys.

        Returns:
            ActionResult with ``{"response_id": ...}`` on success, or the
            per-question errors keyed ``question_<id>``.
        """
        try:
            survey = self.db.surveys.get_with_questions(survey_id)
            if survey is None:
                return ActionResult.fail("Survey not found")
            if survey.status != "active":
                return ActionResult.fail("Survey is not accepting responses")

            if survey.is_anonymous:
                participant_id = None
            elif participant_id is not None:
                participant = self.db.participants.get_by_id(
                    Participant, participant_id
                )
                if participant is None or participant.event_id != survey.event_id:
                    return ActionResult.fail("Participant not found")
                if (not survey.allow_multiple_responses
                        and self.db.surveys.has_response_from(
                            survey_id, participant_id)):
                    return ActionResult.fail(
                        "You have already answered this survey"
                    )

            result = validate_response(survey.questions, answers or {})
            if not result.valid:
                return ActionResult.invalid(result.errors)

            response_id = self.db.surveys.save_response(
                survey_id, participant_id, result.data
            )
        except Exception as e:
            logger.error(f"Failed to save response to survey {survey_id}: {e}")
            return ActionResult.fail("Could not save the response")

        return ActionResult.ok("Response saved", {"response_id": response_id})

    def delete_response(self, response_id: int) -> ActionResult:
        try:
            deleted = self.db.surveys.delete_by_id(SurveyResponse, response_id)
        except Exception as e:
            logger.error(f"Failed to delete response {response_id}: {e}")
            return ActionResult.fail("Could not delete the response")

        if not deleted:
            return ActionResult.fail("Response not found")
        return ActionResult.ok("Response deleted")

    def get_survey_results(self, survey_id: int) -> ActionResult:
        """Per-question tallies of a survey.

        Choice questions get a count per option, numeric questions their
        average and distribution, text questions the list of answers.
        """
        try:
            survey = self.db.surveys.get_with_questions(survey_id)
            if survey is None:
                return ActionResult.fail("Survey not found")
            responses = self.db.surveys.list_responses(survey_id)
        except Exception as e:
            logger.error(f"Failed to load results of survey {survey_id}: {e}")
            return ActionResult.fail("Could not load the survey results")

        answers_by_question: Dict[int, List[str]] = {}
        for response in responses:
            for answer in response.answers:
                if answer.answer_text is not None:
                    answers_by_question.setdefault(
                        answer.question_id, []
                    ).append(answer.answer_text)

        questions = []
        for question in survey.questions:
            texts = answers_by_question.get(question.id, [])
            entry: Dict[str, Any] = {
                "question_id": question.id,
                "question_text": question.question_text,
                "question_type": question.question_type,
                "answers_count": len(texts),
            }
            entry.update(_tally(question.question_type,
                                question.options or [], texts))
            questions.append(entry)

        return ActionResult.ok("Survey results", {
            "survey_id": survey_id,
            "title": survey.title,
            "status": survey.status,
            "responses_count": len(responses),
            "questions": questions,
        })

    def _set_status(self, survey_id: int, message: str,
                    **fields: Any) -> ActionResult:
        try:
            survey = self.db.surveys.update_by_id(Survey, survey_id, **fields)
        except Exception as e:
            logger.error(f"Failed to update survey {survey_id}: {e}")
            return ActionResult.fail("Could not update the survey")

        if survey is None:
            return ActionResult.fail("Survey not found")
        return ActionResult.ok(message, row_to_dict(survey))


def _tally(question_type: str, options: List[str],
           texts: List[str]) -> Dict[str, Any]:
    if question_type in CHOICE_TYPES:
        counts = Counter()
        for text in texts:
            if question_type == "checkboxes":
                counts.update(json.loads(text))
            else:
                counts[text] += 1
        return {"option_counts": {option: counts[option] for option in options}}

    if question_type in NUMERIC_RANGES:
        low, high = NUMERIC_RANGES[question_type]
        values = [int(text) for text in texts]
        distribution = Counter(values)
        return {
            "average": round(sum(values) / len(values), 2) if values else 0,
            "distribution": {
                str(n): distribution[n] for n in range(low, high + 1)
            },
        }

    return {"text_answers": texts}
