"""SurveyActions tests - lifecycle, responses and results."""
import pytest

from business.people_actions import ParticipantActions
from business.survey_actions import SurveyActions
from database.models import Survey

SURVEY = {
    "title": "Post-event feedback",
    "questions": [
        {"question_text": "Overall rating", "question_type": "rating",
         "is_required": True},
        {"question_text": "Best part", "question_type": "checkboxes",
         "options": ["Talks", "Food", "Venue"]},
        {"question_text": "Would you come back?",
         "question_type": "multiple_choice", "options": ["Yes", "No"]},
        {"question_text": "Comments", "question_type": "textarea"},
    ],
}


@pytest.fixture
def actions(temp_db):
    return SurveyActions(temp_db)


@pytest.fixture
def active_survey(actions, event):
    survey = actions.create_survey(event.id, SURVEY).data
    actions.publish_survey(survey["id"])
    return survey


def _ids(survey):
    return [q["id"] for q in survey["questions"]]


class TestLifecycle:

    def test_create(self, actions, event):
        result = actions.create_survey(event.id, SURVEY)

        assert result.message == "Survey created"
        assert result.data["status"] == "draft"
        assert [q["position"] for q in result.data["questions"]] == [0, 1, 2, 3]
        assert result.data["questions"][1]["options"] == ["Talks", "Food", "Venue"]

    def test_create_invalid_question(self, actions, event):
        payload = {"title": "Quick poll", "questions": [
            {"question_text": "Pick one", "question_type": "multiple_choice",
             "options": ["Only"]},
        ]}
        result = actions.create_survey(event.id, payload)
        assert "questions.0.options" in result.errors

    def test_publish_requires_questions(self, actions, event):
        survey = actions.create_survey(event.id, {"title": "Empty survey"}).data
        result = actions.publish_survey(survey["id"])
        assert result.message == "Add at least one question before publishing"

    def test_publish_close_reopen(self, actions, event, temp_db):
        survey = actions.create_survey(event.id, SURVEY).data

        published = actions.publish_survey(survey["id"])
        assert published.data["status"] == "active"
        assert published.data["published_at"] is not None

        closed = actions.close_survey(survey["id"])
        assert closed.data["status"] == "closed"
        assert closed.data["closed_at"] is not None

        reopened = actions.reopen_survey(survey["id"])
        assert reopened.data["status"] == "active"
        assert reopened.data["closed_at"] is None

    def test_duplicate(self, actions, active_survey):
        result = actions.duplicate_survey(active_survey["id"])

        assert result.data["title"] == "Post-event feedback (Copy)"
        assert result.data["status"] == "draft"
        assert len(result.data["questions"]) == 4
        assert result.data["id"] != active_survey["id"]

    def test_delete(self, actions, event, temp_db):
        survey = actions.create_survey(event.id, SURVEY).data
        assert actions.delete_survey(survey["id"]).success
        assert temp_db.surveys.get_by_id(Survey, survey["id"]) is None
        assert actions.delete_survey(survey["id"]).message == "Survey not found"


class TestResponses:

    def test_draft_survey_rejects_responses(self, actions, event):
        survey = actions.create_survey(event.id, SURVEY).data
        result = actions.submit_response(survey["id"], {})
        assert result.message == "Survey is not accepting responses"

    def test_required_answer(self, actions, active_survey):
        rating_id = _ids(active_survey)[0]
        result = actions.submit_response(active_survey["id"], {})
        assert result.errors == {
            f"question_{rating_id}": ["This question is required"]
        }

    def test_participant_answers_once(self, actions, active_survey, temp_db,
                                      event):
        participant = ParticipantActions(temp_db).create_participant(
            event.id,
            {"first_name": "Anna", "last_name": "Verdi", "email": "anna@acme.com"},
        ).data
        answers = {_ids(active_survey)[0]: "4"}

        first = actions.submit_response(
            active_survey["id"], answers, participant["id"]
        )
        second = actions.submit_response(
            active_survey["id"], answers, participant["id"]
        )

        assert first.message == "Response saved"
        assert "response_id" in first.data
        assert second.message == "You have already answered this survey"

    def test_unknown_participant(self, actions, active_survey):
        result = actions.submit_response(
            active_survey["id"], {_ids(active_survey)[0]: "4"}, participant_id=99
        )
        assert result.message == "Participant not found"

    def test_delete_response(self, actions, active_survey):
        saved = actions.submit_response(
            active_survey["id"], {_ids(active_survey)[0]: "4"}
        ).data
        assert actions.delete_response(saved["response_id"]).success
        assert not actions.delete_response(saved["response_id"]).success


class TestResults:

    def test_tallies(self, actions, active_survey):
        rating, best, again, comments = _ids(active_survey)
        actions.submit_response(active_survey["id"], {
            rating: "5", best: ["Talks", "Food"], again: "Yes",
            comments: "Great talks",
        })
        actions.submit_response(active_survey["id"], {
            rating: "4", best: ["Talks"], again: "No",
        })

        result = actions.get_survey_results(active_survey["id"])

        assert result.data["responses_count"] == 2
        by_id = {q["question_id"]: q for q in result.data["questions"]}
        assert by_id[rating]["average"] == 4.5
        assert by_id[rating]["distribution"] == {
            "1": 0, "2": 0, "3": 0, "4": 1, "5": 1
        }
        assert by_id[best]["option_counts"] == {"Talks": 2, "Food": 1, "Venue": 0}
        assert by_id[again]["option_counts"] == {"Yes": 1, "No": 1}
        assert by_id[comments]["text_answers"] == ["Great talks"]
        assert by_id[comments]["answers_count"] == 1

    def test_no_responses(self, actions, active_survey):
        result = actions.get_survey_results(active_survey["id"])
        rating = result.data["questions"][0]
        assert rating["average"] == 0
        assert rating["answers_count"] == 0

    def test_missing_survey(self, actions):
        assert actions.get_survey_results(5).message == "Survey not found"
