"""Survey schemas and answer validation.

Answers are stored as text: choice answers verbatim, checkbox answers as a
JSON list, numeric answers as their decimal string.
"""
import json
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence

from pydantic import Field

from .base import Form, ValidationResult

QuestionType = Literal[
    "multiple_choice", "checkboxes", "text", "textarea", "rating", "scale"
]
SurveyStatus = Literal["draft", "active", "closed"]

CHOICE_TYPES = ("multiple_choice", "checkboxes")
NUMERIC_RANGES = {"rating": (1, 5), "scale": (1, 10)}
TEXT_LIMITS = {"text": 500, "textarea": 5000}


class QuestionForm(Form):
    question_text: str = Field(min_length=3, max_length=500)
    question_type: QuestionType
    options: List[str] = Field(default_factory=list)
    is_required: bool = False

    def cross_field_errors(self) -> Dict[str, List[str]]:
        if self.question_type in CHOICE_TYPES:
            options = [o for o in self.options if o and o.strip()]
            if len(options) < 2:
                return {"options": ["Choice questions need at least 2 options"]}
        return {}


class SurveyForm(Form):
    title: str = Field(min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    is_anonymous: bool = False
    allow_multiple_responses: bool = False
    questions: List[QuestionForm] = Field(default_factory=list)

    def cross_field_errors(self) -> Dict[str, List[str]]:
        errors = {}
        for index, question in enumerate(self.questions):
            for name, messages in question.cross_field_errors().items():
                errors[f"questions.{index}.{name}"] = messages
        return errors


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _check_value(question_type: str, options: Sequence[str],
                 value: Any) -> str:
    """Normalize one non-blank answer or raise ValueError."""
    if question_type in TEXT_LIMITS:
        text = str(value).strip()
        limit = TEXT_LIMITS[question_type]
        if len(text) > limit:
            raise ValueError(f"Answer must be at most {limit} characters")
        return text

    if question_type in NUMERIC_RANGES:
        low, high = NUMERIC_RANGES[question_type]
        try:
            number = int(str(value).strip())
        except ValueError:
            raise ValueError("Answer must be a whole number")
        if not low <= number <= high:
            raise ValueError(f"Answer must be between {low} and {high}")
        return str(number)

    if question_type == "multiple_choice":
        choice = str(value).strip()
        if choice not in options:
            raise ValueError("Answer is not one of the available options")
        return choice

    if question_type == "checkboxes":
        choices = value
        if isinstance(value, str):
            try:
                choices = json.loads(value)
            except json.JSONDecodeError:
                raise ValueError("Checkbox answers must be a JSON list")
        if not isinstance(choices, (list, tuple)):
            raise ValueError("Checkbox answers must be a list")
        invalid = [c for c in choices if c not in options]
        if invalid:
            raise ValueError("Answer is not one of the available options")
        return json.dumps(list(choices))

    raise ValueError(f"Unknown question type: {question_type}")


def validate_answer(question: Any, value: Any) -> ValidationResult:
    """Validate the answer to one question.

    Args:
        question: Object with ``question_type``, ``options`` and
            ``is_required`` attributes.
        value: Raw answer.

    Returns:
        Valid result whose ``data`` is the stored text (None for a skipped
        optional question), or an invalid result keyed by ``answer``.
    """
    if _is_blank(value):
        if question.is_required:
            return ValidationResult(
                valid=False, errors={"answer": ["This question is required"]}
            )
        return ValidationResult(valid=True, data=None)

    try:
        text = _check_value(
            question.question_type, question.options or [], value
        )
    except ValueError as exc:
        return ValidationResult(valid=False, errors={"answer": [str(exc)]})
    return ValidationResult(valid=True, data=text)


def validate_response(questions: Sequence[Any],
                      answers: Mapping[Any, Any]) -> ValidationResult:
    """Validate a whole response.

    Args:
        questions: The survey's questions.
        answers: Question ID (int or numeric string) to raw answer.

    Returns:
        Valid result whose ``data`` maps question ID to stored text, or an
        invalid result keyed by ``question_<id>``.
    """
    normalized = {int(k): v for k, v in answers.items()}
    stored: Dict[int, Optional[str]] = {}
    errors: Dict[str, List[str]] = {}

    for question in questions:
        result = validate_answer(question, normalized.get(question.id))
        if not result.valid:
            errors[f"question_{question.id}"] = result.errors["answer"]
        elif result.data is not None:
            stored[question.id] = result.data

    if errors:
        return ValidationResult(valid=False, errors=errors)
    return ValidationResult(valid=True, data=stored)
