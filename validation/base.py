"""Validation primitives.

Payloads arrive as flat mappings of field name to raw value (form fields or
JSON bodies). ``validate`` turns one into either a typed pydantic model or a
mapping of field name to error messages. It never touches the store.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

FormT = TypeVar("FormT", bound="Form")

FORM_ERRORS_KEY = "__all__"


class Form(BaseModel):
    """Base class of all input schemas.

    Blank strings are treated as missing, so an empty optional field takes its
    default (an empty fee becomes 0) and an empty required field is reported
    as required.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_values(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {
                key: value for key, value in data.items()
                if not (isinstance(value, str) and not value.strip())
            }
        return data

    def cross_field_errors(self) -> Dict[str, List[str]]:
        """Rules spanning several fields, run after field validation passes.

        Returns:
            Field name to messages; empty when every rule holds.
        """
        return {}

    def provided(self) -> Dict[str, Any]:
        """Only the fields present in the payload."""
        return self.model_dump(exclude_unset=True)


@dataclass
class ValidationResult(Generic[FormT]):
    """Outcome of ``validate``.

    Attributes:
        valid: Whether the payload passed every rule.
        data: The parsed model when valid.
        errors: Field name to messages when invalid.
    """
    valid: bool
    data: Optional[FormT] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        if self.valid:
            return {"valid": True, "data": self.data.model_dump()}
        return {"valid": False, "errors": self.errors}


def collect_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """Flatten a pydantic ValidationError into field -> messages."""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        name = ".".join(str(part) for part in error["loc"]) or FORM_ERRORS_KEY
        message = error["msg"]
        if error["type"] == "value_error" and message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(name, []).append(message)
    return errors


def validate(schema: Type[FormT],
             payload: Optional[Mapping[str, Any]]) -> ValidationResult[FormT]:
    """Validate a raw payload against a schema.

    Args:
        schema: Form subclass.
        payload: Raw field mapping (None is treated as empty).

    Returns:
        ``ValidationResult(valid=True, data=...)`` or
        ``ValidationResult(valid=False, errors={field: [messages]})``.
    """
    try:
        data = schema.model_validate(dict(payload or {}))
    except ValidationError as exc:
        return ValidationResult(valid=False, errors=collect_errors(exc))

    cross_errors = data.cross_field_errors()
    if cross_errors:
        return ValidationResult(valid=False, errors=cross_errors)
    return ValidationResult(valid=True, data=data)
