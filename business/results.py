"""Result type returned by every mutation entry point."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ActionResult:
    """Outcome of a mutation.

    Attributes:
        success: Whether the primary write went through.
        message: Short user-facing message.
        data: Payload on success (usually the affected row as a dict).
        errors: Field name to messages on validation failure.
    """
    success: bool
    message: Optional[str] = None
    data: Any = None
    errors: Optional[Dict[str, List[str]]] = None

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "ActionResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str,
             errors: Optional[Dict[str, List[str]]] = None) -> "ActionResult":
        return cls(success=False, message=message, errors=errors)

    @classmethod
    def invalid(cls, errors: Dict[str, List[str]]) -> "ActionResult":
        return cls(success=False, message="Validation errors", errors=errors)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success}
        if self.message is not None:
            result["message"] = self.message
        if self.data is not None:
            result["data"] = self.data
        if self.errors:
            result["errors"] = self.errors
        return result
