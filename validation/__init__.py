from .base import Form, ValidationResult, validate

__all__ = ["Form", "ValidationResult", "validate"]
