from .errors import ValidationError, ValidationIssue
from .session_validation import validate_session_dict

__all__ = ["ValidationError", "ValidationIssue", "validate_session_dict"]
