from __future__ import annotations

from typing import Any

from rangeview.core.exceptions import RangeSyntaxError
from rangeview.core.range_parser import parse_string
from rangeview.validation.errors import ValidationError, ValidationIssue


def validate_session_dict(obj: Any) -> None:
    """
    Validate a raw session JSON dict before building SessionMetadata from it,
    so a half-valid file never reaches live tables.

    Unknown descriptor shapes are accepted: restoring them is a no-op.
    Only range strings that are present must parse.
    """
    if not isinstance(obj, dict):
        raise ValidationError([ValidationIssue("SESSION_TYPE", "Session metadata must be a JSON object.")])

    issues: list[ValidationIssue] = []

    if not obj.get("session_id"):
        issues.append(ValidationIssue("SESSION_ID", "session_id missing."))

    views = obj.get("views", [])
    if views is None:
        views = []

    if not isinstance(views, list):
        issues.append(ValidationIssue("SESSION_VIEWS_TYPE", "views must be a list."))
        views = []

    for i, v in enumerate(views):
        if not isinstance(v, dict):
            issues.append(ValidationIssue("VIEW_TYPE", f"views[{i}] must be an object."))
            continue
        if not v.get("id"):
            issues.append(ValidationIssue("VIEW_ID", f"views[{i}].id missing."))
        if not v.get("table_key"):
            issues.append(ValidationIssue("VIEW_TABLE_KEY", f"views[{i}].table_key missing."))

        descriptor = v.get("descriptor")
        if isinstance(descriptor, dict) and descriptor.get("range") is not None:
            try:
                parse_string(str(descriptor["range"]))
            except RangeSyntaxError as exc:
                issues.append(ValidationIssue("VIEW_RANGE", f"views[{i}].descriptor.range: {exc}"))

    if issues:
        raise ValidationError(issues)
