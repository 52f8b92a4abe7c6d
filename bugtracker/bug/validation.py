# bugtracker/bug/validation.py
"""Field rules for bugs, as pure functions over plain dicts.

Every validator collects all violations in one pass and returns them as a
list of ``FieldError``; an empty list means the input is valid. Field names
in the errors are the camelCase names clients send.
"""
from typing import Any

from bugtracker.bug.models import CATEGORIES, ENVIRONMENTS, PRIORITIES, SEVERITIES, STATUSES
from bugtracker.core.errors import FieldError

WIRE_NAMES = {
    "steps_to_reproduce": "stepsToReproduce",
    "expected_behavior": "expectedBehavior",
    "actual_behavior": "actualBehavior",
    "resolved_by": "resolvedBy",
    "resolved_at": "resolvedAt",
}

TEXT_FIELDS = (
    "title",
    "description",
    "assignee",
    "reporter",
    "expected_behavior",
    "actual_behavior",
    "resolution",
    "resolved_by",
)
LIST_FIELDS = ("steps_to_reproduce", "tags")

# field -> (min, max, label); min of None means the field is optional
LENGTH_RULES = {
    "title": (3, 100, "Title"),
    "description": (10, 2000, "Description"),
    "reporter": (2, 50, "Reporter name"),
    "assignee": (None, 50, "Assignee name"),
    "expected_behavior": (None, 500, "Expected behavior"),
    "actual_behavior": (None, 500, "Actual behavior"),
    "resolution": (None, 1000, "Resolution"),
    "resolved_by": (None, 50, "Resolver name"),
}
REQUIRED_MESSAGES = {
    "title": "Title is required",
    "description": "Description is required",
    "reporter": "Reporter is required",
}

ENUM_RULES = {
    "status": (STATUSES, "Status must be one of: open, in-progress, resolved, closed"),
    "priority": (PRIORITIES, "Priority must be one of: low, medium, high, critical"),
    "category": (CATEGORIES, "Category must be one of the predefined values"),
    "severity": (SEVERITIES, "Severity must be one of: minor, major, critical, blocker"),
    "environment": (ENVIRONMENTS, "Environment must be one of: development, staging, production"),
}

ITEM_RULES = {
    "steps_to_reproduce": (1, 200, "Steps to reproduce must be an array", "Each step must be between 1 and 200 characters"),
    "tags": (1, 20, "Tags must be an array", "Each tag must be between 1 and 20 characters"),
}

MAX_LIMIT = 100


def wire_name(field: str) -> str:
    return WIRE_NAMES.get(field, field)


def normalize_bug_fields(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with text fields and list items trimmed."""
    normalized = dict(data)
    for field in TEXT_FIELDS:
        value = normalized.get(field)
        if isinstance(value, str):
            normalized[field] = value.strip()
    for field in LIST_FIELDS:
        value = normalized.get(field)
        if isinstance(value, list):
            normalized[field] = [item.strip() if isinstance(item, str) else item for item in value]
    return normalized


def _check_length(field: str, value: Any, errors: list[FieldError]) -> None:
    min_len, max_len, label = LENGTH_RULES[field]
    name = wire_name(field)
    if value is None or value == "":
        if field in REQUIRED_MESSAGES:
            errors.append(FieldError(name, REQUIRED_MESSAGES[field]))
        return
    if not isinstance(value, str):
        errors.append(FieldError(name, f"{label} must be a string"))
        return
    if min_len is None:
        if len(value) > max_len:
            errors.append(FieldError(name, f"{label} cannot be more than {max_len} characters"))
    elif not min_len <= len(value) <= max_len:
        errors.append(FieldError(name, f"{label} must be between {min_len} and {max_len} characters"))


def validate_bug(data: dict[str, Any]) -> list[FieldError]:
    """Check a complete (merged) bug against every field rule."""
    errors: list[FieldError] = []

    for field in LENGTH_RULES:
        _check_length(field, data.get(field), errors)

    # present enum fields must hold an allowed value; absent ones take their defaults
    for field, (allowed, message) in ENUM_RULES.items():
        if field in data and data[field] not in allowed:
            errors.append(FieldError(field, message))

    for field, (min_len, max_len, type_message, item_message) in ITEM_RULES.items():
        if field not in data:
            continue
        items = data[field]
        if not isinstance(items, list):
            errors.append(FieldError(wire_name(field), type_message))
            continue
        for index, item in enumerate(items):
            if not isinstance(item, str) or not min_len <= len(item) <= max_len:
                errors.append(FieldError(f"{wire_name(field)}[{index}]", item_message))

    attachments = data.get("attachments", [])
    if not isinstance(attachments, list) or not all(isinstance(item, str) for item in attachments):
        errors.append(FieldError("attachments", "Attachments must be an array of strings"))

    return errors


def validate_assignment(assignee: Any) -> list[FieldError]:
    if isinstance(assignee, str):
        assignee = assignee.strip()
    if not assignee:
        return [FieldError("assignee", "Assignee is required")]
    if not isinstance(assignee, str) or not 2 <= len(assignee) <= 50:
        return [FieldError("assignee", "Assignee name must be between 2 and 50 characters")]
    return []


def validate_resolution(resolved_by: Any, resolution: Any) -> list[FieldError]:
    errors: list[FieldError] = []
    rules = (
        ("resolvedBy", resolved_by, 2, 50, "Resolver name is required", "Resolver name must be between 2 and 50 characters"),
        ("resolution", resolution, 10, 1000, "Resolution is required", "Resolution must be between 10 and 1000 characters"),
    )
    for name, value, min_len, max_len, required, bounds in rules:
        if isinstance(value, str):
            value = value.strip()
        if not value:
            errors.append(FieldError(name, required))
        elif not isinstance(value, str) or not min_len <= len(value) <= max_len:
            errors.append(FieldError(name, bounds))
    return errors


def validate_list_query(
    status: str | None = None,
    priority: str | None = None,
    category: str | None = None,
    assignee: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> list[FieldError]:
    errors: list[FieldError] = []
    if not isinstance(page, int) or page < 1:
        errors.append(FieldError("page", "Page must be a positive integer"))
    if not isinstance(limit, int) or not 1 <= limit <= MAX_LIMIT:
        errors.append(FieldError("limit", f"Limit must be between 1 and {MAX_LIMIT}"))
    for field, value in (("status", status), ("priority", priority), ("category", category)):
        allowed, message = ENUM_RULES[field]
        if value is not None and value not in allowed:
            errors.append(FieldError(field, message))
    if assignee is not None and not 1 <= len(assignee.strip()) <= 50:
        errors.append(FieldError("assignee", "Assignee name must be between 1 and 50 characters"))
    if search is not None and not 1 <= len(search.strip()) <= 100:
        errors.append(FieldError("search", "Search term must be between 1 and 100 characters"))
    return errors
