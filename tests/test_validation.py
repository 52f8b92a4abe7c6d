# tests/test_validation.py
import pytest

from bugtracker.bug.validation import (
    normalize_bug_fields,
    validate_assignment,
    validate_bug,
    validate_list_query,
    validate_resolution,
)

VALID = {
    "title": "Broken link",
    "description": "The footer link to the docs returns a 404",
    "reporter": "Quinn",
}


def fields_of(errors):
    return [error.field for error in errors]


def test_valid_bug_has_no_errors():
    assert validate_bug(VALID) == []


def test_missing_required_fields():
    errors = validate_bug({})
    assert [(e.field, e.message) for e in errors] == [
        ("title", "Title is required"),
        ("description", "Description is required"),
        ("reporter", "Reporter is required"),
    ]


@pytest.mark.parametrize(
    "field,value",
    [
        ("title", "ab"),
        ("title", "x" * 101),
        ("description", "too short"),
        ("description", "x" * 2001),
        ("reporter", "Q"),
        ("reporter", "x" * 51),
    ],
)
def test_required_field_bounds(field, value):
    errors = validate_bug({**VALID, field: value})
    assert fields_of(errors) == [field]


def test_boundary_lengths_are_accepted():
    data = {"title": "abc", "description": "x" * 10, "reporter": "Jo", "assignee": "x" * 50}
    assert validate_bug(data) == []


def test_optional_text_limits():
    errors = validate_bug(
        {
            **VALID,
            "assignee": "x" * 51,
            "expected_behavior": "x" * 501,
            "actual_behavior": "x" * 501,
            "resolution": "x" * 1001,
            "resolved_by": "x" * 51,
        }
    )
    assert fields_of(errors) == ["assignee", "expectedBehavior", "actualBehavior", "resolution", "resolvedBy"]
    assert errors[0].message == "Assignee name cannot be more than 50 characters"


def test_enum_fields():
    errors = validate_bug(
        {**VALID, "status": "done", "priority": "p1", "category": "infra", "severity": "low", "environment": "qa"}
    )
    assert fields_of(errors) == ["status", "priority", "category", "severity", "environment"]


def test_list_items_report_their_index():
    errors = validate_bug({**VALID, "steps_to_reproduce": ["Open page", "", "x" * 201], "tags": ["ok", "x" * 21]})
    assert fields_of(errors) == ["stepsToReproduce[1]", "stepsToReproduce[2]", "tags[1]"]


def test_lists_must_be_lists():
    errors = validate_bug({**VALID, "tags": "ui", "attachments": "file.png"})
    assert fields_of(errors) == ["tags", "attachments"]


def test_normalize_trims_text_and_list_items():
    data = normalize_bug_fields({"title": "  Title  ", "tags": [" a ", "b"], "priority": " high "})
    assert data == {"title": "Title", "tags": ["a", "b"], "priority": " high "}


def test_assignment_rules():
    assert validate_assignment("Al") == []
    assert validate_assignment("  ")[0].message == "Assignee is required"
    assert validate_assignment(None)[0].message == "Assignee is required"
    assert validate_assignment("A")[0].message == "Assignee name must be between 2 and 50 characters"


def test_resolution_rules():
    assert validate_resolution("Al", "Fixed the thing") == []
    errors = validate_resolution("A", "")
    assert [(e.field, e.message) for e in errors] == [
        ("resolvedBy", "Resolver name must be between 2 and 50 characters"),
        ("resolution", "Resolution is required"),
    ]
    assert fields_of(validate_resolution("Al", "x" * 1001)) == ["resolution"]


def test_list_query_rules():
    assert validate_list_query() == []
    assert validate_list_query(status="open", priority="low", category="ui/ux", page=3, limit=100) == []
    errors = validate_list_query(category="mobile", search="", page=0, limit=500)
    assert fields_of(errors) == ["page", "limit", "category", "search"]
