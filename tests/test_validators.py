import pytest

from feedbackme.services.errors import ValidationError
from feedbackme.utils import validators as v


def _fields(exc):
    return {d["field"] for d in exc.value.details}


def test_clean_str_collapses_and_trims():
    assert v.clean_str("  hello   world \n") == "hello world"
    assert v.clean_str("   ") is None
    assert v.clean_str(42) is None
    assert v.clean_str("abcdef", max_len=3) == "abc"

@pytest.mark.parametrize("raw,expected", [
    ("example.com", "example.com"),
    ("https://Example.com/some/path?x=1", "example.com"),
    ("app.example.co.uk:8080", "app.example.co.uk:8080"),
    ("localhost:3000", "localhost:3000"),
    ("not a domain", None),
    ("", None),
    (None, None),
])
def test_normalize_domain(raw, expected):
    assert v.normalize_domain(raw) == expected

def test_parse_id_rejects_junk():
    assert v.parse_id("12", "feedback item ID") == 12
    for bad in ("abc", "0", "-3", None, True, 1.5):
        with pytest.raises(ValidationError) as exc:
            v.parse_id(bad, "feedback item ID")
        assert exc.value.message == "Invalid feedback item ID"

def test_parse_limit_defaults_and_caps():
    assert v.parse_limit(None, 50, 100) == 50
    assert v.parse_limit("junk", 50, 100) == 50
    assert v.parse_limit("0", 50, 100) == 1
    assert v.parse_limit("-5", 50, 100) == 1
    assert v.parse_limit("7", 50, 100) == 7
    assert v.parse_limit("500", 50, 100) == 100


def test_validate_waitlist_normalizes_email():
    data = v.validate_waitlist({"fullName": "  Ada Lovelace ", "email": "  Ada@Example.COM "})
    assert data == {"full_name": "Ada Lovelace", "email": "ada@example.com"}

def test_validate_waitlist_reports_each_field():
    with pytest.raises(ValidationError) as exc:
        v.validate_waitlist({"fullName": "A", "email": "nope"})
    assert _fields(exc) == {"fullName", "email"}

def test_validate_waitlist_requires_object():
    with pytest.raises(ValidationError):
        v.validate_waitlist(None)


def test_validate_feedback_bounds():
    ok = v.validate_feedback({
        "title": "Add dark mode",
        "description": "Please add a dark mode toggle",
        "type": "feature",
        "projectId": 1,
    })
    assert ok["project_id"] == 1 and ok["type"] == "feature"

    with pytest.raises(ValidationError) as exc:
        v.validate_feedback({"title": "ab", "description": "too short", "type": "idea", "projectId": "1"})
    assert _fields(exc) == {"title", "description", "type", "projectId"}

def test_validate_feedback_rejects_bool_project_id():
    with pytest.raises(ValidationError) as exc:
        v.validate_feedback({
            "title": "Add dark mode",
            "description": "Please add a dark mode toggle",
            "type": "bug",
            "projectId": True,
        })
    assert _fields(exc) == {"projectId"}

def test_validate_feedback_query():
    q = v.validate_feedback_query({"projectId": "3", "status": "closed", "sort": "most-votes"})
    assert q["project_id"] == 3 and q["status"] == "closed" and q["sort"] == "most-votes"
    assert q["type"] is None

    with pytest.raises(ValidationError) as exc:
        v.validate_feedback_query({})
    assert exc.value.message == "Project ID is required"

    with pytest.raises(ValidationError) as exc:
        v.validate_feedback_query({"projectId": "3", "status": "done", "sort": "random"})
    assert _fields(exc) == {"status", "sort"}


def test_validate_status_and_vote():
    assert v.validate_status({"status": "in-progress"}) == "in-progress"
    with pytest.raises(ValidationError):
        v.validate_status({"status": "archived"})
    assert v.validate_vote({"voteType": "downvote"}) == "downvote"
    with pytest.raises(ValidationError):
        v.validate_vote({"voteType": "meh"})


def test_validate_comment_guest_needs_identity():
    with pytest.raises(ValidationError) as exc:
        v.validate_comment({"content": "Great idea!", "feedbackItemId": 1}, is_guest=True)
    assert _fields(exc) == {"userName", "userEmail"}

    data = v.validate_comment(
        {"content": "Great idea!", "feedbackItemId": 1, "userName": "Guest", "userEmail": "G@Example.com"},
        is_guest=True,
    )
    assert data["user_email"] == "g@example.com"
    assert data["parent_comment_id"] is None

def test_validate_comment_content_length():
    with pytest.raises(ValidationError) as exc:
        v.validate_comment({"content": "hey", "feedbackItemId": 1}, is_guest=False)
    assert _fields(exc) == {"content"}
    with pytest.raises(ValidationError):
        v.validate_comment({"content": "x" * 501, "feedbackItemId": 1}, is_guest=False)

def test_validate_comment_update():
    assert v.validate_comment_update({"content": "Edited text"}) == {"content": "Edited text"}
    assert v.validate_comment_update({"isModerated": True}) == {"is_moderated": True}
    with pytest.raises(ValidationError):
        v.validate_comment_update({})
    with pytest.raises(ValidationError) as exc:
        v.validate_comment_update({"isModerated": "yes"})
    assert _fields(exc) == {"isModerated"}
