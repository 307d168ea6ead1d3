"""
Input validators for every API payload.

Each ``validate_*`` function takes the raw JSON dict (or query args) and
returns a cleaned dict, or raises ``ValidationError`` whose ``details`` is a
list of ``{"field": ..., "message": ...}`` entries, one per failing field.
"""
import re
from typing import Any, Optional
from urllib.parse import urlparse

from feedbackme.models import FEEDBACK_TYPES, FEEDBACK_STATUSES, VOTE_TYPES
from feedbackme.services.errors import ValidationError

# Simple, pragmatic patterns
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_HOSTNAME_RE = re.compile(
    r"^(localhost|(?=.{1,253}$)([a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63})(:\d{1,5})?$"
)

SORT_CHOICES = ("newest", "oldest", "most-votes", "most-upvotes")

def clean_str(val: Any, max_len: int = 255) -> Optional[str]:
    """
    Collapse whitespace, trim, enforce max length. Returns None if empty after cleaning.
    """
    if val is None or not isinstance(val, str):
        return None
    s = re.sub(r"\s+", " ", val).strip()
    if not s:
        return None
    return s[:max_len]

def is_valid_email(val: Optional[str]) -> bool:
    if not val:
        return False
    return bool(_EMAIL_RE.match(val))

def normalize_email(val: Any) -> str:
    return val.strip().lower() if isinstance(val, str) else ""

def normalize_domain(val: Any) -> Optional[str]:
    """
    Accept 'example.com', 'https://example.com/path' or 'Example.com:8080';
    return the lowercased host[:port], or None if it does not look like one.
    """
    if not isinstance(val, str):
        return None
    raw = val.strip().lower()
    if not raw:
        return None
    if "://" not in raw:
        raw = "//" + raw
    try:
        netloc = urlparse(raw).netloc
    except ValueError:
        return None
    netloc = netloc.rsplit("@", 1)[-1]
    if not _HOSTNAME_RE.match(netloc):
        return None
    return netloc

def _positive_int(val: Any) -> Optional[int]:
    # bools are ints in Python; a JSON `true` is not an id
    if isinstance(val, bool):
        return None
    if isinstance(val, int):
        return val if val > 0 else None
    if isinstance(val, str) and val.strip().isdigit():
        n = int(val.strip())
        return n if n > 0 else None
    return None

def parse_id(val: Any, label: str = "ID") -> int:
    """Parse a path/query id; raises ValidationError('Invalid <label>')."""
    n = _positive_int(val)
    if n is None:
        raise ValidationError(f"Invalid {label}")
    return n

def parse_limit(val: Any, default: int, cap: int) -> int:
    """Unparseable values fall back to default; numbers are clamped to [1, cap]."""
    try:
        n = int(val)
    except (TypeError, ValueError):
        return default
    return max(1, min(n, cap))

def _require_obj(data: Any) -> dict:
    if not isinstance(data, dict):
        raise ValidationError("Invalid input data", [{"field": "", "message": "Body must be a JSON object"}])
    return data

def _text(data: dict, field: str, errors: list, *, min_len: int, max_len: int, label: str) -> Optional[str]:
    raw = data.get(field)
    value = raw.strip() if isinstance(raw, str) else None
    if not value:
        errors.append({"field": field, "message": f"{label} is required"})
        return None
    if len(value) < min_len:
        errors.append({"field": field, "message": f"{label} must be at least {min_len} characters"})
        return None
    if len(value) > max_len:
        errors.append({"field": field, "message": f"{label} must be at most {max_len} characters"})
        return None
    return value

def _raise_if(errors: list, message: str) -> None:
    if errors:
        raise ValidationError(message, errors)


# --- entity validators -----------------------------------------------------

def validate_waitlist(data: Any) -> dict:
    data = _require_obj(data)
    errors = []
    full_name = _text(data, "fullName", errors, min_len=2, max_len=200, label="Full name")
    email = normalize_email(data.get("email"))
    if not is_valid_email(email):
        errors.append({"field": "email", "message": "Please enter a valid email address"})
    _raise_if(errors, "Invalid input data")
    return {"full_name": full_name, "email": email}

def validate_project(data: Any) -> dict:
    data = _require_obj(data)
    errors = []
    name = _text(data, "name", errors, min_len=1, max_len=100, label="Project name")

    description = data.get("description")
    if description is not None and not isinstance(description, str):
        errors.append({"field": "description", "message": "Description must be text"})
        description = None
    description = (description or "").strip() or None
    if description and len(description) > 500:
        errors.append({"field": "description", "message": "Description must be at most 500 characters"})

    domain = normalize_domain(data.get("domain"))
    if not domain:
        errors.append({"field": "domain", "message": "Please enter a valid domain"})
    _raise_if(errors, "Validation error")
    return {"name": name, "description": description, "domain": domain}

def validate_feedback(data: Any) -> dict:
    data = _require_obj(data)
    errors = []
    title = _text(data, "title", errors, min_len=3, max_len=200, label="Title")
    description = _text(data, "description", errors, min_len=10, max_len=2000, label="Description")

    ftype = data.get("type")
    if ftype not in FEEDBACK_TYPES:
        errors.append({"field": "type", "message": "Type must be feature, bug, or improvement"})

    project_id = data.get("projectId")
    if isinstance(project_id, bool) or not isinstance(project_id, int) or project_id <= 0:
        errors.append({"field": "projectId", "message": "Invalid project ID"})
    _raise_if(errors, "Validation failed")
    return {"title": title, "description": description, "type": ftype, "project_id": project_id}

def validate_feedback_query(args) -> dict:
    errors = []
    project_id = _positive_int(args.get("projectId"))
    if project_id is None:
        raise ValidationError("Project ID is required")

    ftype = args.get("type") or None
    if ftype is not None and ftype not in FEEDBACK_TYPES:
        errors.append({"field": "type", "message": "Type must be feature, bug, or improvement"})
    status = args.get("status") or None
    if status is not None and status not in FEEDBACK_STATUSES:
        errors.append({"field": "status", "message": "Status must be open, in-progress, or closed"})
    sort = args.get("sort") or "newest"
    if sort not in SORT_CHOICES:
        errors.append({"field": "sort", "message": f"Sort must be one of {', '.join(SORT_CHOICES)}"})
    _raise_if(errors, "Invalid query parameters")
    return {
        "project_id": project_id,
        "type": ftype,
        "status": status,
        "sort": sort,
        "q": clean_str(args.get("q"), max_len=200),
        "limit": args.get("limit"),
    }

def validate_status(data: Any) -> str:
    data = _require_obj(data)
    status = data.get("status")
    if status not in FEEDBACK_STATUSES:
        raise ValidationError(
            "Invalid status value",
            [{"field": "status", "message": "Status must be open, in-progress, or closed"}],
        )
    return status

def validate_vote(data: Any) -> str:
    data = _require_obj(data)
    vote_type = data.get("voteType")
    if vote_type not in VOTE_TYPES:
        raise ValidationError(
            "Validation failed",
            [{"field": "voteType", "message": "Vote type must be upvote or downvote"}],
        )
    return vote_type

def validate_comment(data: Any, *, is_guest: bool) -> dict:
    data = _require_obj(data)
    errors = []
    content = _text(data, "content", errors, min_len=5, max_len=500, label="Comment")

    feedback_item_id = _positive_int(data.get("feedbackItemId"))
    if feedback_item_id is None:
        errors.append({"field": "feedbackItemId", "message": "Invalid feedback item ID"})

    parent_comment_id = None
    if data.get("parentCommentId") is not None:
        parent_comment_id = _positive_int(data.get("parentCommentId"))
        if parent_comment_id is None:
            errors.append({"field": "parentCommentId", "message": "Invalid parent comment ID"})

    user_name = clean_str(data.get("userName"), max_len=100)
    user_email = normalize_email(data.get("userEmail")) or None
    if is_guest:
        if not user_name:
            errors.append({"field": "userName", "message": "Name is required for guest comments"})
        if not is_valid_email(user_email):
            errors.append({"field": "userEmail", "message": "A valid email is required for guest comments"})
    _raise_if(errors, "Invalid comment data")
    return {
        "content": content,
        "feedback_item_id": feedback_item_id,
        "parent_comment_id": parent_comment_id,
        "user_name": user_name,
        "user_email": user_email,
    }

def validate_comment_update(data: Any) -> dict:
    data = _require_obj(data)
    errors = []
    out = {}
    if "content" in data and data["content"] is not None:
        content = _text(data, "content", errors, min_len=5, max_len=500, label="Comment")
        if content is not None:
            out["content"] = content
    if "isModerated" in data and data["isModerated"] is not None:
        if isinstance(data["isModerated"], bool):
            out["is_moderated"] = data["isModerated"]
        else:
            errors.append({"field": "isModerated", "message": "isModerated must be a boolean"})
    if not errors and not out:
        errors.append({"field": "", "message": "Provide content or isModerated"})
    _raise_if(errors, "Invalid update data")
    return out
