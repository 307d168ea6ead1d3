from __future__ import annotations

from flask import current_app
from sqlalchemy import func, or_

from feedbackme.extensions import db
from feedbackme.models import FeedbackItem, Project, STATUS_OPEN
from feedbackme.observability import log_event
from feedbackme.utils.validators import (
    validate_feedback,
    validate_feedback_query,
    validate_status,
    parse_limit,
)
from .errors import AuthorizationDenied, NotFound
from .policy import require_actor


def submit_feedback(payload, actor) -> FeedbackItem:
    actor = require_actor(actor)
    data = validate_feedback(payload)

    # Any signed-in user may post to any active project
    project = db.session.get(Project, data["project_id"])
    if project is None or not project.is_active:
        raise NotFound("Project not found")

    item = FeedbackItem(
        title=data["title"],
        description=data["description"],
        type=data["type"],
        project_id=project.id,
        user_id=actor.id,
        status=STATUS_OPEN,
        upvotes=0,
        downvotes=0,
    )
    db.session.add(item)
    db.session.commit()

    log_event(
        current_app.logger,
        "feedback_submitted",
        feedback_id=item.id,
        project_id=project.id,
        user_id=actor.id,
        type=item.type,
    )
    return item


_SORTS = {
    "newest": (FeedbackItem.created_at.desc(), FeedbackItem.id.desc()),
    "oldest": (FeedbackItem.created_at.asc(), FeedbackItem.id.asc()),
    "most-votes": (
        (FeedbackItem.upvotes + FeedbackItem.downvotes).desc(),
        FeedbackItem.created_at.desc(),
        FeedbackItem.id.desc(),
    ),
    "most-upvotes": (
        FeedbackItem.upvotes.desc(),
        FeedbackItem.created_at.desc(),
        FeedbackItem.id.desc(),
    ),
}


def list_feedback(args) -> dict:
    """
    Public board listing for one project.
    Filters: type, status, q (title/description, case-insensitive).
    Sort: newest (default) | oldest | most-votes | most-upvotes.
    """
    query_args = validate_feedback_query(args)
    cfg = current_app.config
    limit = parse_limit(query_args["limit"], cfg["FEEDBACK_DEFAULT_LIMIT"], cfg["FEEDBACK_MAX_LIMIT"])

    project_id = query_args["project_id"]
    if db.session.get(Project, project_id) is None:
        raise NotFound("Project not found")

    query = FeedbackItem.query.filter(FeedbackItem.project_id == project_id)
    if query_args["type"]:
        query = query.filter(FeedbackItem.type == query_args["type"])
    if query_args["status"]:
        query = query.filter(FeedbackItem.status == query_args["status"])
    if query_args["q"]:
        like = f"%{query_args['q'].lower()}%"
        query = query.filter(
            or_(
                func.lower(FeedbackItem.title).like(like),
                func.lower(FeedbackItem.description).like(like),
            )
        )

    items = query.order_by(*_SORTS[query_args["sort"]]).limit(limit).all()

    current_app.logger.debug("Retrieved %d feedback items for project %d", len(items), project_id)
    return {
        "feedback": [i.to_dict() for i in items],
        "count": len(items),
        "projectId": project_id,
    }


def update_status(feedback_id: int, payload, actor) -> dict:
    """Project owner sets any of open / in-progress / closed; there is no transition table."""
    actor = require_actor(actor)
    status = validate_status(payload)

    row = (
        db.session.query(FeedbackItem, Project.user_id)
        .join(Project, Project.id == FeedbackItem.project_id)
        .filter(FeedbackItem.id == feedback_id)
        .one_or_none()
    )
    if row is None:
        raise NotFound("Feedback item not found")
    item, owner_id = row

    if owner_id != actor.id:
        raise AuthorizationDenied("Unauthorized to update this feedback")

    previous = item.status
    item.status = status
    item.updated_at = func.now()
    db.session.commit()

    log_event(
        current_app.logger,
        "status_changed",
        feedback_id=item.id,
        user_id=actor.id,
        previous_status=previous,
        status=status,
    )
    return {
        "id": item.id,
        "status": item.status,
        "previousStatus": previous,
        "updatedAt": item.updated_at.isoformat() if item.updated_at else None,
    }
