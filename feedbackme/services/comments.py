"""
Comment threads with moderation.

Comments nest one level: a reply's parent must be a live top-level comment
on the same feedback item. Authors edit their own content; the owner of
the project the item belongs to toggles ``is_moderated``. Deletion is soft:
the row stays, ``is_deleted`` is set and the content is replaced with
``DELETED_PLACEHOLDER``. Once deleted a comment accepts no further change.
"""
from __future__ import annotations

from typing import Dict, Iterable, Optional

from flask import current_app
from sqlalchemy import func

from feedbackme.extensions import db
from feedbackme.models import Comment, FeedbackItem, Project, DELETED_PLACEHOLDER
from feedbackme.observability import log_event
from feedbackme.utils.validators import (
    validate_comment,
    validate_comment_update,
    parse_id,
    parse_limit,
)
from .errors import AlreadyGone, AuthorizationDenied, NotFound, ValidationError
from .policy import require_actor


def _iso(dt):
    return dt.isoformat() if dt else None


def _user_block(comment: Comment) -> dict:
    author = comment.author if comment.user_id else None
    return {
        "id": comment.user_id,
        "name": (author.name if author else None) or comment.user_name or "Anonymous",
        "email": comment.user_email,
        "image": author.image if author else None,
        "isAuthenticated": bool(comment.user_id),
    }


def serialize_comment(comment: Comment, reply_count: Optional[int] = None) -> dict:
    out = {
        "id": comment.id,
        "content": comment.content,
        "feedbackItemId": comment.feedback_item_id,
        "parentCommentId": comment.parent_comment_id,
        "isModerated": comment.is_moderated,
        "createdAt": _iso(comment.created_at),
        "updatedAt": _iso(comment.updated_at),
        "user": _user_block(comment),
    }
    if reply_count is not None:
        out["replyCount"] = reply_count
    return out


def reply_counts(comment_ids: Iterable[int]) -> Dict[int, int]:
    """Live reply count per parent id, from one grouped query."""
    ids = list(comment_ids)
    if not ids:
        return {}
    rows = (
        db.session.query(Comment.parent_comment_id, func.count(Comment.id))
        .filter(Comment.parent_comment_id.in_(ids), Comment.is_deleted.is_(False))
        .group_by(Comment.parent_comment_id)
        .all()
    )
    counts = {pid: 0 for pid in ids}
    counts.update({pid: int(n) for pid, n in rows})
    return counts


def list_comments(args) -> dict:
    raw_item_id = args.get("feedbackItemId")
    if not raw_item_id:
        raise ValidationError("Feedback item ID is required")
    feedback_item_id = parse_id(raw_item_id, "feedback item ID")

    parent_comment_id = None
    if args.get("parentCommentId"):
        parent_comment_id = parse_id(args.get("parentCommentId"), "parent comment ID")

    cfg = current_app.config
    limit = parse_limit(args.get("limit"), cfg["COMMENTS_DEFAULT_LIMIT"], cfg["COMMENTS_MAX_LIMIT"])

    if db.session.get(FeedbackItem, feedback_item_id) is None:
        raise NotFound("Feedback item not found")

    query = Comment.query.filter(
        Comment.feedback_item_id == feedback_item_id,
        Comment.is_deleted.is_(False),
    )
    if parent_comment_id is not None:
        query = query.filter(Comment.parent_comment_id == parent_comment_id)
    else:
        query = query.filter(Comment.parent_comment_id.is_(None))

    rows = query.order_by(Comment.created_at.desc(), Comment.id.desc()).limit(limit).all()

    if parent_comment_id is None:
        counts = reply_counts(c.id for c in rows)
        comments = [serialize_comment(c, counts.get(c.id, 0)) for c in rows]
    else:
        comments = [serialize_comment(c) for c in rows]

    return {
        "comments": comments,
        "total": len(comments),
        "feedbackItemId": feedback_item_id,
        "parentCommentId": parent_comment_id,
    }


def create_comment(payload, actor) -> dict:
    """Signed-in users post as themselves; guests must leave a name and email."""
    data = validate_comment(payload, is_guest=actor is None)
    item_id = data["feedback_item_id"]

    if db.session.get(FeedbackItem, item_id) is None:
        raise NotFound("Feedback item not found")

    parent_id = data["parent_comment_id"]
    if parent_id is not None:
        parent = Comment.query.filter_by(
            id=parent_id, feedback_item_id=item_id, is_deleted=False
        ).one_or_none()
        if parent is None:
            raise NotFound("Parent comment not found")
        if parent.parent_comment_id is not None:
            raise ValidationError(
                "Replies cannot be nested",
                [{"field": "parentCommentId", "message": "Reply to a top-level comment"}],
            )

    if actor is not None:
        user_id = actor.id
        user_name = actor.name or data["user_name"]
        user_email = actor.email or data["user_email"]
    else:
        user_id, user_name, user_email = None, data["user_name"], data["user_email"]

    comment = Comment(
        content=data["content"],
        feedback_item_id=item_id,
        parent_comment_id=parent_id,
        user_id=user_id,
        user_name=user_name,
        user_email=user_email,
        is_moderated=False,
        is_deleted=False,
    )
    db.session.add(comment)
    db.session.commit()

    log_event(
        current_app.logger,
        "comment_created",
        comment_id=comment.id,
        feedback_id=item_id,
        parent_comment_id=parent_id,
        user_id=user_id,
        guest=user_id is None,
    )
    return serialize_comment(comment, 0)


def _load_with_owner(comment_id: int):
    row = (
        db.session.query(Comment, Project.user_id)
        .join(FeedbackItem, FeedbackItem.id == Comment.feedback_item_id)
        .join(Project, Project.id == FeedbackItem.project_id)
        .filter(Comment.id == comment_id)
        .one_or_none()
    )
    if row is None:
        raise NotFound("Comment not found")
    return row


def update_comment(comment_id: int, payload, actor) -> dict:
    actor = require_actor(actor)
    changes = validate_comment_update(payload)
    comment, project_owner_id = _load_with_owner(comment_id)

    is_author = comment.user_id is not None and comment.user_id == actor.id
    is_project_owner = project_owner_id == actor.id

    if "content" in changes and not is_author:
        raise AuthorizationDenied("Only comment owner can edit content")
    if "is_moderated" in changes and not is_project_owner:
        raise AuthorizationDenied("Only project owner can moderate comments")
    if comment.is_deleted:
        raise AlreadyGone("Cannot update deleted comment")

    previous_content = comment.content
    if "content" in changes:
        comment.content = changes["content"]
    if "is_moderated" in changes:
        comment.is_moderated = changes["is_moderated"]
    comment.updated_at = func.now()
    db.session.commit()

    log_event(
        current_app.logger,
        "comment_updated",
        comment_id=comment.id,
        user_id=actor.id,
        fields=sorted(changes),
    )
    out = {
        "comment": {
            "id": comment.id,
            "content": comment.content,
            "isModerated": comment.is_moderated,
            "updatedAt": _iso(comment.updated_at),
        }
    }
    if "content" in changes:
        out["previousContent"] = previous_content
    return out


def delete_comment(comment_id: int, actor) -> dict:
    actor = require_actor(actor)
    comment, project_owner_id = _load_with_owner(comment_id)

    is_author = comment.user_id is not None and comment.user_id == actor.id
    is_project_owner = project_owner_id == actor.id

    if not (is_author or is_project_owner):
        raise AuthorizationDenied("Unauthorized to delete this comment")
    if comment.is_deleted:
        raise AlreadyGone("Comment already deleted")

    comment.is_deleted = True
    comment.content = DELETED_PLACEHOLDER
    comment.updated_at = func.now()
    db.session.commit()

    deleted_by = "project_owner" if is_project_owner else "comment_owner"
    log_event(
        current_app.logger,
        "comment_deleted",
        comment_id=comment.id,
        user_id=actor.id,
        deleted_by=deleted_by,
    )
    return {
        "comment": {
            "id": comment.id,
            "isDeleted": comment.is_deleted,
            "updatedAt": _iso(comment.updated_at),
        },
        "deletedBy": deleted_by,
    }
