from __future__ import annotations

import secrets
from typing import List

from flask import current_app
from sqlalchemy import func, case

from feedbackme.extensions import db
from feedbackme.models import (
    Project,
    FeedbackItem,
    TYPE_FEATURE,
    TYPE_BUG,
    TYPE_IMPROVEMENT,
    STATUS_OPEN,
    STATUS_IN_PROGRESS,
    STATUS_CLOSED,
)
from feedbackme.observability import log_event
from feedbackme.utils.validators import validate_project
from .errors import NotFound
from .policy import require_actor

# 24 random bytes -> 32 url-safe characters
_API_KEY_BYTES = 24


def generate_api_key() -> str:
    prefix = current_app.config.get("API_KEY_PREFIX", "fbme_")
    return f"{prefix}{secrets.token_urlsafe(_API_KEY_BYTES)}"


def create_project(payload, actor) -> Project:
    actor = require_actor(actor)
    data = validate_project(payload)

    project = Project(
        name=data["name"],
        description=data["description"],
        domain=data["domain"],
        api_key=generate_api_key(),
        user_id=actor.id,
        is_active=True,
    )
    db.session.add(project)
    db.session.commit()

    log_event(current_app.logger, "project_created", project_id=project.id, user_id=actor.id)
    return project


def list_projects(actor) -> List[Project]:
    actor = require_actor(actor)
    return (
        Project.query
        .filter(Project.user_id == actor.id)
        .order_by(Project.created_at.asc(), Project.id.asc())
        .all()
    )


def get_owned_project(project_id: int, actor) -> Project:
    """Owner-only lookup. Someone else's project is reported as missing (anti-enumeration)."""
    actor = require_actor(actor)
    project = Project.query.filter_by(id=project_id, user_id=actor.id).one_or_none()
    if project is None:
        raise NotFound("Project not found")
    return project


def set_active(project_id: int, is_active: bool) -> Project:
    project = db.session.get(Project, project_id)
    if project is None:
        raise NotFound(f"Project {project_id} not found")
    project.is_active = bool(is_active)
    db.session.commit()
    log_event(current_app.logger, "project_active_changed", project_id=project.id, is_active=project.is_active)
    return project


def _count_where(cond):
    return func.coalesce(func.sum(case((cond, 1), else_=0)), 0)


def project_stats(project_id: int) -> dict:
    """
    Dashboard aggregates for one project, in a single query:
    totals, per-type and per-status counts.
    """
    row = (
        db.session.query(
            func.count(FeedbackItem.id),
            func.coalesce(func.sum(FeedbackItem.upvotes + FeedbackItem.downvotes), 0),
            _count_where(FeedbackItem.type == TYPE_FEATURE),
            _count_where(FeedbackItem.type == TYPE_BUG),
            _count_where(FeedbackItem.type == TYPE_IMPROVEMENT),
            _count_where(FeedbackItem.status == STATUS_OPEN),
            _count_where(FeedbackItem.status == STATUS_IN_PROGRESS),
            _count_where(FeedbackItem.status == STATUS_CLOSED),
        )
        .filter(FeedbackItem.project_id == project_id)
        .one()
    )
    keys = (
        "totalFeedback",
        "totalVotes",
        "featureRequests",
        "bugReports",
        "improvements",
        "openItems",
        "inProgressItems",
        "closedItems",
    )
    return {k: int(v or 0) for k, v in zip(keys, row)}
