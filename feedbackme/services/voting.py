"""
Voting engine.

One vote row per (user, feedback item). Re-submitting the same vote type
removes it; submitting the other type switches it. The denormalized
``upvotes`` / ``downvotes`` counters on ``feedback_items`` are moved with a
single ``UPDATE ... SET col = CASE WHEN col + d < 0 THEN 0 ELSE col + d END``
issued in the same transaction as the vote row write, so concurrent voters
never overwrite each other's increments and the counters never go negative.
"""
from __future__ import annotations

from typing import Optional

from flask import current_app
from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError

from feedbackme.extensions import db
from feedbackme.models import FeedbackItem, Vote, VOTE_UP, VOTE_DOWN
from feedbackme.observability import log_event
from feedbackme.utils.validators import validate_vote
from .errors import NotFound
from .policy import require_actor


def _clamped(col, delta: int):
    return case((col + delta < 0, 0), else_=col + delta)


def _apply_deltas(feedback_item_id: int, up: int, down: int) -> None:
    values = {}
    if up:
        values["upvotes"] = _clamped(FeedbackItem.upvotes, up)
    if down:
        values["downvotes"] = _clamped(FeedbackItem.downvotes, down)
    if not values:
        return
    db.session.execute(
        update(FeedbackItem)
        .where(FeedbackItem.id == feedback_item_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )


def _plan(existing: Optional[Vote], vote_type: str):
    """Return (action, up_delta, down_delta) for the requested vote."""
    sign_up = 1 if vote_type == VOTE_UP else 0
    sign_down = 1 if vote_type == VOTE_DOWN else 0
    if existing is None:
        return f"added {vote_type}", sign_up, sign_down
    if existing.vote_type == vote_type:
        return f"removed {vote_type}", -sign_up, -sign_down
    # switching: the requested side gains one, the other side loses one
    return f"changed to {vote_type}", (1 if sign_up else -1), (1 if sign_down else -1)


def _toggle(item_id: int, user_id: int, vote_type: str) -> str:
    existing = Vote.query.filter_by(user_id=user_id, feedback_item_id=item_id).one_or_none()
    action, up, down = _plan(existing, vote_type)

    if existing is None:
        db.session.add(Vote(user_id=user_id, feedback_item_id=item_id, vote_type=vote_type))
    elif existing.vote_type == vote_type:
        db.session.delete(existing)
    else:
        existing.vote_type = vote_type
        existing.created_at = func.now()

    db.session.flush()
    _apply_deltas(item_id, up, down)
    db.session.commit()
    return action


def _counters(item_id: int):
    return db.session.execute(
        select(FeedbackItem.upvotes, FeedbackItem.downvotes).where(FeedbackItem.id == item_id)
    ).one()


def cast_vote(feedback_item_id: int, actor, payload) -> dict:
    actor = require_actor(actor)
    vote_type = validate_vote(payload)

    if db.session.get(FeedbackItem, feedback_item_id) is None:
        raise NotFound("Feedback item not found")

    try:
        action = _toggle(feedback_item_id, actor.id, vote_type)
    except IntegrityError:
        # A parallel request from the same user inserted first; re-run against its row
        db.session.rollback()
        action = _toggle(feedback_item_id, actor.id, vote_type)

    upvotes, downvotes = _counters(feedback_item_id)
    user_vote = None if action.startswith("removed") else vote_type

    log_event(
        current_app.logger,
        "vote_cast",
        feedback_id=feedback_item_id,
        user_id=actor.id,
        action=action,
    )
    return {
        "feedbackId": feedback_item_id,
        "upvotes": upvotes,
        "downvotes": downvotes,
        "userVote": user_vote,
        "action": action,
    }


def get_vote(feedback_item_id: int, actor) -> dict:
    actor = require_actor(actor)
    if db.session.get(FeedbackItem, feedback_item_id) is None:
        raise NotFound("Feedback item not found")

    upvotes, downvotes = _counters(feedback_item_id)
    vote = Vote.query.filter_by(user_id=actor.id, feedback_item_id=feedback_item_id).one_or_none()
    return {
        "feedbackId": feedback_item_id,
        "upvotes": upvotes,
        "downvotes": downvotes,
        "userVote": vote.vote_type if vote else None,
        "votedAt": vote.created_at.isoformat() if vote and vote.created_at else None,
    }


def recount_votes(feedback_item_id: Optional[int] = None) -> int:
    """
    Rebuild counters from the votes table. Returns the number of items whose
    stored counters disagreed with the vote rows.
    """
    up_q = (
        select(func.count(Vote.id))
        .where(Vote.feedback_item_id == FeedbackItem.id, Vote.vote_type == VOTE_UP)
        .scalar_subquery()
    )
    down_q = (
        select(func.count(Vote.id))
        .where(Vote.feedback_item_id == FeedbackItem.id, Vote.vote_type == VOTE_DOWN)
        .scalar_subquery()
    )
    query = db.session.query(FeedbackItem.id, FeedbackItem.upvotes, FeedbackItem.downvotes, up_q, down_q)
    if feedback_item_id is not None:
        query = query.filter(FeedbackItem.id == feedback_item_id)

    fixed = 0
    for item_id, stored_up, stored_down, actual_up, actual_down in query.all():
        if (stored_up, stored_down) == (actual_up, actual_down):
            continue
        db.session.execute(
            update(FeedbackItem)
            .where(FeedbackItem.id == item_id)
            .values(upvotes=actual_up, downvotes=actual_down)
            .execution_options(synchronize_session=False)
        )
        fixed += 1
    db.session.commit()
    if fixed:
        current_app.logger.warning("Vote counters repaired on %d feedback item(s)", fixed)
    return fixed
