from __future__ import annotations

from typing import Tuple

from flask import current_app
from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import aliased
from sqlalchemy.exc import IntegrityError

from feedbackme.extensions import db
from feedbackme.models import WaitlistRegistration
from feedbackme.observability import log_event
from feedbackme.utils.validators import validate_waitlist
from .email import send_waitlist_confirmation


def position_of(reg: WaitlistRegistration) -> int:
    """1-based place in signup order (created_at, then id), from one COUNT query."""
    W = WaitlistRegistration
    # Compare against the stored value, not the loaded datetime; SQLite keeps text
    ref = aliased(W)
    ref_created = select(ref.created_at).where(ref.id == reg.id).scalar_subquery()
    return (
        db.session.query(func.count(W.id))
        .filter(
            or_(
                W.created_at < ref_created,
                and_(W.created_at == ref_created, W.id <= reg.id),
            )
        )
        .scalar()
    )


def _serialize(reg: WaitlistRegistration, position: int) -> dict:
    return {
        "id": reg.id,
        "email": reg.email,
        "position": position,
        "createdAt": reg.created_at.isoformat() if reg.created_at else None,
    }


def register(payload) -> Tuple[dict, bool]:
    """
    Create-or-report-existing by normalized email.
    Returns (data, is_existing).
    """
    data = validate_waitlist(payload)

    existing = WaitlistRegistration.query.filter_by(email=data["email"]).one_or_none()
    if existing is not None:
        return _serialize(existing, position_of(existing)), True

    reg = WaitlistRegistration(full_name=data["full_name"], email=data["email"])
    db.session.add(reg)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with an identical signup; report the winner's row
        db.session.rollback()
        existing = WaitlistRegistration.query.filter_by(email=data["email"]).one()
        return _serialize(existing, position_of(existing)), True

    position = position_of(reg)
    log_event(current_app.logger, "waitlist_registered", registration_id=reg.id, position=position)

    if current_app.config.get("WAITLIST_SEND_CONFIRMATION", True):
        send_waitlist_confirmation(reg, position)

    return _serialize(reg, position), False


def total_registrations() -> int:
    return db.session.query(func.count(WaitlistRegistration.id)).scalar() or 0
