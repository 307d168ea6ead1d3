from flask import request

from feedbackme.extensions import limiter
from feedbackme.services import waitlist as waitlist_service
from . import bp, ok


@bp.post("/waitlist")
@limiter.limit("10 per minute")
def waitlist_join():
    data, is_existing = waitlist_service.register(request.get_json(silent=True))
    if is_existing:
        return ok(data, 200, message="You're already on the waitlist!", isExisting=True)
    return ok(data, 201, message="Successfully joined the waitlist!", isExisting=False)


@bp.get("/waitlist")
def waitlist_count():
    return ok({"totalRegistrations": waitlist_service.total_registrations()})
