from flask import request

from feedbackme.extensions import limiter
from feedbackme.services import feedback as feedback_service
from feedbackme.services import voting
from feedbackme.services.policy import current_actor
from . import bp, ok


@bp.post("/feedback")
@limiter.limit("20 per minute")
def feedback_submit():
    item = feedback_service.submit_feedback(request.get_json(silent=True), current_actor())
    return ok(item.to_dict(), message="Feedback submitted successfully")


@bp.get("/feedback")
def feedback_list():
    return ok(feedback_service.list_feedback(request.args))


@bp.patch("/feedback/<int:feedback_id>/status")
def feedback_status(feedback_id: int):
    return ok(feedback_service.update_status(feedback_id, request.get_json(silent=True), current_actor()))


@bp.post("/feedback/<int:feedback_id>/vote")
@limiter.limit("60 per minute")
def feedback_vote(feedback_id: int):
    result = voting.cast_vote(feedback_id, current_actor(), request.get_json(silent=True))
    return ok(result, message=f"Vote {result['action']} successfully")


@bp.get("/feedback/<int:feedback_id>/vote")
def feedback_vote_get(feedback_id: int):
    return ok(voting.get_vote(feedback_id, current_actor()))
