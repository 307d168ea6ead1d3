from flask import request

from feedbackme.extensions import limiter
from feedbackme.services import comments as comment_service
from feedbackme.services.policy import current_actor
from . import bp, ok


@bp.get("/comments")
def comments_list():
    return ok(comment_service.list_comments(request.args))


@bp.post("/comments")
@limiter.limit("30 per minute")
def comments_create():
    comment = comment_service.create_comment(request.get_json(silent=True), current_actor())
    return ok({"comment": comment})


@bp.patch("/comments/<int:comment_id>")
def comments_update(comment_id: int):
    return ok(comment_service.update_comment(comment_id, request.get_json(silent=True), current_actor()))


@bp.delete("/comments/<int:comment_id>")
def comments_delete(comment_id: int):
    return ok(comment_service.delete_comment(comment_id, current_actor()))
