from flask import request

from feedbackme.extensions import limiter
from feedbackme.services import projects as project_service
from feedbackme.services.policy import current_actor
from . import bp, ok


@bp.post("/projects")
@limiter.limit("20 per minute")
def projects_create():
    project = project_service.create_project(request.get_json(silent=True), current_actor())
    return ok(project.to_dict(), 201)


@bp.get("/projects")
def projects_list():
    return ok([p.to_dict() for p in project_service.list_projects(current_actor())])


@bp.get("/projects/<int:project_id>/stats")
def projects_stats(project_id: int):
    project = project_service.get_owned_project(project_id, current_actor())
    return ok(project_service.project_stats(project.id))
