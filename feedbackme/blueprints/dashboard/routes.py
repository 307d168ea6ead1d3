from flask import render_template, redirect, url_for, request
from flask_login import current_user

from feedbackme.models import FeedbackItem
from feedbackme.services import projects as project_service
from feedbackme.services.errors import NotFound
from . import bp

RECENT_FEEDBACK_LIMIT = 50

@bp.before_request
def _require_login_dashboard():
    if current_user.is_authenticated:
        return None
    return redirect(url_for("auth.login_get", next=request.path))


@bp.get("/")
def index():
    projects = project_service.list_projects(current_user)
    return render_template("dashboard/index.html", projects=projects)


@bp.get("/projects/<int:project_id>")
def project_detail(project_id: int):
    try:
        project = project_service.get_owned_project(project_id, current_user)
    except NotFound:
        return redirect(url_for("dashboard.index"))

    stats = project_service.project_stats(project.id)
    recent = (
        FeedbackItem.query
        .filter(FeedbackItem.project_id == project.id)
        .order_by(FeedbackItem.created_at.desc(), FeedbackItem.id.desc())
        .limit(RECENT_FEEDBACK_LIMIT)
        .all()
    )
    return render_template(
        "dashboard/project.html",
        project=project,
        stats=stats,
        feedback=recent,
    )
