import click
from flask.cli import with_appcontext
from sqlalchemy import func

from feedbackme.extensions import db
from feedbackme.models.user import User
from feedbackme.services import projects as project_service
from feedbackme.services import voting as voting_service
from feedbackme.services.errors import NotFound


@click.group()
def users():
    """User management."""

@users.command("create")
@click.option("--email", required=True)
@click.option("--password", required=True)
@click.option("--name", default=None)
@with_appcontext
def users_create(email, password, name):
    email = email.strip().lower()
    if db.session.query(User).filter(func.lower(User.email) == email).count():
        raise click.ClickException("User already exists")

    user = User(email=email, name=name, is_active=True)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    click.echo(f"User created id={user.id} email={user.email}")


@click.group()
def projects():
    """Project ops."""

def _set_active(project_id, is_active):
    try:
        project = project_service.set_active(project_id, is_active)
    except NotFound as e:
        raise click.ClickException(e.message)
    state = "active" if project.is_active else "inactive"
    click.echo(f"Project id={project.id} is now {state}")

@projects.command("activate")
@click.option("--id", "project_id", type=int, required=True)
@with_appcontext
def projects_activate(project_id):
    _set_active(project_id, True)

@projects.command("deactivate")
@click.option("--id", "project_id", type=int, required=True)
@with_appcontext
def projects_deactivate(project_id):
    _set_active(project_id, False)


@click.group()
def votes():
    """Vote counter maintenance."""

@votes.command("recount")
@click.option("--feedback-id", type=int, default=None, help="Only this feedback item")
@with_appcontext
def votes_recount(feedback_id):
    fixed = voting_service.recount_votes(feedback_id)
    click.echo(f"Recount complete: {fixed} item(s) corrected")


def register_cli(app):
    app.cli.add_command(users)
    app.cli.add_command(projects)
    app.cli.add_command(votes)
