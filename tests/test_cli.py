from feedbackme.extensions import db
from feedbackme.models import FeedbackItem, Project, User, Vote


def test_users_create(app):
    runner = app.test_cli_runner()
    r = runner.invoke(args=["users", "create", "--email", "Ops@Example.com", "--password", "password123", "--name", "Ops"])
    assert r.exit_code == 0, r.output
    assert "User created" in r.output

    with app.app_context():
        user = User.query.filter_by(email="ops@example.com").one()
        assert user.check_password("password123")

    again = runner.invoke(args=["users", "create", "--email", "ops@example.com", "--password", "x"])
    assert again.exit_code != 0
    assert "already exists" in again.output

def test_projects_deactivate_and_activate(app, client, login, owner_setup):
    runner = app.test_cli_runner()
    pid = owner_setup["project"]

    r = runner.invoke(args=["projects", "deactivate", "--id", str(pid)])
    assert r.exit_code == 0, r.output
    with app.app_context():
        assert db.session.get(Project, pid).is_active is False

    login(client, owner_setup["other"])
    body = {"title": "Add dark mode", "description": "Please add a dark mode toggle", "type": "feature", "projectId": pid}
    assert client.post("/api/feedback", json=body).status_code == 404

    r = runner.invoke(args=["projects", "activate", "--id", str(pid)])
    assert r.exit_code == 0
    assert client.post("/api/feedback", json=body).status_code == 200

def test_projects_unknown_id(app):
    r = app.test_cli_runner().invoke(args=["projects", "activate", "--id", "4242"])
    assert r.exit_code != 0
    assert "not found" in r.output

def test_votes_recount(app, owner_setup):
    item = owner_setup["item"]
    with app.app_context():
        db.session.add(Vote(feedback_item_id=item, user_id=owner_setup["owner"], vote_type="downvote"))
        db.session.commit()

    r = app.test_cli_runner().invoke(args=["votes", "recount", "--feedback-id", str(item)])
    assert r.exit_code == 0, r.output
    assert "1 item(s) corrected" in r.output

    with app.app_context():
        row = db.session.get(FeedbackItem, item)
        assert (row.upvotes, row.downvotes) == (0, 1)
