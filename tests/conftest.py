import os
# Ensure the app factory picks the Testing config & SQLite memory DB
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///:memory:")

import pytest
from feedbackme import create_app
from feedbackme.extensions import db
from feedbackme.models import User, Project, FeedbackItem, Comment

@pytest.fixture(scope="session")
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "MAIL_SUPPRESS_SEND": True,
        "APP_BASE_URL": "http://example.test",
        "WTF_CSRF_ENABLED": False,
        "RATELIMIT_ENABLED": False,
        "APP_ENV": "testing",
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()

@pytest.fixture()
def client(app):
    return app.test_client()

@pytest.fixture(autouse=True)
def _db_clean(app):
    # Clean BEFORE each test
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()
    yield
    # And AFTER each test (keeps state hermetic even if a test fails mid-transaction)
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()


@pytest.fixture()
def login():
    """Sign a test client in by writing the Flask-Login session key."""
    def _login(client, user_id):
        with client.session_transaction() as sess:
            sess["_user_id"] = str(user_id)
            sess["_fresh"] = True
        return client
    return _login


# --- factories (return ids; instances would detach once the context closes) ---

@pytest.fixture()
def make_user(app):
    counter = {"n": 0}

    def _make(email=None, name="Test User", password="password123"):
        counter["n"] += 1
        with app.app_context():
            user = User(email=email or f"user{counter['n']}@example.com", name=name)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make

@pytest.fixture()
def make_project(app):
    counter = {"n": 0}

    def _make(owner_id, name="Acme", domain="acme.example.com", is_active=True):
        counter["n"] += 1
        with app.app_context():
            project = Project(
                name=name,
                domain=domain,
                api_key=f"fbme_test_{owner_id}_{counter['n']}",
                user_id=owner_id,
                is_active=is_active,
            )
            db.session.add(project)
            db.session.commit()
            return project.id
    return _make

@pytest.fixture()
def make_item(app):
    def _make(project_id, user_id=None, title="Add dark mode",
              description="Please add a dark mode toggle", type="feature",
              upvotes=0, downvotes=0):
        with app.app_context():
            item = FeedbackItem(
                title=title,
                description=description,
                type=type,
                project_id=project_id,
                user_id=user_id,
                upvotes=upvotes,
                downvotes=downvotes,
            )
            db.session.add(item)
            db.session.commit()
            return item.id
    return _make

@pytest.fixture()
def make_comment(app):
    def _make(item_id, user_id=None, content="Great idea!", parent_id=None,
              user_name=None, user_email=None):
        with app.app_context():
            comment = Comment(
                content=content,
                feedback_item_id=item_id,
                user_id=user_id,
                user_name=user_name,
                user_email=user_email,
                parent_comment_id=parent_id,
            )
            db.session.add(comment)
            db.session.commit()
            return comment.id
    return _make

@pytest.fixture()
def owner_setup(make_user, make_project, make_item):
    """Project owner, a second signed-up user, one project and one item."""
    owner_id = make_user(email="owner@example.com", name="Olivia Owner")
    other_id = make_user(email="other@example.com", name="Oscar Other")
    project_id = make_project(owner_id)
    item_id = make_item(project_id, user_id=other_id)
    return {"owner": owner_id, "other": other_id, "project": project_id, "item": item_id}
