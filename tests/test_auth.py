from flask import Flask

from feedbackme.extensions import db
from feedbackme.models import User
from feedbackme.services import policy


def test_register_json_logs_in(app, client):
    r = client.post("/auth/register", json={"email": "New@Example.com", "password": "longenough", "name": "Nia"})
    assert r.status_code == 201
    assert r.get_json()["data"]["email"] == "new@example.com"

    # session now carries the user
    assert client.get("/api/projects").status_code == 200

def test_register_rejects_duplicate_email_case_insensitive(client, make_user):
    make_user(email="taken@example.com")
    r = client.post("/auth/register", json={"email": "TAKEN@example.com", "password": "longenough"})
    assert r.status_code == 400
    assert "already exists" in r.get_json()["error"]

def test_register_short_password(client):
    r = client.post("/auth/register", json={"email": "a@example.com", "password": "short"})
    assert r.status_code == 400

def test_login_and_logout_json(client, make_user):
    make_user(email="me@example.com", password="password123")

    r = client.post("/auth/login", json={"email": "me@example.com", "password": "wrong-pass"})
    assert r.status_code == 400
    assert r.get_json()["error"] == "Invalid credentials"

    r = client.post("/auth/login", json={"email": "ME@example.com", "password": "password123"})
    assert r.status_code == 200
    assert client.get("/api/projects").status_code == 200

    assert client.post("/auth/logout", json={}).status_code == 200
    assert client.get("/api/projects").status_code == 401

def test_inactive_user_cannot_login(app, client, make_user):
    uid = make_user(email="off@example.com", password="password123")
    with app.app_context():
        db.session.get(User, uid).is_active = False
        db.session.commit()
    r = client.post("/auth/login", json={"email": "off@example.com", "password": "password123"})
    assert r.status_code == 400

def test_login_form_redirects_to_safe_next(client, make_user):
    make_user(email="me@example.com", password="password123")
    r = client.post(
        "/auth/login?next=//evil.example.com",
        data={"email": "me@example.com", "password": "password123"},
    )
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/dashboard/")

def test_login_page_renders(client):
    assert client.get("/auth/login").status_code == 200
    assert client.get("/auth/register").status_code == 200


def test_wants_json_detection():
    app = Flask(__name__)
    with app.test_request_context("/api/feedback"):
        assert policy.wants_json() is True
    with app.test_request_context("/dashboard/", headers={"Accept": "application/json"}):
        assert policy.wants_json() is True
    with app.test_request_context("/dashboard/", headers={"Accept": "text/html"}):
        assert policy.wants_json() is False

def test_current_actor_is_none_for_guests(app):
    with app.test_request_context("/"):
        assert policy.current_actor() is None


def test_healthz_and_json_404(client):
    assert client.get("/healthz").get_json() == {"status": "ok"}
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert r.get_json() == {"success": False, "error": "Not found"}

def test_unexpected_error_is_generic_500(app, client, monkeypatch):
    from feedbackme.services import waitlist as waitlist_service

    def _explode():
        raise RuntimeError("db exploded")
    monkeypatch.setattr(waitlist_service, "total_registrations", _explode)

    r = client.get("/api/waitlist")
    assert r.status_code == 500
    assert r.get_json() == {"success": False, "error": "Internal server error"}

def test_non_string_password_is_400(client, make_user):
    make_user(email="me@example.com", password="password123")

    r = client.post("/auth/register", json={"email": "a@example.com", "password": 12345678})
    assert r.status_code == 400

    r = client.post("/auth/login", json={"email": "me@example.com", "password": 12345678})
    assert r.status_code == 400
    assert r.get_json()["error"] == "Email and password are required"

def test_non_object_json_body_is_400(client):
    for path in ("/auth/login", "/auth/register"):
        r = client.post(path, json=["me@example.com", "password123"])
        assert r.status_code == 400
        assert r.get_json()["success"] is False
