from feedbackme.extensions import db
from feedbackme.models import Project


def test_create_project_requires_login(client):
    r = client.post("/api/projects", json={"name": "Acme", "domain": "acme.com"})
    assert r.status_code == 401
    assert r.get_json() == {"success": False, "error": "Authentication required"}

def test_create_project_generates_prefixed_key(app, client, login, make_user):
    uid = make_user()
    login(client, uid)
    r = client.post("/api/projects", json={
        "name": "Acme",
        "description": "Our app",
        "domain": "https://Acme.com/pricing",
    })
    assert r.status_code == 201
    data = r.get_json()["data"]
    assert data["domain"] == "acme.com"
    assert data["userId"] == uid and data["isActive"] is True
    assert data["apiKey"].startswith("fbme_")
    assert len(data["apiKey"]) == len("fbme_") + 32

    with app.app_context():
        assert db.session.get(Project, data["id"]).api_key == data["apiKey"]

def test_api_keys_are_unique(client, login, make_user):
    login(client, make_user())
    keys = {
        client.post("/api/projects", json={"name": f"P{i}", "domain": "p.example.com"}).get_json()["data"]["apiKey"]
        for i in range(5)
    }
    assert len(keys) == 5

def test_create_project_validation(client, login, make_user):
    login(client, make_user())
    r = client.post("/api/projects", json={"name": "", "domain": "no domain here"})
    assert r.status_code == 400
    assert {d["field"] for d in r.get_json()["details"]} == {"name", "domain"}

def test_list_projects_only_own(app, client, login, make_user, make_project):
    me = make_user()
    someone = make_user()
    mine = make_project(me, name="Mine")
    make_project(someone, name="Theirs")

    login(client, me)
    r = client.get("/api/projects")
    assert r.status_code == 200
    assert [p["id"] for p in r.get_json()["data"]] == [mine]

def test_stats_owner_only(app, client, login, owner_setup, make_item):
    make_item(owner_setup["project"], type="bug", upvotes=3, downvotes=1)

    login(client, owner_setup["owner"])
    r = client.get(f"/api/projects/{owner_setup['project']}/stats")
    assert r.status_code == 200
    stats = r.get_json()["data"]
    assert stats["totalFeedback"] == 2
    assert stats["featureRequests"] == 1 and stats["bugReports"] == 1
    assert stats["openItems"] == 2 and stats["closedItems"] == 0
    assert stats["totalVotes"] == 4

    other = app.test_client()
    login(other, owner_setup["other"])
    assert other.get(f"/api/projects/{owner_setup['project']}/stats").status_code == 404


def test_dashboard_redirects_guests(client):
    r = client.get("/dashboard/")
    assert r.status_code == 302
    assert "/auth/login" in r.headers["Location"]

def test_dashboard_lists_projects(client, login, owner_setup):
    login(client, owner_setup["owner"])
    r = client.get("/dashboard/")
    assert r.status_code == 200
    assert b"Acme" in r.data

    r = client.get(f"/dashboard/projects/{owner_setup['project']}")
    assert r.status_code == 200
    assert b"Add dark mode" in r.data

def test_dashboard_hides_foreign_project(client, login, owner_setup):
    login(client, owner_setup["other"])
    r = client.get(f"/dashboard/projects/{owner_setup['project']}")
    assert r.status_code == 302
