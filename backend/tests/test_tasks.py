import pytest

from app.models.task import ProjectTask
from tests.conftest import add_member, auth_headers, create_project, create_task


@pytest.fixture
def board(client, seed_users):
    """Project owned by the manager user with the member user on its roster."""
    owner_headers = auth_headers(client, "manager@taskboard.io")
    project = create_project(client, owner_headers)
    add_member(client, owner_headers, project["project_id"], seed_users["member"].user_id)
    return {
        "project_id": project["project_id"],
        "owner": owner_headers,
        "member": auth_headers(client, "member@taskboard.io"),
        "outsider": auth_headers(client, "outsider@taskboard.io"),
        "admin": auth_headers(client, "admin@taskboard.io"),
    }


def _set_project_settings(client, board, **settings):
    resp = client.put(
        f"/api/projects/{board['project_id']}",
        json={"settings": settings},
        headers=board["owner"],
    )
    assert resp.status_code == 200, resp.text


def test_create_task_defaults(client, seed_users, board):
    resp = client.post(
        "/api/tasks",
        json={"project_id": board["project_id"], "title": "  Draft plan  ", "tags": ["Plan"]},
        headers=board["member"],
    )
    assert resp.status_code == 201
    task = resp.json()["data"]
    assert task["title"] == "Draft plan"
    assert task["status"] == "todo"
    assert task["priority"] == "medium"
    assert task["created_by"] == seed_users["member"].user_id
    assert task["creator_name"] == "Member"
    assert task["project_name"] == "Board Project"
    assert task["is_overdue"] is False
    assert task["comments"] == []


def test_create_task_uses_project_default_priority(client, board):
    _set_project_settings(client, board, default_task_priority="high")
    task = create_task(client, board["owner"], board["project_id"])
    assert task["priority"] == "high"
    task = create_task(client, board["owner"], board["project_id"], priority="low")
    assert task["priority"] == "low"


def test_member_cannot_create_when_creation_disabled(client, board):
    _set_project_settings(client, board, allow_member_task_creation=False)
    resp = client.post(
        "/api/tasks",
        json={"project_id": board["project_id"], "title": "Blocked task"},
        headers=board["member"],
    )
    assert resp.status_code == 403
    assert client.post(
        "/api/tasks",
        json={"project_id": board["project_id"], "title": "Owner task"},
        headers=board["owner"],
    ).status_code == 201


def test_outsider_cannot_create_task(client, board):
    resp = client.post(
        "/api/tasks",
        json={"project_id": board["project_id"], "title": "Outsider task"},
        headers=board["outsider"],
    )
    assert resp.status_code == 403


def test_create_task_unknown_project(client, board):
    resp = client.post("/api/tasks", json={"project_id": 9999, "title": "Lost task"}, headers=board["admin"])
    assert resp.status_code == 404


def test_assignee_must_be_participant_even_for_admin(client, seed_users, board):
    outsider_id = seed_users["outsider"].user_id
    for key in ("owner", "admin"):
        resp = client.post(
            "/api/tasks",
            json={"project_id": board["project_id"], "title": "Assign outside", "assigned_to": outsider_id},
            headers=board[key],
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Assignee must be a project member"

    task = create_task(client, board["owner"], board["project_id"])
    resp = client.put(f"/api/tasks/{task['task_id']}", json={"assigned_to": outsider_id}, headers=board["admin"])
    assert resp.status_code == 400


def test_member_assignment_follows_project_setting(client, seed_users, board):
    member_id = seed_users["member"].user_id
    payload = {"project_id": board["project_id"], "title": "Self assigned", "assigned_to": member_id}

    resp = client.post("/api/tasks", json=payload, headers=board["member"])
    assert resp.status_code == 403

    _set_project_settings(client, board, allow_member_task_assignment=True)
    resp = client.post("/api/tasks", json=payload, headers=board["member"])
    assert resp.status_code == 201
    assert resp.json()["data"]["assignee_name"] == "Member"


def test_get_task_visibility(client, board):
    task = create_task(client, board["owner"], board["project_id"])
    task_id = task["task_id"]
    assert client.get(f"/api/tasks/{task_id}", headers=board["member"]).status_code == 200
    assert client.get(f"/api/tasks/{task_id}", headers=board["outsider"]).status_code == 403
    assert client.get("/api/tasks/9999", headers=board["outsider"]).status_code == 404


def test_update_task_plain_fields_any_viewer(client, board):
    task = create_task(client, board["owner"], board["project_id"])
    resp = client.put(
        f"/api/tasks/{task['task_id']}",
        json={"title": "Updated title", "priority": "high", "tags": ["x"], "actual_hours": 2.5},
        headers=board["member"],
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["title"] == "Updated title"
    assert data["priority"] == "high"
    assert data["tags"] == ["x"]
    assert data["actual_hours"] == 2.5

    resp = client.put(f"/api/tasks/{task['task_id']}", json={"title": "Nope"}, headers=board["outsider"])
    assert resp.status_code == 403


def test_update_task_checks_run_before_writes(client, db, seed_users, board):
    task = create_task(client, board["owner"], board["project_id"], "Initial title")
    resp = client.put(
        f"/api/tasks/{task['task_id']}",
        json={"title": "Changed title", "status": "done"},
        headers=board["member"],
    )
    assert resp.status_code == 403

    db.expire_all()
    stored = db.query(ProjectTask).filter(ProjectTask.task_id == task["task_id"]).one()
    assert stored.title == "Initial title"
    assert stored.status == "todo"


def test_update_task_status_and_unassign(client, seed_users, board):
    member_id = seed_users["member"].user_id
    task = create_task(client, board["owner"], board["project_id"], assigned_to=member_id)

    resp = client.put(f"/api/tasks/{task['task_id']}", json={"status": "inprogress"}, headers=board["member"])
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "inprogress"

    resp = client.put(f"/api/tasks/{task['task_id']}", json={"assigned_to": None}, headers=board["owner"])
    assert resp.status_code == 200
    assert resp.json()["data"]["assigned_to"] is None


def test_assignee_marks_review_task_done(client, db, seed_users, board):
    member_id = seed_users["member"].user_id
    task = create_task(
        client, board["owner"], board["project_id"],
        assigned_to=member_id, due_date="2020-01-01T00:00:00",
    )
    task_id = task["task_id"]
    assert task["is_overdue"] is True

    resp = client.patch(f"/api/tasks/{task_id}/status", json={"status": "review"}, headers=board["owner"])
    assert resp.status_code == 200

    resp = client.patch(f"/api/tasks/{task_id}/status", json={"status": "done"}, headers=board["member"])
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "done"
    assert data["is_overdue"] is False
    assert data["completed_at"] is not None

    resp = client.patch(f"/api/tasks/{task_id}/status", json={"status": "todo"}, headers=board["member"])
    assert resp.json()["data"]["completed_at"] is None


def test_non_assignee_member_cannot_change_status(client, board):
    task = create_task(client, board["owner"], board["project_id"])
    resp = client.patch(f"/api/tasks/{task['task_id']}/status", json={"status": "done"}, headers=board["member"])
    assert resp.status_code == 403

    resp = client.patch(f"/api/tasks/{task['task_id']}/status", json={"status": "archived"}, headers=board["owner"])
    assert resp.status_code == 400


def test_delete_task_owner_or_creator(client, board):
    by_owner = create_task(client, board["owner"], board["project_id"], "Owner made")
    by_member = create_task(client, board["member"], board["project_id"], "Member made")

    assert client.delete(f"/api/tasks/{by_owner['task_id']}", headers=board["member"]).status_code == 403
    assert client.delete(f"/api/tasks/{by_member['task_id']}", headers=board["member"]).status_code == 200
    assert client.delete(f"/api/tasks/{by_owner['task_id']}", headers=board["owner"]).status_code == 200
    assert client.get(f"/api/tasks/{by_owner['task_id']}", headers=board["owner"]).status_code == 404


def test_add_comment(client, board):
    task = create_task(client, board["owner"], board["project_id"])
    url = f"/api/tasks/{task['task_id']}/comments"

    resp = client.post(url, json={"text": "  Looks good  "}, headers=board["member"])
    assert resp.status_code == 200
    comments = resp.json()["data"]
    assert len(comments) == 1
    assert comments[0]["text"] == "Looks good"
    assert comments[0]["author_name"] == "Member"

    resp = client.post(url, json={"text": "Second"}, headers=board["owner"])
    assert [c["text"] for c in resp.json()["data"]] == ["Looks good", "Second"]

    assert client.post(url, json={"text": "   "}, headers=board["owner"]).status_code == 400
    assert client.post(url, json={"text": "x" * 501}, headers=board["owner"]).status_code == 400
    assert client.post(url, json={"text": "hi"}, headers=board["outsider"]).status_code == 403


def test_list_tasks_filters_and_stats(client, seed_users, board):
    member_id = seed_users["member"].user_id
    project_id = board["project_id"]
    create_task(client, board["owner"], project_id, "Design landing page", tags=["Frontend"])
    create_task(client, board["owner"], project_id, "Fix login bug", priority="high", assigned_to=member_id)
    done = create_task(client, board["owner"], project_id, "Write release notes", description="Landing copy")
    client.patch(f"/api/tasks/{done['task_id']}/status", json={"status": "done"}, headers=board["owner"])

    resp = client.get("/api/tasks", params={"project_id": project_id}, headers=board["member"])
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 3
    assert body["stats"] == {"total": 3, "todo": 2, "inprogress": 0, "review": 0, "done": 1, "overdue": 0}

    resp = client.get("/api/tasks", params={"project_id": project_id, "status": "done"}, headers=board["member"])
    assert [t["title"] for t in resp.json()["data"]] == ["Write release notes"]

    resp = client.get("/api/tasks", params={"assigned_to": member_id}, headers=board["member"])
    assert [t["title"] for t in resp.json()["data"]] == ["Fix login bug"]

    resp = client.get("/api/tasks", params={"priority": "high"}, headers=board["member"])
    assert resp.json()["count"] == 1

    resp = client.get("/api/tasks", params={"search": "landing"}, headers=board["member"])
    assert sorted(t["title"] for t in resp.json()["data"]) == ["Design landing page", "Write release notes"]

    resp = client.get("/api/tasks", params={"search": "frontend"}, headers=board["member"])
    assert [t["title"] for t in resp.json()["data"]] == ["Design landing page"]


def test_list_tasks_scoped_to_viewable_projects(client, board):
    create_task(client, board["owner"], board["project_id"], "Board task")
    other = create_project(client, board["outsider"], "Outsider Project")
    create_task(client, board["outsider"], other["project_id"], "Outsider task")

    member_titles = [t["title"] for t in client.get("/api/tasks", headers=board["member"]).json()["data"]]
    assert member_titles == ["Board task"]
    assert client.get("/api/tasks", headers=board["admin"]).json()["count"] == 2

    resp = client.get("/api/tasks", params={"project_id": other["project_id"]}, headers=board["member"])
    assert resp.status_code == 403
    resp = client.get("/api/tasks", params={"project_id": 9999}, headers=board["member"])
    assert resp.status_code == 404


def test_task_title_is_trimmed_before_length_check(client, board):
    for title in ("   a   ", "     "):
        resp = client.post(
            "/api/tasks",
            json={"project_id": board["project_id"], "title": title},
            headers=board["owner"],
        )
        assert resp.status_code == 400

    task = create_task(client, board["owner"], board["project_id"])
    resp = client.put(f"/api/tasks/{task['task_id']}", json={"title": "     "}, headers=board["owner"])
    assert resp.status_code == 400
    resp = client.put(f"/api/tasks/{task['task_id']}", json={"title": "  Ship it  "}, headers=board["owner"])
    assert resp.json()["data"]["title"] == "Ship it"


def test_search_treats_wildcards_literally(client, board):
    create_task(client, board["owner"], board["project_id"], "Cut costs by 50%")
    create_task(client, board["owner"], board["project_id"], "Refactor parser")
    create_task(client, board["owner"], board["project_id"], "Rename user_id column")

    def titles(term):
        resp = client.get("/api/tasks", params={"search": term}, headers=board["owner"])
        return [t["title"] for t in resp.json()["data"]]

    assert titles("%") == ["Cut costs by 50%"]
    assert titles("_") == ["Rename user_id column"]
    assert titles("50%") == ["Cut costs by 50%"]
    assert titles("r_f") == []
