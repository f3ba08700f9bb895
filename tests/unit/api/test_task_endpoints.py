"""
Name: Task Endpoint Tests

Responsibilities:
  - End-to-end flow: register, login, assignment, status update, self-delete
  - Task roster (admin) and the assignee status path
  - camelCase wire format and error envelopes
"""

import pytest

pytestmark = pytest.mark.unit


def _create_task(client, headers, **body):
    body.setdefault("title", "Ship")
    return client.post("/api/tasks", json=body, headers=headers)


def test_full_assignment_flow(client, admin, auth_header, email_sender):
    # Register Ann
    res = client.post(
        "/api/auth/register",
        json={"name": "Ann", "email": "ann@example.com", "password": "secret123"},
    )
    assert res.status_code == 201
    assert "password" not in res.json()["user"]
    ann_id = res.json()["user"]["id"]
    ann_token = res.json()["token"]

    # Wrong password
    res = client.post(
        "/api/auth/login", json={"email": "ann@example.com", "password": "nope12"}
    )
    assert res.status_code == 401
    assert res.json()["error"] == "Invalid credentials"

    # Admin assigns a task to Ann
    res = _create_task(client, auth_header(admin), assignedTo=ann_id)
    assert res.status_code == 201
    task = res.json()["task"]
    assert task["status"] == "pending"
    assert task["assignedTo"] == {"id": ann_id, "name": "Ann", "email": "ann@example.com"}
    assert [e.subject for e in email_sender.sent] == ["New Task Assigned: Ship"]
    assert email_sender.sent[0].to == "ann@example.com"

    # Ann completes it
    res = client.put(
        f"/api/tasks/{task['id']}/status",
        json={"status": "completed"},
        headers={"Authorization": f"Bearer {ann_token}"},
    )
    assert res.status_code == 200
    assert res.json()["message"] == "Task status updated successfully"
    assert res.json()["task"]["status"] == "completed"
    assert email_sender.sent[-1].subject == "Task Status Updated: Ship"
    assert email_sender.sent[-1].to == "ann@example.com"
    assert "Completed" in email_sender.sent[-1].html

    # Admin cannot delete their own account
    res = client.delete(f"/api/users/{admin.id}", headers=auth_header(admin))
    assert res.status_code == 400
    assert res.json()["error"] == "Cannot delete your own account"


def test_create_task_wire_format(client, admin, auth_header):
    res = _create_task(
        client,
        auth_header(admin),
        title="Write docs",
        description="API reference",
        deadline="2026-03-01",
    )

    assert res.status_code == 201
    assert res.json()["message"] == "Task created successfully"
    task = res.json()["task"]
    assert task["assignedTo"] is None
    assert task["createdBy"] == admin.id
    assert task["deadline"].startswith("2026-03-01")
    assert {"createdAt", "updatedAt"} <= set(task)


def test_create_task_validation(client, admin, auth_header):
    headers = auth_header(admin)

    assert _create_task(client, headers, title="  ").json()["error"] == "Title is required"
    assert (
        _create_task(client, headers, deadline="someday").json()["error"]
        == "Invalid deadline format"
    )
    assert (
        _create_task(client, headers, assignedTo="abc").json()["error"]
        == "Invalid assignedTo user ID"
    )


def test_create_task_unknown_assignee(client, admin, auth_header, email_sender):
    res = _create_task(client, auth_header(admin), assignedTo=999)

    assert res.status_code == 404
    assert res.json()["error"] == "User not found"
    assert email_sender.sent == []
    assert client.get("/api/tasks", headers=auth_header(admin)).json()["tasks"] == []


def test_non_admin_cannot_manage_tasks(client, make_user, auth_header):
    ann = make_user(name="Ann")
    headers = auth_header(ann)

    assert _create_task(client, headers).status_code == 403
    assert client.get("/api/tasks", headers=headers).status_code == 403
    assert client.get("/api/tasks/1", headers=headers).status_code == 403
    assert client.put("/api/tasks/1", json={"title": "x"}, headers=headers).status_code == 403
    assert client.delete("/api/tasks/1", headers=headers).status_code == 403


def test_requires_authentication(client):
    res = client.get("/api/tasks/my-tasks")

    assert res.status_code == 401
    assert res.json()["code"] == "UNAUTHORIZED"


def test_list_filters(client, admin, make_user, auth_header):
    ann = make_user(name="Ann")
    bob = make_user(name="Bob")
    headers = auth_header(admin)
    first = _create_task(client, headers, title="A", assignedTo=ann.id).json()["task"]
    _create_task(client, headers, title="B", assignedTo=bob.id)
    client.put(f"/api/tasks/{first['id']}", json={"status": "in_progress"}, headers=headers)

    by_assignee = client.get(f"/api/tasks?assignedTo={ann.id}", headers=headers)
    by_status = client.get("/api/tasks?status=in_progress", headers=headers)
    everything = client.get("/api/tasks", headers=headers)

    assert [t["title"] for t in by_assignee.json()["tasks"]] == ["A"]
    assert [t["title"] for t in by_status.json()["tasks"]] == ["A"]
    assert [t["title"] for t in everything.json()["tasks"]] == ["B", "A"]


def test_list_rejects_bad_status_filter(client, admin, auth_header):
    res = client.get("/api/tasks?status=done", headers=auth_header(admin))

    assert res.status_code == 400
    assert res.json()["error"] == "Status must be one of: pending, in_progress, completed"


def test_my_tasks_only_returns_own(client, admin, make_user, auth_header):
    ann = make_user(name="Ann")
    bob = make_user(name="Bob")
    headers = auth_header(admin)
    _create_task(client, headers, title="Ann's", assignedTo=ann.id)
    _create_task(client, headers, title="Bob's", assignedTo=bob.id)

    res = client.get("/api/tasks/my-tasks", headers=auth_header(ann))

    assert res.status_code == 200
    assert [t["title"] for t in res.json()["tasks"]] == ["Ann's"]


def test_status_update_by_other_user_is_forbidden(client, admin, make_user, auth_header):
    ann = make_user(name="Ann")
    bob = make_user(name="Bob")
    task = _create_task(client, auth_header(admin), assignedTo=ann.id).json()["task"]

    res = client.put(
        f"/api/tasks/{task['id']}/status",
        json={"status": "completed"},
        headers=auth_header(bob),
    )

    assert res.status_code == 403
    assert res.json()["error"] == "You can only update status of tasks assigned to you"


def test_status_update_invalid_and_missing(client, admin, auth_header):
    headers = auth_header(admin)
    task = _create_task(client, headers).json()["task"]

    bad = client.put(
        f"/api/tasks/{task['id']}/status", json={"status": "done"}, headers=headers
    )
    missing = client.put(
        "/api/tasks/999/status", json={"status": "completed"}, headers=headers
    )

    assert bad.status_code == 400
    assert missing.status_code == 404
    assert missing.json()["error"] == "Task not found"


def test_update_task_rejects_unknown_fields(client, admin, auth_header):
    headers = auth_header(admin)
    task = _create_task(client, headers).json()["task"]

    res = client.put(
        f"/api/tasks/{task['id']}", json={"priority": "high"}, headers=headers
    )

    assert res.status_code == 400
    assert res.json()["code"] == "VALIDATION_ERROR"


def test_update_task_reassign_and_unassign(client, admin, make_user, auth_header):
    ann = make_user(name="Ann")
    headers = auth_header(admin)
    task = _create_task(client, headers).json()["task"]

    assigned = client.put(
        f"/api/tasks/{task['id']}", json={"assignedTo": ann.id}, headers=headers
    )
    cleared = client.put(
        f"/api/tasks/{task['id']}", json={"assignedTo": None}, headers=headers
    )

    assert assigned.json()["message"] == "Task updated successfully"
    assert assigned.json()["task"]["assignedTo"]["id"] == ann.id
    assert cleared.json()["task"]["assignedTo"] is None


def test_get_and_delete_task(client, admin, auth_header):
    headers = auth_header(admin)
    task = _create_task(client, headers, title="Temp").json()["task"]

    fetched = client.get(f"/api/tasks/{task['id']}", headers=headers)
    deleted = client.delete(f"/api/tasks/{task['id']}", headers=headers)
    again = client.get(f"/api/tasks/{task['id']}", headers=headers)

    assert fetched.json()["task"]["title"] == "Temp"
    assert deleted.json()["message"] == "Task deleted successfully"
    assert deleted.json()["task"]["id"] == task["id"]
    assert again.status_code == 404


@pytest.mark.parametrize("assignee", ["²", "①"])
def test_create_task_rejects_non_ascii_digit_assignee(client, admin, auth_header, assignee):
    res = _create_task(client, auth_header(admin), assignedTo=assignee)

    assert res.status_code == 400
    assert res.json()["error"] == "Invalid assignedTo user ID"


def test_update_missing_task_with_unknown_assignee(client, admin, auth_header):
    res = client.put(
        "/api/tasks/999", json={"assignedTo": 555}, headers=auth_header(admin)
    )

    assert res.status_code == 404
    assert res.json()["error"] == "Task not found"
