def _teacher(client, name, on_date="2024-01-01", availability=(3, 4)):
    response = client.post("/api/teachers/", json={"name": name, "date": on_date, "availability": list(availability)})
    assert response.status_code == 201
    return response.json()


def _student(client, name, on_date="2024-01-01", availability=(3, 4)):
    response = client.post("/api/students/", json={"name": name, "date": on_date, "availability": list(availability)})
    assert response.status_code == 201
    return response.json()


def _assignment(teacher_ids=(), student_ids=(), on_date="2024-01-01", slot=3, **extra):
    return {
        "date": on_date,
        "time_slot_id": slot,
        "teachers": [{"teacher_id": item} for item in teacher_ids],
        "students": [{"student_id": item} for item in student_ids],
        **extra,
    }


def test_time_slots_are_seeded(client):
    response = client.get("/api/timeslots/")
    assert response.status_code == 200
    slots = response.json()
    assert len(slots) == 28
    assert slots[0]["label"] == "08:00-08:30"

    assert client.get("/api/timeslots/3").json()["start_time"] == "09:00"
    missing = client.get("/api/timeslots/99")
    assert missing.status_code == 404
    assert missing.json()["message"] == "Time slot with id 99 not found"


def test_create_conflict_and_read_flow(client):
    teacher = _teacher(client, "T")
    first = _student(client, "S")
    second = _student(client, "S2")

    created = client.post("/api/assignments/", json=_assignment([teacher["id"]], [first["id"]], subject="Reading"))
    assert created.status_code == 201
    body = created.json()
    assert body["room_id"] is None
    assert body["teachers"][0]["name"] == "T"
    assert body["students"][0]["name"] == "S"

    conflict = client.post("/api/assignments/", json=_assignment([teacher["id"]], [second["id"]]))
    assert conflict.status_code == 400
    payload = conflict.json()
    assert payload["message"].startswith("Validation failed:")
    assert payload["details"]["errors"] == ["Teacher T is already scheduled with student(s): S at this time"]

    listed = client.get("/api/assignments/", params={"date": "2024-01-01"}).json()
    assert [item["id"] for item in listed] == [body["id"]]
    assert client.get(f"/api/assignments/{body['id']}").status_code == 200
    assert [item["id"] for item in client.get(f"/api/assignments/student/{first['id']}").json()] == [body["id"]]
    ranged = client.get("/api/assignments/date-range", params={"start_date": "2024-01-01", "days": 7})
    assert len(ranged.json()) == 1


def test_empty_assignment_is_rejected(client):
    response = client.post("/api/assignments/", json=_assignment())
    assert response.status_code == 422


def test_validate_endpoint(client):
    teacher = _teacher(client, "Emma")
    client.post("/api/assignments/", json=_assignment([teacher["id"]]))

    blocked = client.post("/api/assignments/validate", json=_assignment([teacher["id"]]))
    assert blocked.json() == {"valid": False, "errors": ["Teacher Emma is already scheduled at this time"]}

    empty = client.post("/api/assignments/validate", json=_assignment())
    assert empty.json() == {"valid": True, "errors": []}


def test_update_validates_merged_candidate(client):
    emma = _teacher(client, "Emma")
    daniel = _teacher(client, "Daniel")
    student = _student(client, "S")
    first = client.post("/api/assignments/", json=_assignment([emma["id"]], [student["id"]])).json()
    second = client.post("/api/assignments/", json=_assignment([daniel["id"]], [student["id"]], slot=4)).json()

    unchanged = client.put(f"/api/assignments/{first['id']}", json={"notes": "same slot"})
    assert unchanged.status_code == 200
    assert unchanged.json()["notes"] == "same slot"

    moved = client.put(f"/api/assignments/{second['id']}", json={"time_slot_id": 3})
    assert moved.status_code == 400
    assert moved.json()["details"]["errors"] == ["Student S is already scheduled with teacher(s): Emma at this time"]

    swapped = client.put(f"/api/assignments/{second['id']}", json={"teachers": [{"teacher_id": emma["id"]}]})
    assert swapped.status_code == 200
    assert [item["teacher_id"] for item in swapped.json()["teachers"]] == [emma["id"]]

    assert client.put("/api/assignments/999", json={"notes": "x"}).status_code == 404


def test_update_cannot_remove_every_participant(client):
    teacher = _teacher(client, "Emma")
    created = client.post("/api/assignments/", json=_assignment([teacher["id"]])).json()

    emptied = client.put(f"/api/assignments/{created['id']}", json={"teachers": [], "students": []})
    assert emptied.status_code == 400
    assert emptied.json()["message"] == "An assignment needs at least one teacher or one student"

    assert client.put(f"/api/assignments/{created['id']}", json={"teachers": []}).status_code == 400
    assert [item["teacher_id"] for item in client.get(f"/api/assignments/{created['id']}").json()["teachers"]] == [
        teacher["id"]
    ]


def test_delete_restore_and_not_found(client):
    teacher = _teacher(client, "Emma")
    created = client.post("/api/assignments/", json=_assignment([teacher["id"]])).json()

    deleted = client.delete(f"/api/assignments/{created['id']}")
    assert deleted.status_code == 200
    assert deleted.json()["is_active"] is False

    assert client.get(f"/api/assignments/{created['id']}").status_code == 404
    assert client.get(f"/api/assignments/{created['id']}", params={"include_inactive": True}).status_code == 200
    assert client.delete(f"/api/assignments/{created['id']}").status_code == 404

    restored = client.post(f"/api/assignments/{created['id']}/restore")
    assert restored.status_code == 200
    assert restored.json()["is_active"] is True


def test_delete_all_for_date_takes_backup(client):
    teacher = _teacher(client, "Emma")
    client.post("/api/assignments/", json=_assignment([teacher["id"]]))
    client.post("/api/assignments/", json=_assignment([teacher["id"]], slot=4))

    response = client.request("DELETE", "/api/assignments/all", json={"date": "2024-01-01"})
    assert response.status_code == 200
    assert response.json()["count"] == 2

    backups = client.get("/api/backups/").json()
    assert len(backups) == 1
    assert backups[0]["assignments_count"] == 2


def test_copy_endpoints(client):
    teacher = _teacher(client, "Emma")
    student = _student(client, "Minjun")
    client.post("/api/assignments/", json=_assignment([teacher["id"]], [student["id"]]))

    same = client.post("/api/assignments/copy-day", json={"source_date": "2024-01-01", "target_date": "2024-01-01"})
    assert same.status_code == 400

    copied = client.post("/api/assignments/copy-day", json={"source_date": "2024-01-01", "target_date": "2024-01-02"})
    assert copied.status_code == 200
    summary = copied.json()
    assert summary["assignments_copied"] == 1
    assert summary["assignments"][0]["date"] == "2024-01-02"

    week = client.post("/api/assignments/copy-week", json={"source_date": "2024-01-01", "target_date": "2024-01-08"})
    assert week.status_code == 200
    assert week.json()["assignments_copied"] == 2

    overlap = client.post("/api/assignments/copy-week", json={"source_date": "2024-01-01", "target_date": "2024-01-03"})
    assert overlap.status_code == 400


def test_duplicates_endpoints(client):
    response = client.get("/api/assignments/duplicates")
    assert response.status_code == 200
    assert response.json() == []

    removed = client.post("/api/assignments/duplicates/remove")
    assert removed.json() == {"duplicates_found": 0, "removed": 0, "removed_ids": []}


def test_activity_log_lists_assignment_mutations(client):
    teacher = _teacher(client, "Emma")
    client.post("/api/assignments/", json=_assignment([teacher["id"]]))

    logs = client.get("/api/activity/logs").json()
    assert any(item["action"] == "assignment.create" for item in logs)
