def test_teacher_crud_and_availability(client):
    created = client.post("/api/teachers/", json={"name": " Emma ", "date": "2024-01-01", "availability": [4, 3, 3]})
    assert created.status_code == 201
    teacher = created.json()
    assert teacher["name"] == "Emma"
    assert teacher["availability"] == [3, 4]

    listed = client.get("/api/teachers/", params={"date": "2024-01-01"}).json()
    assert [item["id"] for item in listed] == [teacher["id"]]

    available = client.get("/api/teachers/available", params={"time_slot_id": 3, "date": "2024-01-01"}).json()
    assert [item["id"] for item in available] == [teacher["id"]]

    check = client.get(
        "/api/teachers/check-availability",
        params={"teacher_id": teacher["id"], "time_slot_id": 5, "date": "2024-01-01"},
    )
    assert check.json() == {"available": False, "reason": "Teacher not available at this time slot"}

    updated = client.put(f"/api/teachers/{teacher['id']}", json={"color_keyword": "blue"})
    assert updated.json()["color_keyword"] == "blue"

    assert client.delete(f"/api/teachers/{teacher['id']}").json() == {"success": True, "id": teacher["id"]}
    assert client.get("/api/teachers/", params={"date": "2024-01-01"}).json() == []

    again = client.post("/api/teachers/", json={"name": "emma", "date": "2024-01-01"})
    assert again.json()["id"] == teacher["id"]
    assert again.json()["is_active"] is True

    assert client.get("/api/teachers/999").status_code == 404


def test_teacher_list_requires_date(client):
    assert client.get("/api/teachers/").status_code == 422


def test_student_views_and_bulk_delete(client):
    for name, color in [("Minjun", "blue"), ("Seoyeon", "green")]:
        client.post("/api/students/", json={"name": name, "date": "2024-01-01", "color_keyword": color})
    client.post("/api/students/", json={"name": "minjun", "date": "2024-01-02", "color_keyword": "blue"})

    by_color = client.get("/api/students/by-color", params={"color": "blue", "date": "2024-01-01"}).json()
    assert [item["name"] for item in by_color] == ["Minjun"]
    assert len(client.get("/api/students/all-unique").json()) == 2

    deleted = client.request("DELETE", "/api/students/all", json={"date": "2024-01-01"})
    assert deleted.json()["count"] == 2
    assert client.get("/api/students/", params={"date": "2024-01-01"}).json() == []


def test_weekly_endpoints(client):
    client.post("/api/teachers/", json={"name": "Emma", "date": "2024-01-01", "availability": [3]})

    week = client.get("/api/weekly/", params={"date": "2024-01-03"}).json()
    assert week["week_range"]["start_date"] == "2024-01-01"
    assert [item["name"] for item in week["days"][0]["teachers"]] == ["Emma"]

    assert client.get("/api/weekly/range", params={"date": "2024-01-07"}).json()["end_date"] == "2024-01-07"

    copied = client.post("/api/weekly/copy-day", json={"from_date": "2024-01-01", "to_date": "2024-01-02"})
    assert copied.json()["teachers"]["copied"] == 1

    rejected = client.post("/api/weekly/copy-day", json={"from_date": "2024-01-01", "to_date": "2024-01-09"})
    assert rejected.status_code == 400
    assert rejected.json()["message"] == "Dates must be in the same week"
