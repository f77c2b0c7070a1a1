"""
Profile and dashboard endpoints.
"""


def test_profile_lifecycle(client, owner_id):
    r = client.get("/profile")
    assert r.status_code == 404
    assert r.json()["error"]["message"] == "Profile not found. Complete your profile first."

    r = client.put("/profile", json={"experience_level": "intermediate", "years_away": 4})
    assert r.status_code == 200
    assert r.json()["owner_id"] == str(owner_id)
    assert r.json()["activity_streak"] == 0

    r = client.put("/profile", json={"experience_level": "expert", "years_away": 4})
    assert r.json()["experience_level"] == "expert"
    assert client.get("/profile").json()["experience_level"] == "expert"


def test_profile_validation(client):
    r = client.put("/profile", json={"experience_level": "guru", "years_away": "5"})
    assert r.status_code == 400
    fields = {d["field"] for d in r.json()["error"]["details"]}
    assert fields == {"experience_level", "years_away"}

    r = client.put("/profile", json={"experience_level": "beginner", "years_away": 61})
    assert r.status_code == 400


def test_profile_setup_maps_years_range(client):
    r = client.post("/profile/setup", json={"experienceLevel": "advanced", "yearsAway": "3-5"})
    assert r.status_code == 200
    assert r.json()["years_away"] == 5

    r = client.post("/profile/setup", json={"experienceLevel": "advanced", "yearsAway": "ten"})
    assert r.status_code == 400


def test_dashboard_requires_profile(client):
    r = client.get("/dashboard/stats")
    assert r.status_code == 404


def test_dashboard_stats(client):
    client.put("/profile", json={"experience_level": "beginner", "years_away": 2})
    a = client.post("/topics", json={"title": "a", "technology": "Python"}).json()
    client.post("/topics", json={"title": "b", "technology": "Python"})
    c = client.post("/topics", json={"title": "c", "technology": "Go"}).json()
    client.patch(f"/topics/{a['id']}/status", json={"status": "completed"})
    client.patch(f"/topics/{c['id']}/status", json={"status": "in_progress"})

    r = client.get("/dashboard/stats")
    assert r.status_code == 200
    body = r.json()
    assert body["profile"] == {"experience_level": "beginner", "years_away": 2, "activity_streak": 1}
    assert body["topics"] == {"total": 3, "not_started": 1, "in_progress": 1, "completed": 1}
    assert body["technologies"] == [
        {"name": "Go", "total": 1, "completed": 0},
        {"name": "Python", "total": 2, "completed": 1},
    ]
    actions = {item["topic_title"]: item["action"] for item in body["recent_activity"]}
    assert actions == {"a": "completed", "b": "updated", "c": "started"}
