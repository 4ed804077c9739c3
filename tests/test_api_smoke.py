import time


def now_ms():
    return int(time.time() * 1000)


def test_root_ok(client):
    r = client.get("/")
    assert r.status_code == 200
    data = r.json()
    assert "message" in data


def test_today_starts_empty_with_sensors_offline(client):
    r = client.get("/today/")
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["run"]["distance"] == 0
    assert data["pace"] == "--:--"
    assert data["elapsed"] == "00:00"
    assert data["motion"] == "prompt"


def test_location_samples_build_distance(client):
    t = now_ms()
    first = client.post("/today/location", json={"latitude": 52.0, "longitude": 5.0, "timestamp": t, "accuracy": 5})
    assert first.json() == {"accepted": True}

    jitter = client.post("/today/location", json={"latitude": 52.00001, "longitude": 5.0, "timestamp": t + 1000})
    assert jitter.json() == {"accepted": False}

    malformed = client.post("/today/location", json={"latitude": None, "longitude": 5.0})
    assert malformed.status_code == 200
    assert malformed.json() == {"accepted": False}

    client.post("/today/location", json={"latitude": 52.001, "longitude": 5.0, "timestamp": t + 30000, "accuracy": 30})
    client.post("/today/tick", json={"seconds": 33})

    data = client.get("/today/").json()
    assert 110 < data["run"]["distance"] < 112
    assert len(data["run"]["path"]) == 2
    assert data["elapsed"] == "00:33"
    assert data["gpsSignal"] == "poor"

    view = client.get("/today/path").json()
    assert view["d"].startswith("M ")
    assert view["d"].count(" L ") == 1


def test_location_error_is_accepted(client):
    r = client.post("/today/location/error", json={"message": "position unavailable", "code": 2})
    assert r.status_code == 204


def test_motion_permission_flow(client):
    t = now_ms()
    r = client.post("/today/motion", json={"x": 0, "y": 0, "z": 13, "timestamp": t})
    assert r.json() == {"accepted": False}

    r = client.post("/today/motion/access", json={"granted": True})
    assert r.json()["motion"] == "granted"

    client.post("/today/motion", json={"x": 0, "y": 0, "z": 0, "timestamp": t + 100})
    r = client.post("/today/motion", json={"x": 0, "y": 0, "z": 13, "timestamp": t + 400})
    assert r.json() == {"accepted": True}
    r = client.post("/today/motion", json={"x": None, "y": 0, "z": 13})
    assert r.json() == {"accepted": False}

    assert client.get("/today/").json()["run"]["steps"] == 1

    assert client.delete("/today/motion").status_code == 204
    client.post("/today/motion", json={"x": 0, "y": 0, "z": 0, "timestamp": t + 1000})
    r = client.post("/today/motion", json={"x": 0, "y": 0, "z": 13, "timestamp": t + 2000})
    assert r.json() == {"accepted": False}


def test_shoes_rest_day_and_stats(client):
    r = client.post("/stats/shoes", json={"name": "Pegasus 41", "limitKm": 700})
    assert r.status_code == 200, r.text
    shoe = r.json()
    assert shoe["isActive"] is True
    assert shoe["limit"] == 700000

    second = client.post("/stats/shoes", json={"name": "Vaporfly", "limitKm": 400}).json()
    r = client.put(f"/stats/shoes/{second['id']}/active")
    assert r.json()["name"] == "Vaporfly"
    assert client.put("/stats/shoes/missing/active").status_code == 404

    t = now_ms()
    client.post("/today/location", json={"latitude": 52.0, "longitude": 5.0, "timestamp": t})
    client.post("/today/location", json={"latitude": 52.01, "longitude": 5.0, "timestamp": t + 600000})
    client.post("/today/tick", json={"seconds": 600})
    finished = client.post("/today/finish", json={"notes": "tempo"}).json()
    assert finished["shoeId"] == second["id"]

    rest = client.post("/today/rest", json={"notes": "easy day"}).json()
    assert rest["isRestDay"] is True

    stats = client.get("/stats/").json()
    assert stats["totalRuns"] == 1
    assert stats["totalDistance"] == finished["distance"]
    assert [h["id"] for h in stats["history"]] == [rest["id"], finished["id"]]
    shoes = {s["id"]: s["currentMileage"] for s in stats["shoes"]}
    assert shoes[second["id"]] == finished["distance"]
    assert shoes[shoe["id"]] == 0

    active_only = client.get("/stats/history", params={"include_rest": False}).json()
    assert [h["id"] for h in active_only] == [finished["id"]]

    summary = client.get("/stats/summary").json()
    assert summary["maxDistance"] == finished["distance"]


def test_settings_update(client):
    r = client.put("/stats/settings", json={"maxSpeedAlert": 15, "autoArchivePeriod": "1year"})
    assert r.status_code == 200, r.text
    assert r.json() == {"minSpeedAlert": None, "maxSpeedAlert": 15.0, "autoArchivePeriod": "1year"}


def test_wipe(client):
    client.post("/stats/shoes", json={"name": "Pegasus", "limitKm": 700})
    client.post("/today/finish", json={})
    assert client.delete("/stats/").status_code == 204
    stats = client.get("/stats/").json()
    assert stats["history"] == []
    assert stats["shoes"] == []


def test_feedback_without_key_uses_fallback(client):
    r = client.get("/today/feedback")
    assert r.status_code == 200
    assert r.json()["feedback"]


def test_today_rolls_over_on_read_after_midnight(client):
    client.post("/today/tick", json={"seconds": 60})
    before = client.get("/today/").json()["run"]

    client.app.state.controller.clock = lambda: now_ms() + 86_400_000
    after = client.get("/today/").json()["run"]
    assert after["id"] != before["id"]
    assert after["duration"] == 0

    history = client.get("/stats/history").json()
    assert [h["id"] for h in history] == [before["id"]]
    assert history[0]["endTime"] == before["startTime"] + 60_000


def test_shoe_payload_is_camel_case(client):
    r = client.post("/stats/shoes", json={"name": "Pegasus", "limitKm": 650})
    assert r.status_code == 200, r.text
    assert r.json()["limit"] == 650000
    assert client.post("/stats/shoes", json={"name": "Pegasus"}).status_code == 422
