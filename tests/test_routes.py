"""API tests through the FastAPI TestClient."""

from conftest import make_svg


def _import(client, *identities: str):
    files = {f"{i}.svg": make_svg(i) for i in identities}
    return client.post("/api/assets", json={"files": files})


# ── Settings ─────────────────────────────────────────────


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_settings(client):
    data = client.get("/api/settings").json()
    assert data["display"]["box_size"] == 400
    assert data["display"]["border_size"] == 10
    assert data["language"] == "en"

    data = client.patch("/api/settings", json={"language": "zh"}).json()
    assert data["language"] == "zh"


# ── Characters ───────────────────────────────────────────


def test_defaults_seeded_on_startup(client):
    chars = client.get("/api/characters").json()
    assert [c["identity"] for c in chars] == ["口", "日", "木", "人"]
    assert all(c["kind"] == "simple" for c in chars)
    assert client.get("/api/assets").json() == sorted(["口", "日", "木", "人"])


def test_simple_character_placed_inside_border(client):
    char = client.get("/api/characters/口").json()
    assert (char["x"], char["y"], char["width"], char["height"]) == (10, 10, 390, 390)


def test_create_compound(client):
    resp = client.post("/api/characters", json={"identity": "杏", "components": ["木", "口"]})
    assert resp.status_code == 201
    data = resp.json()
    assert data["kind"] == "compound"
    assert [c["identity"] for c in data["components"]] == ["木", "口"]

    compounds = client.get("/api/characters", params={"kind": "compound"}).json()
    assert [c["identity"] for c in compounds] == ["杏"]


def test_create_compound_errors(client):
    body = {"identity": "口", "components": ["木"]}
    assert client.post("/api/characters", json=body).status_code == 409
    body = {"identity": "杏", "components": ["龍"]}
    assert client.post("/api/characters", json=body).status_code == 404
    body = {"identity": "杏", "components": []}
    assert client.post("/api/characters", json=body).status_code == 422
    body = {"identity": "杏杏", "components": ["木"]}
    assert client.post("/api/characters", json=body).status_code == 422


def test_unknown_character_404(client):
    assert client.get("/api/characters/龍").status_code == 404


def test_geometry(client):
    client.post("/api/characters", json={"identity": "杏", "components": ["木", "口"]})
    boxes = client.get("/api/characters/杏/geometry").json()
    assert [b["identity"] for b in boxes] == ["木", "口"]
    assert boxes[0]["svg"] == client.get("/api/assets/木").text


def test_place_component(client):
    client.post("/api/characters", json={"identity": "杏", "components": ["木", "口"]})
    resp = client.patch(
        "/api/characters/杏/components/1",
        json={"x": 100, "y": 250, "width": 200, "height": 140},
    )
    assert resp.status_code == 200
    component = resp.json()["components"][1]
    assert (component["x"], component["y"], component["width"], component["height"]) == (
        100, 250, 200, 140,
    )


def test_place_component_errors(client):
    client.post("/api/characters", json={"identity": "杏", "components": ["木", "口"]})
    body = {"x": 0, "y": 0, "width": 0, "height": 10}
    assert client.patch("/api/characters/杏/components/0", json=body).status_code == 422
    body = {"x": 0, "y": 0, "width": 10, "height": 10}
    assert client.patch("/api/characters/杏/components/5", json=body).status_code == 404
    assert client.patch("/api/characters/口/components/0", json=body).status_code == 409


def test_remove_component(client):
    client.post("/api/characters", json={"identity": "杏", "components": ["木", "口"]})
    data = client.delete("/api/characters/杏/components/0").json()
    assert [c["identity"] for c in data["components"]] == ["口"]


def test_delete_character(client):
    assert client.delete("/api/characters/人").json() == {"ok": True}
    assert client.get("/api/characters/人").status_code == 404
    assert client.delete("/api/characters/人").status_code == 404


def test_export(client):
    client.post("/api/characters", json={"identity": "杏", "components": ["木", "口"]})
    data = client.post("/api/characters/杏/export").json()
    assert data["ok"] is True
    text = open(data["path"], encoding="utf-8").read()
    assert 'data-identity="木"' in text


# ── Assets ───────────────────────────────────────────────


def test_import_assets_adds_characters(client):
    resp = _import(client, "上", "下")
    assert resp.status_code == 201
    assert resp.json() == {"imported": ["上", "下"]}
    identities = [c["identity"] for c in client.get("/api/characters").json()]
    assert identities[-2:] == ["上", "下"]
    assert client.get("/api/assets/上").text == make_svg("上")


def test_import_empty_batch_rejected(client):
    assert client.post("/api/assets", json={"files": {}}).status_code == 422


def test_reimport_overwrites(client):
    client.post("/api/assets", json={"files": {"识.svg": make_svg("first")}})
    client.post("/api/assets", json={"files": {"识.svg": make_svg("second")}})
    identities = [c["identity"] for c in client.get("/api/characters").json()]
    assert identities.count("识") == 1
    assert client.get("/api/assets/识").text == make_svg("second")


def test_replace_asset(client):
    resp = client.put("/api/assets/口", json={"svg": make_svg("new")})
    assert resp.status_code == 200
    assert client.get("/api/assets/口").text == make_svg("new")
    assert client.put("/api/assets/口口", json={"svg": make_svg()}).status_code == 422


def test_delete_asset(client):
    assert client.delete("/api/assets/口").json() == {"ok": True}
    assert client.get("/api/assets/口").status_code == 404
    assert client.delete("/api/assets/口").status_code == 404
    # the character itself survives
    assert client.get("/api/characters/口").status_code == 200


def test_clear_assets_keeps_characters(client):
    client.post("/api/characters", json={"identity": "杏", "components": ["木", "口"]})
    assert client.delete("/api/assets").json() == {"ok": True}
    assert client.get("/api/assets").json() == []
    assert len(client.get("/api/characters").json()) == 5
    assert client.get("/api/characters/杏/geometry").status_code == 409
    assert client.post("/api/characters/杏/export").status_code == 409


# ── Backup ───────────────────────────────────────────────


def test_backup_state_initially_idle(client):
    data = client.get("/api/backup").json()
    assert data["phase"] == "idle"
    assert data["handle"] is None
    assert data["outcome"] is None


def test_backup_and_restore(client, tmp_path):
    path = str(tmp_path / "backup.json")
    client.post("/api/characters", json={"identity": "杏", "components": ["木", "口"]})

    data = client.put("/api/backup/location", json={"path": path}).json()
    assert data["outcome"] == "success"
    assert data["handle"] == path
    assert [n["message"] for n in data["notifications"]] == ["Backup saved"]

    client.delete("/api/characters/杏")
    client.delete("/api/assets")

    data = client.post("/api/restore", json={"path": path}).json()
    assert data["outcome"] == "success"
    assert client.get("/api/characters/杏").status_code == 200
    assert client.get("/api/assets").json() == sorted(["口", "日", "木", "人"])


def test_backup_now_without_location_uses_default_file(client):
    # no stored handle: the location step runs with the default file name
    data = client.post("/api/backup").json()
    assert data["outcome"] == "success"
    assert data["handle"].endswith("buyan-studio-backup.json")


def test_restore_missing_file(client, tmp_path):
    data = client.post("/api/restore", json={"path": str(tmp_path / "gone.json")}).json()
    assert data["outcome"] == "aborted"
    assert data["notifications"][-1]["level"] == "warning"
    assert len(client.get("/api/characters").json()) == 4


def test_notifications_accumulate(client, tmp_path):
    client.put("/api/backup/location", json={"path": str(tmp_path / "b.json")})
    messages = [n["message"] for n in client.get("/api/notifications").json()]
    assert "Backup saved" in messages
