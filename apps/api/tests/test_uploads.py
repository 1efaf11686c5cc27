from __future__ import annotations

from voicechat.modules.voices.service import generated_filename


def _files(store, kind):
    d = store.upload_dir(kind)
    return sorted(p.name for p in d.iterdir()) if d.exists() else []


def test_voice_upload_records_and_stores_file(user_client, store):
    r = user_client.post("/upload/voice", files={"audio": ("clip.webm", b"RIFFdata", "audio/webm")})
    assert r.status_code == 200, r.text
    rec = r.json()
    assert rec["filename"].endswith(".webm")
    assert rec["url"] == f"/uploads/audio/{rec['filename']}"
    assert _files(store, "audio") == [rec["filename"]]
    assert [v.id for v in store.voices.read()] == [rec["id"]]
    assert (store.data_root / "voices.json").exists()


def test_voice_upload_emits_voice_pending(user_client, ultimate_client):
    with ultimate_client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}
        user_client.post("/upload/voice", files={"audio": ("clip.webm", b"data", "audio/webm")})
        assert ws.receive_json() == {"type": "voice-pending"}


def test_voice_upload_requires_file_and_session(client, user_client):
    assert client.post("/upload/voice", files={"audio": ("a.webm", b"x", "audio/webm")}).status_code == 401
    r = user_client.post("/upload/voice", data={"other": "field"})
    assert r.status_code == 400
    assert r.json()["error"] == "missing_file"


def test_voice_listing_is_ultimate_only(user_client, ultimate_client):
    user_client.post("/upload/voice", files={"audio": ("clip.webm", b"data", "audio/webm")})
    assert user_client.get("/voices").status_code == 403
    listed = ultimate_client.get("/voices").json()
    assert len(listed) == 1
    bob_id = user_client.get("/me").json()["id"]
    assert listed[0]["user_id"] == bob_id


def test_character_image_upload(user_client, store):
    rex = user_client.post("/characters", json={"name": "Rex"}).json()
    r = user_client.post(
        "/upload/character-image",
        data={"charId": rex["id"]},
        files={"image": ("rex.png", b"\x89PNGdata", "image/png")},
    )
    assert r.status_code == 200, r.text
    image = r.json()["image"]
    assert image.startswith("/uploads/images/")
    assert image.endswith(".png")

    served = user_client.get(image)
    assert served.status_code == 200
    assert served.content == b"\x89PNGdata"
    assert user_client.get("/characters").json()[0]["image"] == image


def test_character_image_for_unknown_character_writes_nothing(user_client, store):
    r = user_client.post(
        "/upload/character-image",
        data={"char_id": "NOPE"},
        files={"image": ("rex.png", b"data", "image/png")},
    )
    assert r.status_code == 404
    assert _files(store, "images") == []


def test_generated_filename_keeps_only_plain_suffix():
    assert generated_filename("voice.WEBM").endswith(".webm")
    assert "." not in generated_filename("../../etc/passwd")
    assert "." not in generated_filename("x.tar.gz;rm")
    assert "." not in generated_filename(None)
    assert generated_filename("a.mp3") != generated_filename("a.mp3")


def test_character_image_upload_requires_char_id(user_client):
    r = user_client.post("/upload/character-image", files={"image": ("rex.png", b"data", "image/png")})
    assert r.status_code == 400
    assert r.json()["message"] == "charId is required"
