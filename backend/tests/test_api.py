"""Pruebas de extremo a extremo sobre la API HTTP (FastAPI + SQLite)."""

from datetime import datetime, timedelta

import pytest


async def provision(client, admin_headers, room_id="room7"):
    r = await client.post("/api/v1/devices/provision", json={"room_id": room_id}, headers=admin_headers)
    assert r.status_code == 200, r.text
    return r.json()


async def test_pairing_scenario(client, admin_headers):
    provisioned = await provision(client, admin_headers, "room7")
    assert provisioned["room_id"] == "room7"
    assert provisioned["name"] == "room7"
    assert provisioned["pairing_code"].startswith("IMA-")
    assert "device_token" not in provisioned

    r = await client.post("/api/v1/devices/claim", json={"pairing_code": provisioned["pairing_code"], "device_id": "dev-42"})
    assert r.status_code == 200
    claimed = r.json()
    assert claimed["room_id"] == "room7"
    token = claimed["device_token"]

    r = await client.post("/api/v1/devices/heartbeat", json={"device_token": token})
    assert r.status_code == 200
    assert r.json()["room_id"] == "room7"
    assert r.json()["last_seen"]

    r = await client.post("/api/v1/devices/heartbeat", json={"device_token": "fabricated"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid device_token"}


async def test_second_claim_is_not_found(client, admin_headers):
    provisioned = await provision(client, admin_headers)
    body = {"pairing_code": provisioned["pairing_code"], "device_id": "dev-42"}

    assert (await client.post("/api/v1/devices/claim", json=body)).status_code == 200
    r = await client.post("/api/v1/devices/claim", json=body)
    assert r.status_code == 404
    assert r.json() == {"error": "Invalid pairing code"}


async def test_heartbeat_without_token_is_unauthorized(client):
    r = await client.post("/api/v1/devices/heartbeat", json={})
    assert r.status_code == 401


async def test_claim_body_validation_uses_error_shape(client):
    r = await client.post("/api/v1/devices/claim", json={})
    assert r.status_code == 400
    assert "pairing_code" in r.json()["error"]


class TestAdminAuth:
    async def test_missing_key(self, client):
        r = await client.post("/api/v1/devices/provision", json={"room_id": "room7"})
        assert r.status_code == 401
        assert r.json() == {"error": "Unauthorized"}

    async def test_wrong_key(self, client):
        r = await client.get("/api/v1/licensees/L/videos", headers={"X-Admin-Key": "wrong"})
        assert r.status_code == 401

    async def test_bearer_key(self, client, admin_headers):
        key = admin_headers["X-Admin-Key"]
        r = await client.get("/api/v1/licensees/L/videos", headers={"Authorization": f"Bearer {key}"})
        assert r.status_code == 200

    async def test_unconfigured_key_rejects_everything(self, client, monkeypatch):
        from station_sync.core.config import settings

        monkeypatch.setattr(settings, "ADMIN_API_KEY", None)
        r = await client.get("/api/v1/devices", headers={"X-Admin-Key": ""})
        assert r.status_code == 401


class TestDeviceAdmin:
    async def test_listing_never_exposes_tokens(self, client, admin_headers):
        await provision(client, admin_headers, "room1")
        await provision(client, admin_headers, "room2")

        r = await client.get("/api/v1/devices", headers=admin_headers)
        assert r.status_code == 200
        devices = r.json()
        assert [d["room_id"] for d in devices] == ["room1", "room2"]
        assert all("device_token" not in d for d in devices)

    async def test_deactivate_then_heartbeat_fails(self, client, admin_headers):
        provisioned = await provision(client, admin_headers)
        r = await client.post("/api/v1/devices/claim", json={"pairing_code": provisioned["pairing_code"], "device_id": "dev-42"})
        token = r.json()["device_token"]

        r = await client.post("/api/v1/devices/room7/deactivate", headers=admin_headers)
        assert r.status_code == 200
        assert r.json()["active"] is False

        r = await client.post("/api/v1/devices/heartbeat", json={"device_token": token})
        assert r.status_code == 401

    async def test_assign_licensee(self, client, admin_headers):
        provisioned = await provision(client, admin_headers)
        r = await client.post("/api/v1/devices/claim", json={"pairing_code": provisioned["pairing_code"], "device_id": "dev-42"})
        token = r.json()["device_token"]

        r = await client.post(
            "/api/v1/devices/assign-licensee",
            json={"device_token": token, "licensee_id": "lic-1", "room_id": "atlanta1"},
            headers=admin_headers,
        )
        assert r.status_code == 200
        device = r.json()["device"]
        assert device["room_id"] == "atlanta1"
        assert device["licensee_id"] == "lic-1"
        assert "device_token" not in device

        r = await client.get("/api/v1/licensees/lic-1/rooms", headers=admin_headers)
        assert r.json() == {"licensee_id": "lic-1", "rooms": ["atlanta1"]}

    async def test_assign_into_room_of_another_licensee(self, client, admin_headers):
        await client.post("/api/v1/licensees/lic-A/rooms", json={"room_id": "atlanta1"}, headers=admin_headers)
        provisioned = await provision(client, admin_headers)
        r = await client.post("/api/v1/devices/claim", json={"pairing_code": provisioned["pairing_code"], "device_id": "dev-42"})
        token = r.json()["device_token"]

        r = await client.post(
            "/api/v1/devices/assign-licensee",
            json={"device_token": token, "licensee_id": "lic-B", "room_id": "atlanta1"},
            headers=admin_headers,
        )
        assert r.status_code == 409

        r = await client.get("/api/v1/licensees/lic-A/rooms", headers=admin_headers)
        assert r.json()["rooms"] == ["atlanta1"]

    async def test_assign_unknown_token(self, client, admin_headers):
        r = await client.post(
            "/api/v1/devices/assign-licensee",
            json={"device_token": "nope", "licensee_id": "lic-1"},
            headers=admin_headers,
        )
        assert r.status_code == 404


class TestSessions:
    async def test_read_unknown_room(self, client):
        r = await client.get("/api/v1/sessions/ghost")
        assert r.status_code == 404
        assert r.json() == {"error": "Room not found"}

    async def test_command_cycle(self, client, admin_headers, catalog):
        await provision(client, admin_headers)
        url = "/api/v1/sessions/room7/commands"

        r = await client.post(url, json={"command": "play", "label": "a1v1"})
        assert r.status_code == 200
        assert r.json()["state"] == "playing"
        assert r.json()["playback_ref"] == "A1V1"

        r = await client.post(url, json={"command": "pause"})
        assert r.json()["state"] == "paused"
        assert r.json()["playback_ref"] == "A1V1"

        r = await client.post(url, json={"command": "stop"})
        body = r.json()
        assert body["state"] == "stopped"
        assert body["playback_ref"] is None
        assert body["started_at"] is None
        assert body["paused_at"] is None

        r = await client.get("/api/v1/sessions/room7")
        assert r.status_code == 200
        assert r.json()["state"] == "stopped"

    async def test_timestamps_carry_utc_offset(self, client, admin_headers, catalog):
        await provision(client, admin_headers)
        url = "/api/v1/sessions/room7/commands"
        await client.post(url, json={"command": "play", "label": "A1V1"})
        await client.post(url, json={"command": "pause"})

        body = (await client.get("/api/v1/sessions/room7")).json()

        for field in ("started_at", "paused_at", "updated_at"):
            assert datetime.fromisoformat(body[field].replace("Z", "+00:00")).utcoffset() == timedelta(0), field

    async def test_seek_is_acknowledged(self, client, admin_headers, catalog):
        await provision(client, admin_headers)
        url = "/api/v1/sessions/room7/commands"
        await client.post(url, json={"command": "play", "label": "A1V1"})

        r = await client.post(url, json={"command": "seek_delta", "value": 10})
        assert r.status_code == 202
        assert r.json() == {"room_id": "room7", "command_id": 1, "command_type": "seek_delta", "command_value": 10.0}

        state = (await client.get("/api/v1/sessions/room7")).json()
        assert state["state"] == "playing"
        assert state["command_id"] == 1

    @pytest.mark.parametrize("body", [
        {"command": "seek_delta", "value": 0},
        {"command": "seek_delta"},
        {"command": "play"},
        {"command": "rewind"},
        {},
    ])
    async def test_bad_commands(self, client, admin_headers, catalog, body):
        await provision(client, admin_headers)
        r = await client.post("/api/v1/sessions/room7/commands", json=body)
        assert r.status_code == 400
        assert "error" in r.json()

    async def test_disallowed_label(self, client, admin_headers, catalog):
        await provision(client, admin_headers)
        await client.post("/api/v1/licensees/L/rooms", json={"room_id": "room7"}, headers=admin_headers)
        await client.put("/api/v1/licensees/L/videos", json={"video_labels": ["A1V1"]}, headers=admin_headers)
        before = (await client.get("/api/v1/sessions/room7")).json()

        r = await client.post("/api/v1/sessions/room7/commands", json={"command": "play", "label": "B2V1"})

        assert r.status_code == 400
        assert (await client.get("/api/v1/sessions/room7")).json() == before


class TestAccessGate:
    async def test_replace_and_read(self, client, admin_headers):
        r = await client.put("/api/v1/licensees/L/videos", json={"video_labels": ["a1v1", "A1V2", "a1v1"]}, headers=admin_headers)
        assert r.status_code == 204
        assert r.content == b""

        r = await client.get("/api/v1/licensees/L/videos", headers=admin_headers)
        assert r.json() == {"licensee_id": "L", "video_labels": ["A1V1", "A1V2"]}

    async def test_add_and_remove(self, client, admin_headers):
        r = await client.post("/api/v1/licensees/L/videos", json={"video_label": "b2v1"}, headers=admin_headers)
        assert r.status_code == 204
        r = await client.delete("/api/v1/licensees/L/videos", params={"video_label": "B2V1"}, headers=admin_headers)
        assert r.status_code == 204

        r = await client.get("/api/v1/licensees/L/videos", headers=admin_headers)
        assert r.json()["video_labels"] == []

    async def test_remove_requires_label(self, client, admin_headers):
        r = await client.delete("/api/v1/licensees/L/videos", headers=admin_headers)
        assert r.status_code == 400
        assert r.json() == {"error": "Missing video_label"}

    async def test_replace_requires_list(self, client, admin_headers):
        r = await client.put("/api/v1/licensees/L/videos", json={}, headers=admin_headers)
        assert r.status_code == 400

    async def test_room_conflict(self, client, admin_headers):
        await client.put("/api/v1/licensees/L1/rooms", json={"rooms": ["atlanta1"]}, headers=admin_headers)
        r = await client.post("/api/v1/licensees/L2/rooms", json={"room_id": "atlanta1"}, headers=admin_headers)
        assert r.status_code == 409


class TestVideos:
    async def test_full_library(self, client, catalog):
        r = await client.get("/api/v1/videos")
        assert [v["label"] for v in r.json()["videos"]] == ["A1V1", "A1V2", "B2V1"]

    async def test_room_filter(self, client, admin_headers, catalog):
        r = await client.get("/api/v1/videos", params={"room": "room7"})
        assert r.json() == {"videos": []}

        await client.post("/api/v1/licensees/L/rooms", json={"room_id": "room7"}, headers=admin_headers)
        await client.put("/api/v1/licensees/L/videos", json={"video_labels": ["B2V1"]}, headers=admin_headers)

        r = await client.get("/api/v1/videos", params={"room": "room7"})
        videos = r.json()["videos"]
        assert [v["label"] for v in videos] == ["B2V1"]
        assert videos[0]["playback_ref"] == "mux-b2v1"
