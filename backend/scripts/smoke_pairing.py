#!/usr/bin/env python3
"""
Prueba manual contra un backend en marcha: provisiona una sala, reclama el
dispositivo, envía un latido y recorre play/pause/stop.

    ADMIN_API_KEY=... python scripts/smoke_pairing.py studioA A1V1
"""
import os
import sys
import time
import uuid
import requests

BACKEND_URL = os.environ.get("STATION_SYNC_URL", "http://localhost:8000")
ADMIN_HEADERS = {"X-Admin-Key": os.environ.get("ADMIN_API_KEY", "")}

room_id = sys.argv[1] if len(sys.argv) > 1 else "studioA"
label = sys.argv[2] if len(sys.argv) > 2 else None

print(f"📟 1. Provisionando la sala {room_id}...")
r = requests.post(f"{BACKEND_URL}/api/v1/devices/provision", json={"room_id": room_id}, headers=ADMIN_HEADERS)
if r.status_code != 200:
    print(f"❌ Error: {r.text}")
    sys.exit(1)
pairing_code = r.json()["pairing_code"]
print(f"✅ Código de emparejamiento: {pairing_code}")

print("\n🔗 2. Reclamando el dispositivo...")
r = requests.post(f"{BACKEND_URL}/api/v1/devices/claim", json={"pairing_code": pairing_code, "device_id": f"smoke-{uuid.uuid4().hex[:8]}"})
if r.status_code != 200:
    print(f"❌ Error: {r.text}")
    sys.exit(1)
device_token = r.json()["device_token"]
print("✅ Dispositivo emparejado")

print("\n💓 3. Latido...")
r = requests.post(f"{BACKEND_URL}/api/v1/devices/heartbeat", json={"device_token": device_token})
print(f"   {r.status_code} {r.json()}")

r = requests.post(f"{BACKEND_URL}/api/v1/devices/heartbeat", json={"device_token": "token-inventado"})
print(f"   Token inventado -> {r.status_code} (esperado 401)")

if label:
    session_url = f"{BACKEND_URL}/api/v1/sessions/{room_id}/commands"
    for body in ({"command": "play", "label": label}, {"command": "pause"}, {"command": "seek_delta", "value": 10}, {"command": "stop"}):
        print(f"\n▶️ {body}")
        r = requests.post(session_url, json=body)
        print(f"   {r.status_code} {r.text}")
        time.sleep(1.5)

print("\n" + "="*50)
print("✅ PRUEBA COMPLETADA")
print("="*50)
