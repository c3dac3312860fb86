"""
Persistence smoke test.

Starts the server, creates a tracking as the seeded admin, restarts the
server and checks the tracking can still be looked up by its ID.
Requires a reachable DATABASE_URL and a seeded admin (parcel_tracker/seed_admin.py).
"""

import time
import subprocess
import httpx
import sys
import os
import signal

BASE_URL = "http://127.0.0.1:8000"
API_PREFIX = "/v1"
SERVER_CMD = [sys.executable, "-m", "uvicorn", "parcel_tracker.app.main:app", "--host", "127.0.0.1", "--port", "8000"]

def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for i in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print("✅ Server is up!")
                return True
        except httpx.ConnectError:
            pass
        time.sleep(delay)
    print("❌ Server failed to start.")
    return False

def login():
    resp = httpx.post(f"{BASE_URL}{API_PREFIX}/admin/login", json={
        "username": os.getenv("ADMIN_USERNAME", "admin"),
        "password": os.getenv("ADMIN_PASSWORD", "admin123"),
    })
    if resp.status_code != 200:
        raise Exception(f"Login failed: {resp.status_code} {resp.text}")
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}

def run_verification():
    # 1. Start Server (First Run)
    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = subprocess.Popen(
        SERVER_CMD,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env={**os.environ, "DB_ECHO": "True"} # Enable echo to see SQL
    )

    try:
        if not wait_for_server():
            server_logs = proc.communicate(timeout=2)
            print("Server Stdout:", server_logs[0].decode())
            print("Server Stderr:", server_logs[1].decode())
            raise Exception("Server start failed")

        # 2. Create Tracking
        print("\n--- [Step 2] Creating Tracking (Persistence Test) ---")
        resp = httpx.post(f"{BASE_URL}{API_PREFIX}/admin/trackings", headers=login(), json={
            "name": "Persistence Check",
            "startLocation": "New York Warehouse",
            "endLocation": "Customer Address",
            "stopovers": ["Chicago Distribution Center", "Denver Hub"],
            "userName": "John Doe",
            "userEmail": "john.doe@example.com",
            "userPhone": "+1 555 123 4567",
        })
        if resp.status_code != 201:
            raise Exception(f"Tracking creation failed: {resp.status_code} {resp.text}")
        tracking_id = resp.json()["id"]
        print(f"✅ Tracking {tracking_id} created")

    finally:
        print("\n--- [Step 3] Stopping Server ---")
        proc.send_signal(signal.SIGTERM)
        proc.wait()

    time.sleep(2) # Wait for port release

    # 3. Restart Server
    print("\n--- [Step 4] Restarting Server (Verification) ---")
    proc2 = subprocess.Popen(SERVER_CMD, stdout=subprocess.PIPE, stderr=subprocess.PIPE)

    try:
        if not wait_for_server():
            raise Exception("Server restart failed")

        # 4. Customer lookup
        print("\n--- [Step 5] Looking Up Tracking (Post-Restart) ---")
        resp = httpx.get(f"{BASE_URL}{API_PREFIX}/trackings/{tracking_id}")
        if resp.status_code == 200:
            print("✅ Tracking Persisted!")
            print(resp.json())
        else:
            raise Exception(f"Lookup failed after restart: {resp.status_code} {resp.text}")

    finally:
        print("\n--- [Step 6] Stopping Server ---")
        proc2.send_signal(signal.SIGTERM)
        proc2.wait()

if __name__ == "__main__":
    run_verification()
