#!/usr/bin/env python3
"""
TaskFlow Quickstart: the whole API in one script.

Registers two users → creates tasks → updates, filters and paginates →
shows ownership enforcement → lists everything as the seeded admin.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running (taskflow serve) and the admin seeded
(taskflow seed-admin); override the admin login with
TASKFLOW_ADMIN_EMAIL / TASKFLOW_ADMIN_PASSWORD.
"""

import os

from _common import check_backend, create_user_client, login

ADMIN_EMAIL = os.environ.get("TASKFLOW_ADMIN_EMAIL", "admin@taskflow.com")
ADMIN_PASSWORD = os.environ.get("TASKFLOW_ADMIN_PASSWORD", "admin123456")


def main():
    check_backend()

    # ── Two independent users ─────────────────────────────────────
    print("\n1. Registering users...")
    alice, alice_user = create_user_client("alice")
    bob, _ = create_user_client("bob")

    # ── Create tasks ──────────────────────────────────────────────
    print("\n2. Creating tasks...")
    resp = alice.post("/tasks", json={"title": "Write quarterly report"})
    assert resp.status_code == 201, f"Failed: {resp.text}"
    report = resp.json()["data"]
    print(f"   {report['title']}: status={report['status']} priority={report['priority']}")

    for i in range(12):
        resp = alice.post("/tasks", json={
            "title": f"Chore #{i + 1}",
            "priority": ("low", "medium", "high")[i % 3],
        })
        assert resp.status_code == 201, f"Failed: {resp.text}"
    print("   + 12 chores")

    # ── Update ────────────────────────────────────────────────────
    print("\n3. Moving the report through its statuses...")
    for status in ("in_progress", "done"):
        resp = alice.put(f"/tasks/{report['id']}", json={"status": status})
        assert resp.status_code == 200, f"Failed: {resp.text}"
        print(f"   → {resp.json()['data']['status']}")

    # ── Filter + paginate ─────────────────────────────────────────
    print("\n4. Listing...")
    page = alice.get("/tasks", params={"page": 2, "limit": 5}).json()
    print(f"   page {page['page']}/{page['pages']}: {page['count']} of {page['total']} tasks")
    high = alice.get("/tasks", params={"priority": "high"}).json()
    print(f"   high priority: {high['total']}")

    # ── Ownership ─────────────────────────────────────────────────
    print("\n5. Bob tries to touch Alice's report...")
    resp = bob.get(f"/tasks/{report['id']}")
    print(f"   GET    → {resp.status_code} {resp.json()['error']}")
    resp = bob.delete(f"/tasks/{report['id']}")
    print(f"   DELETE → {resp.status_code} {resp.json()['error']}")
    print(f"   Bob's own list: {bob.get('/tasks').json()['total']} tasks")

    # ── Admin view ────────────────────────────────────────────────
    print("\n6. Admin view...")
    admin = login(ADMIN_EMAIL, ADMIN_PASSWORD)
    everything = admin.get("/admin/tasks", params={"limit": 3}).json()
    print(f"   all tasks: {everything['total']}")
    for task in everything["data"]:
        print(f"   - {task['title']} (owner: {task['owner']['email']})")
    per_user = admin.get(f"/admin/users/{alice_user['id']}/tasks").json()
    print(f"   {per_user['user']['email']}: {per_user['total']} tasks")

    # ── Cleanup ───────────────────────────────────────────────────
    print("\n7. Deleting the report...")
    resp = alice.delete(f"/tasks/{report['id']}")
    print(f"   {resp.json()['message']}")

    print("\nDone.")


if __name__ == "__main__":
    main()
