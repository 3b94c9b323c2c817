from models import ActivityLog, Task, User
from seed import DEMO_EMAIL, DEMO_PASSWORD, seed


def test_seed_creates_demo_account(client, settings, db):
    user_id = seed(settings)

    response = client.post("/auth/login", json={"email": DEMO_EMAIL, "password": DEMO_PASSWORD})
    assert response.status_code == 200
    assert response.json()["data"]["user"]["id"] == user_id

    headers = {"Authorization": f"Bearer {response.json()['data']['token']}"}
    tasks = client.get("/tasks", headers=headers).json()["data"]
    assert [t["status"] for t in tasks] == ["DONE", "IN_PROGRESS", "TODO"]


def test_seed_is_idempotent(settings, db):
    first = seed(settings)
    second = seed(settings)

    assert first == second
    assert db.query(User).count() == 1
    assert db.query(Task).count() == 3
    assert db.query(ActivityLog).filter(ActivityLog.action == "CREATE").count() == 3
