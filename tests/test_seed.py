from familyspace.database import SessionLocal
from familyspace.seed import ADMIN_EMAIL, seed


def test_seed_builds_demo_family(client):
    db = SessionLocal()
    try:
        space = seed(db, "changeme123")
        space_id = space.id
    finally:
        db.close()

    login = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": "changeme123"})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    detail = client.get(f"/spaces/{space_id}", headers=headers).json()
    assert detail["my_role"] == "OWNER"
    assert detail["people_count"] == 6

    tree = client.get(f"/spaces/{space_id}/tree").json()
    assert len(tree["relationships"]) == 8
