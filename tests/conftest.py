import os

# Must be set before familyspace.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from familyspace.database import Base, engine  # noqa: E402
from familyspace.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def register(client):
    """Register + log in a user; returns an object with id and auth headers."""

    def _register(email: str, password: str = "password123", name: str | None = None):
        resp = client.post(
            "/auth/register",
            json={"email": email, "password": password, "name": name},
        )
        assert resp.status_code == 201, resp.text

        login = client.post("/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

        return SimpleNamespace(id=resp.json()["user_id"], email=email, headers=headers)

    return _register


@pytest.fixture
def owner(register):
    return register("owner@example.com", name="Owner")


@pytest.fixture
def space_id(client, owner):
    resp = client.post("/spaces", json={"name": "Aoudi Family"}, headers=owner.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


def add_person(client, space_id, headers, first_name, last_name="Aoudi", **fields):
    resp = client.post(
        f"/spaces/{space_id}/people",
        json={"first_name": first_name, "last_name": last_name, **fields},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


def link(client, space_id, headers, type_, from_id, to_id, **fields):
    resp = client.post(
        f"/spaces/{space_id}/relationships",
        json={"type": type_, "from_id": from_id, "to_id": to_id, **fields},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


@pytest.fixture
def family(client, owner, space_id):
    """
    Ahmad = Fatima
          |
    Mohammed = Nour
          |
      Wael, Sara
    """
    h = owner.headers
    ids = SimpleNamespace(space_id=space_id)

    ids.ahmad = add_person(client, space_id, h, "Ahmad", gender="male")
    ids.fatima = add_person(client, space_id, h, "Fatima", gender="female")
    ids.mohammed = add_person(client, space_id, h, "Mohammed", gender="male")
    ids.nour = add_person(client, space_id, h, "Nour", gender="female")
    ids.wael = add_person(client, space_id, h, "Wael", gender="male")
    ids.sara = add_person(client, space_id, h, "Sara", gender="female")

    link(client, space_id, h, "SPOUSE", ids.ahmad, ids.fatima)
    link(client, space_id, h, "PARENT_CHILD", ids.ahmad, ids.mohammed)
    link(client, space_id, h, "PARENT_CHILD", ids.fatima, ids.mohammed)
    link(client, space_id, h, "SPOUSE", ids.mohammed, ids.nour)
    for child in (ids.wael, ids.sara):
        link(client, space_id, h, "PARENT_CHILD", ids.mohammed, child)
        link(client, space_id, h, "PARENT_CHILD", ids.nour, child)

    return ids


def approve_claim_for(client, owner, user, space_id, person_id):
    """Submit a claim as `user` and approve it as `owner`."""
    claim = client.post(
        f"/spaces/{space_id}/people/{person_id}/claim", headers=user.headers
    )
    assert claim.status_code == 201, claim.text

    approved = client.post(
        f"/spaces/{space_id}/claims/{claim.json()['id']}/approve", headers=owner.headers
    )
    assert approved.status_code == 200, approved.text
    return claim.json()["id"]
