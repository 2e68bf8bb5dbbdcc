def test_register_login_and_me(client, register):
    user = register("Layla@Example.com", name="Layla")

    me = client.get("/auth/me", headers=user.headers)
    assert me.status_code == 200
    body = me.json()
    assert body["id"] == user.id
    assert body["email"] == "layla@example.com"
    assert body["name"] == "Layla"
    assert body["person_id"] is None
    assert body["person_space_id"] is None


def test_name_defaults_to_email_local_part(client, register):
    user = register("omar@example.com")
    assert client.get("/auth/me", headers=user.headers).json()["name"] == "omar"


def test_duplicate_email_rejected(client, register):
    register("dup@example.com")
    resp = client.post(
        "/auth/register",
        json={"email": "DUP@example.com", "password": "password123"},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Email already exists"


def test_short_password_rejected(client):
    resp = client.post("/auth/register", json={"email": "a@example.com", "password": "short"})
    assert resp.status_code == 400


def test_wrong_password(client, register):
    register("b@example.com")
    resp = client.post("/auth/login", json={"email": "b@example.com", "password": "wrong-password"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Incorrect email or password"


def test_me_requires_a_valid_token(client):
    assert client.get("/auth/me").status_code == 401
    resp = client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


def test_health(client):
    assert client.get("/").json() == {"message": "Family Space API is running!"}
