from conftest import add_person


def _people_url(space_id, person_id=""):
    return f"/spaces/{space_id}/people" + (f"/{person_id}" if person_id else "")


def _join_as(client, owner, user, space_id, role):
    req = client.post(f"/spaces/{space_id}/join-request", headers=user.headers).json()
    client.post(
        f"/spaces/join-requests/{req['request_id']}/accept",
        json={"role": role},
        headers=owner.headers,
    )


def test_create_and_fetch(client, owner, space_id):
    resp = client.post(
        _people_url(space_id),
        json={
            "first_name": "  Wael ",
            "last_name": "Aoudi",
            "first_name_ar": "وائل",
            "last_name_ar": "العودي",
            "gender": "male",
            "birth_year": 1990,
            "tags": ["engineer", " ", " poet "],
            "photo_url": "/media/wael.jpg",
        },
        headers=owner.headers,
    )
    assert resp.status_code == 201
    person = resp.json()

    assert person["first_name"] == "Wael"
    assert person["full_name"] == "Wael Aoudi"
    assert person["native_name"] == "وائل العودي"
    assert person["tags"] == ["engineer", "poet"]
    assert person["is_deceased"] is False
    assert person["photo_url"].endswith("/media/wael.jpg")
    assert person["photo_url"].startswith("http")
    assert person["can_edit"] is True

    fetched = client.get(_people_url(space_id, person["id"]))
    assert fetched.status_code == 200
    assert fetched.json()["can_edit"] is False


def test_create_validation(client, owner, space_id):
    blank = client.post(
        _people_url(space_id), json={"first_name": " ", "last_name": "X"}, headers=owner.headers
    )
    assert blank.status_code == 422

    years = client.post(
        _people_url(space_id),
        json={"first_name": "A", "last_name": "B", "birth_year": 2000, "death_year": 1990},
        headers=owner.headers,
    )
    assert years.status_code == 422


def test_viewers_cannot_add_people(client, owner, register, space_id):
    viewer = register("viewer@example.com")
    _join_as(client, owner, viewer, space_id, "VIEWER")

    resp = client.post(
        _people_url(space_id), json={"first_name": "A", "last_name": "B"}, headers=viewer.headers
    )
    assert resp.status_code == 403
    assert resp.json()["detail"] == "No permission to add people"

    assert client.post(_people_url(space_id), json={"first_name": "A", "last_name": "B"}).status_code == 401


def test_editors_edit_anyone(client, owner, register, space_id):
    editor = register("editor@example.com")
    _join_as(client, owner, editor, space_id, "EDITOR")
    pid = add_person(client, space_id, owner.headers, "Ahmad")

    resp = client.put(_people_url(space_id, pid), json={"nickname": "Abu Mohammed"}, headers=editor.headers)
    assert resp.status_code == 200
    assert resp.json()["nickname"] == "Abu Mohammed"


def test_viewer_update_forbidden(client, owner, register, space_id):
    viewer = register("viewer@example.com")
    _join_as(client, owner, viewer, space_id, "VIEWER")
    pid = add_person(client, space_id, owner.headers, "Ahmad")

    resp = client.put(_people_url(space_id, pid), json={"nickname": "X"}, headers=viewer.headers)
    assert resp.status_code == 403
    assert resp.json()["detail"] == "No edit permission"


def test_partial_update(client, owner, space_id):
    pid = add_person(client, space_id, owner.headers, "Ahmad", birth_year=1940, bio="Patriarch")

    resp = client.put(
        _people_url(space_id, pid),
        json={"death_year": 2010, "first_name": None},
        headers=owner.headers,
    )
    body = resp.json()
    assert resp.status_code == 200
    assert body["first_name"] == "Ahmad"
    assert body["bio"] == "Patriarch"
    assert body["death_year"] == 2010
    assert body["is_deceased"] is True

    cleared = client.put(_people_url(space_id, pid), json={"death_year": None}, headers=owner.headers)
    assert cleared.json()["death_year"] is None


def test_update_keeps_years_in_order(client, owner, space_id):
    pid = add_person(client, space_id, owner.headers, "Ahmad", birth_year=1940)

    resp = client.put(_people_url(space_id, pid), json={"death_year": 1930}, headers=owner.headers)
    assert resp.status_code == 400


def test_private_person_redacted_for_outsiders(client, owner, register, space_id):
    pid = add_person(
        client, space_id, owner.headers, "Hidden",
        is_private=True, birth_year=1950, bio="secret", tags=["x"],
    )

    outsider = register("outsider@example.com")
    for headers in ({}, outsider.headers):
        body = client.get(_people_url(space_id, pid), headers=headers).json()
        assert body["first_name"] == "Hidden"
        assert body["can_view"] is False
        assert body["bio"] is None
        assert body["birth_year"] is None
        assert body["tags"] == []
        assert body["is_deceased"] is None

    viewer = register("viewer@example.com")
    _join_as(client, owner, viewer, space_id, "VIEWER")
    body = client.get(_people_url(space_id, pid), headers=viewer.headers).json()
    assert body["can_view"] is True
    assert body["bio"] == "secret"


def test_hidden_birth_year_shown_only_to_editors(client, owner, space_id):
    pid = add_person(client, space_id, owner.headers, "Shy", birth_year=1985, hide_birth_year=True)

    assert client.get(_people_url(space_id, pid)).json()["birth_year"] is None
    assert client.get(_people_url(space_id, pid), headers=owner.headers).json()["birth_year"] == 1985


def test_search(client, owner, space_id):
    add_person(client, space_id, owner.headers, "Wael", first_name_ar="وائل")
    add_person(client, space_id, owner.headers, "Sara", nickname="Soso")
    add_person(client, space_id, owner.headers, "Omar", last_name="Haddad")

    def names(query):
        resp = client.get(_people_url(space_id) + "/search", params={"query": query})
        assert resp.status_code == 200
        return [p["first_name"] for p in resp.json()]

    assert names("wae") == ["Wael"]
    assert names("وائل") == ["Wael"]
    assert names("soso") == ["Sara"]
    assert names("aoudi") == ["Sara", "Wael"]
    assert names("   ") == []


def test_search_is_capped(client, owner, space_id):
    for i in range(25):
        add_person(client, space_id, owner.headers, f"Person{i:02d}")

    resp = client.get(_people_url(space_id) + "/search", params={"query": "person"})
    assert len(resp.json()) == 20


def test_list_sorted_by_first_name(client, owner, space_id):
    for name in ("Zaid", "Ahmad", "Mona"):
        add_person(client, space_id, owner.headers, name)

    people = client.get(_people_url(space_id)).json()
    assert [p["first_name"] for p in people] == ["Ahmad", "Mona", "Zaid"]


def test_person_from_another_space_is_404(client, owner, space_id):
    other = client.post("/spaces", json={"name": "Other"}, headers=owner.headers).json()["id"]
    pid = add_person(client, other, owner.headers, "Elsewhere")

    resp = client.get(_people_url(space_id, pid))
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Person not found"


def test_delete_removes_relationships(client, owner, family):
    resp = client.delete(_people_url(family.space_id, family.mohammed), headers=owner.headers)

    assert resp.status_code == 200
    assert resp.json() == {"status": "deleted", "id": family.mohammed, "relationships_removed": 5}

    remaining = client.get(f"/spaces/{family.space_id}/relationships").json()
    assert len(remaining) == 3
    assert all(family.mohammed not in (r["from_id"], r["to_id"]) for r in remaining)
    assert client.get(_people_url(family.space_id, family.mohammed)).status_code == 404


def test_search_matches_wildcards_literally(client, owner, family):
    url = f"/spaces/{family.space_id}/people/search"

    assert client.get(url, params={"query": "_"}).json() == []
    assert client.get(url, params={"query": "%"}).json() == []

    add_person(client, family.space_id, owner.headers, "Abu_Wael", nickname="100%")

    assert [p["first_name"] for p in client.get(url, params={"query": "u_w"}).json()] == ["Abu_Wael"]
    assert [p["first_name"] for p in client.get(url, params={"query": "0%"}).json()] == ["Abu_Wael"]
