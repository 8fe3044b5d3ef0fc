from fastapi.testclient import TestClient

API = "/api/v1/business-profiles"


def _create(client: TestClient, headers: dict[str, str], name: str, **fields) -> dict:
    response = client.post(f"{API}/", headers=headers, json={"name": name, **fields})
    assert response.status_code == 200, response.text
    return response.json()


def _defaults(client: TestClient, headers: dict[str, str]) -> list[dict]:
    profiles = client.get(f"{API}/", headers=headers).json()
    return [profile for profile in profiles if profile["is_default"]]


def test_first_profile_becomes_default(client: TestClient, user_headers):
    first = _create(client, user_headers, "Hydra Bottles", industry="Outdoor gear")
    second = _create(client, user_headers, "Side Project")

    assert first["is_default"] is True
    assert second["is_default"] is False
    response = client.get(f"{API}/default", headers=user_headers)
    assert response.json()["id"] == first["id"]


def test_no_default_profile_returns_null(client: TestClient, user_headers):
    response = client.get(f"{API}/default", headers=user_headers)

    assert response.status_code == 200
    assert response.json() is None


def test_set_default_leaves_exactly_one_default(client: TestClient, user_headers):
    profiles = [_create(client, user_headers, f"Brand {i}") for i in range(4)]

    for profile in (profiles[2], profiles[0], profiles[3], profiles[3]):
        response = client.post(f"{API}/{profile['id']}/default", headers=user_headers)
        assert response.status_code == 200
        defaults = _defaults(client, user_headers)
        assert [d["id"] for d in defaults] == [profile["id"]]


def test_creating_default_profile_unsets_previous(client: TestClient, user_headers):
    _create(client, user_headers, "Old default")
    new_default = _create(client, user_headers, "New default", is_default=True)

    assert [d["id"] for d in _defaults(client, user_headers)] == [new_default["id"]]


def test_update_with_is_default_unsets_others(client: TestClient, user_headers):
    _create(client, user_headers, "First")
    second = _create(client, user_headers, "Second")

    response = client.patch(
        f"{API}/{second['id']}",
        headers=user_headers,
        json={"is_default": True, "brand_voice": "Playful"},
    )

    assert response.status_code == 200
    assert response.json()["brand_voice"] == "Playful"
    assert [d["id"] for d in _defaults(client, user_headers)] == [second["id"]]


def test_defaults_are_scoped_per_user(client: TestClient, user_headers, other_headers):
    mine = _create(client, user_headers, "Mine")
    theirs = _create(client, other_headers, "Theirs")

    client.post(f"{API}/{mine['id']}/default", headers=user_headers)

    assert [d["id"] for d in _defaults(client, other_headers)] == [theirs["id"]]


def test_deleting_default_promotes_a_remaining_profile(client: TestClient, user_headers):
    default = _create(client, user_headers, "Default")
    remaining = {_create(client, user_headers, name)["id"] for name in ("B", "C")}

    response = client.delete(f"{API}/{default['id']}", headers=user_headers)

    assert response.status_code == 200
    defaults = _defaults(client, user_headers)
    assert len(defaults) == 1
    assert defaults[0]["id"] in remaining


def test_deleting_last_profile_leaves_no_default(client: TestClient, user_headers):
    only = _create(client, user_headers, "Only")

    client.delete(f"{API}/{only['id']}", headers=user_headers)

    assert client.get(f"{API}/", headers=user_headers).json() == []
    assert client.get(f"{API}/default", headers=user_headers).json() is None


def test_deleting_non_default_keeps_default(client: TestClient, user_headers):
    default = _create(client, user_headers, "Default")
    other = _create(client, user_headers, "Other")

    client.delete(f"{API}/{other['id']}", headers=user_headers)

    assert [d["id"] for d in _defaults(client, user_headers)] == [default["id"]]


def test_deleting_profile_detaches_chats(client: TestClient, user_headers):
    profile = _create(client, user_headers, "Soon gone")
    chat = client.post(
        "/api/v1/chats/",
        headers=user_headers,
        json={"title": "Launch", "framework": "aida", "business_profile_id": profile["id"]},
    ).json()

    client.delete(f"{API}/{profile['id']}", headers=user_headers)

    body = client.get(f"/api/v1/chats/{chat['id']}", headers=user_headers).json()
    assert body["business_profile_id"] is None
    assert body["business_profile"] is None


def test_other_users_profile_is_forbidden(client: TestClient, user_headers, other_headers):
    profile = _create(client, user_headers, "Private")

    assert client.get(f"{API}/{profile['id']}", headers=other_headers).status_code == 403
    assert client.post(f"{API}/{profile['id']}/default", headers=other_headers).status_code == 403
    assert client.delete(f"{API}/{profile['id']}", headers=other_headers).status_code == 403
    # Untouched by the rejected calls
    assert client.get(f"{API}/{profile['id']}", headers=user_headers).json()["is_default"] is True


def test_profiles_require_authentication(client: TestClient):
    assert client.get(f"{API}/").status_code == 401
