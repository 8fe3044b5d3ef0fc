from unittest.mock import patch

from fastapi.testclient import TestClient

from copydesk.tests.utils import TEST_PASSWORD, signup_and_login


def test_signup_login_and_me(client: TestClient):
    headers = signup_and_login(client, "writer@copydesk.io")

    response = client.get("/api/v1/users/me", headers=headers)

    assert response.status_code == 200
    assert response.json()["email"] == "writer@copydesk.io"
    assert "hashed_password" not in response.json()


def test_duplicate_signup_is_rejected(client: TestClient):
    signup_and_login(client, "writer@copydesk.io")

    response = client.post(
        "/api/v1/users/signup", json={"email": "writer@copydesk.io", "password": TEST_PASSWORD}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "User already registered with this email"


def test_login_with_wrong_password(client: TestClient):
    signup_and_login(client, "writer@copydesk.io")

    response = client.post(
        "/api/v1/login/access-token",
        data={"username": "writer@copydesk.io", "password": "not-the-password"},
    )

    assert response.status_code == 400


def test_invalid_token_is_rejected(client: TestClient):
    response = client.get("/api/v1/users/me", headers={"Authorization": "Bearer nonsense"})

    assert response.status_code == 403


def test_delete_me_removes_owned_records(client: TestClient, user_headers):
    client.post("/api/v1/business-profiles/", headers=user_headers, json={"name": "Gone"})
    chat = client.post(
        "/api/v1/chats/", headers=user_headers, json={"title": "Gone", "framework": "aida"}
    ).json()
    client.post(
        f"/api/v1/chats/{chat['id']}/messages",
        headers=user_headers,
        json={"role": "user", "content": "bye"},
    )

    response = client.delete("/api/v1/users/me", headers=user_headers)

    assert response.status_code == 200
    assert client.get("/api/v1/users/me", headers=user_headers).status_code == 404


def test_env_check_masks_key(client: TestClient):
    with patch("copydesk.api.routes.utils.settings.LLM_API_KEY", "sk-1234567890abcd"):
        body = client.get("/api/v1/utils/env-check/").json()

    assert body == {"apiKeyStatus": "Key is present", "apiKeyPreview": "sk-12...abcd"}


def test_health_check(client: TestClient):
    assert client.get("/api/v1/utils/health-check/").json() is True


def test_env_check_hides_short_keys(client: TestClient):
    with patch("copydesk.api.routes.utils.settings.LLM_API_KEY", "sk-short"):
        body = client.get("/api/v1/utils/env-check/").json()

    assert body == {"apiKeyStatus": "Key is present", "apiKeyPreview": "..."}

    with patch("copydesk.api.routes.utils.settings.LLM_API_KEY", ""):
        body = client.get("/api/v1/utils/env-check/").json()

    assert body == {"apiKeyStatus": "Key is missing", "apiKeyPreview": None}
