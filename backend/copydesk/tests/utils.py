from fastapi.testclient import TestClient

TEST_PASSWORD = "correct-horse-battery"


def signup_and_login(client: TestClient, email: str) -> dict[str, str]:
    response = client.post(
        "/api/v1/users/signup", json={"email": email, "password": TEST_PASSWORD}
    )
    assert response.status_code == 200, response.text
    response = client.post(
        "/api/v1/login/access-token",
        data={"username": email, "password": TEST_PASSWORD},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
