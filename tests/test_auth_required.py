from jose import jwt


def test_auth_required_missing_header(client):
    response = client.get("/threads")
    assert response.status_code in {401, 403}
    assert response.json()["detail"] in {"Not authenticated", "Invalid or expired token"}


def test_auth_invalid_token(client):
    response = client.get("/threads", headers={"Authorization": "Bearer not-a-real-token"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid or expired token"


def test_auth_token_without_subject(client, auth_settings):
    token = jwt.encode({"email": "nobody@example.com"}, auth_settings.auth_secret_key, algorithm=auth_settings.auth_algorithm)
    response = client.post("/chat", json={"message": "hi"}, headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_health_is_public(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_auth_accepts_string_subject(client, token_for):
    token = token_for("clx9user01", "cuid@example.com")
    headers = {"Authorization": f"Bearer {token}"}
    created = client.post("/threads", json={"title": "Mine"}, headers=headers)
    assert created.status_code == 201
    assert created.json()["user_id"] == "clx9user01"

    response = client.get("/threads", headers=headers)
    assert response.status_code == 200
    assert [t["title"] for t in response.json()] == ["Mine"]
