"""
Smoke tests for admin login and token-protected access.
"""


def test_login_success(client, admin_credentials):
    """Test successful login with correct credentials."""
    response = client.post(
        "/auth/login",
        data={
            "username": admin_credentials["username"],  # OAuth2PasswordRequestForm uses 'username'
            "password": admin_credentials["password"]
        },
        headers={"Content-Type": "application/x-www-form-urlencoded"}
    )

    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"
    assert len(data["access_token"]) > 0


def test_login_email_is_case_insensitive(client, admin_credentials):
    response = client.post(
        "/auth/login",
        data={"username": "  Admin@Gym.Example ", "password": admin_credentials["password"]},
    )
    assert response.status_code == 200


def test_login_wrong_password(client, admin_credentials):
    """Test login with wrong password returns 401."""
    response = client.post(
        "/auth/login",
        data={"username": admin_credentials["username"], "password": "wrongpassword"},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_login_unknown_admin(client):
    """Test login with non-existent admin returns 401."""
    response = client.post(
        "/auth/login",
        data={"username": "nobody@gym.example", "password": "whatever123"},
    )

    assert response.status_code == 401


def test_token_grants_access_to_members(client, admin_credentials):
    login = client.post("/auth/login", data=admin_credentials)
    token = login.json()["access_token"]

    response = client.get("/members", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200


def test_members_require_token(client):
    assert client.get("/members").status_code == 401


def test_members_reject_garbage_token(client):
    response = client.get("/members", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_root_and_health(client):
    assert client.get("/").json() == {"status": "Gym Membership API running"}

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"
    assert health.json()["database"] == "connected"
