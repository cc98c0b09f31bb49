from jose import jwt

from app.config import get_settings
from conftest import PASSWORD, auth_headers, signup


def test_signup_returns_token_for_new_user(client):
    data = signup(client, email="Alpha@Example.com", name="Alpha")

    assert data["user"]["email"] == "alpha@example.com"
    assert data["user"]["name"] == "Alpha"
    assert data["user"]["budgets"] == []
    assert data["user"]["is_verified"] is False
    assert "password_hash" not in data["user"]

    settings = get_settings()
    claims = jwt.decode(data["token"], settings.secret_key, algorithms=[settings.algorithm])
    assert claims["sub"] == data["user"]["id"]
    assert claims["type"] == "session"


def test_signup_rejects_duplicate_email_in_any_case(client):
    signup(client, email="beta@example.com")

    response = client.post(
        "/api/auth/signup",
        json={"name": "Other", "email": "BETA@example.com", "password": PASSWORD},
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "User already exists with this email"


def test_signup_requires_all_fields(client):
    response = client.post("/api/auth/signup", json={"email": "x@example.com", "password": PASSWORD})
    assert response.status_code == 422


def test_signup_rejects_unknown_fields(client):
    response = client.post(
        "/api/auth/signup",
        json={"name": "X", "email": "x@example.com", "password": PASSWORD, "role": "admin"},
    )
    assert response.status_code == 422


def test_login_with_correct_password(client):
    created = signup(client, email="gamma@example.com")

    response = client.post("/api/auth/login", json={"email": "GAMMA@example.com", "password": PASSWORD})
    assert response.status_code == 200
    data = response.json()
    assert data["token"]
    assert data["user"]["id"] == created["user"]["id"]


def test_login_failures_are_indistinguishable(client):
    signup(client, email="delta@example.com")

    wrong_password = client.post("/api/auth/login", json={"email": "delta@example.com", "password": "nope-nope"})
    unknown_email = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "nope-nope"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"detail": "Invalid credentials"}


def test_me_requires_bearer_token(client):
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Token abc"}).status_code == 401
    assert client.get("/api/auth/me", headers=auth_headers("not-a-jwt")).status_code == 401


def test_me_rejects_tampered_token(client):
    data = signup(client, email="eps@example.com")
    token = data["token"]
    tampered = token[:-2] + ("AA" if token[-2:] != "AA" else "BB")

    assert client.get("/api/auth/me", headers=auth_headers(tampered)).status_code == 401


def test_me_returns_projection_without_hash(client):
    data = signup(client, email="zeta@example.com", name="Zeta")

    response = client.get("/api/auth/me", headers=auth_headers(data["token"]))
    assert response.status_code == 200
    user = response.json()["user"]
    assert user == {
        "id": data["user"]["id"],
        "name": "Zeta",
        "email": "zeta@example.com",
        "budgets": [],
        "is_verified": False,
    }


def test_me_returns_404_when_account_is_gone(ctx):
    from app.models.user import User

    data = signup(ctx.client, email="eta@example.com")
    db = ctx.session_factory()
    try:
        db.query(User).filter(User.id == data["user"]["id"]).delete()
        db.commit()
    finally:
        db.close()

    response = ctx.client.get("/api/auth/me", headers=auth_headers(data["token"]))
    assert response.status_code == 404


def test_update_profile(client):
    data = signup(client, email="theta@example.com", name="Theta")

    response = client.put(
        "/api/auth/profile",
        json={"name": "Theta Prime", "email": "theta.prime@example.com"},
        headers=auth_headers(data["token"]),
    )
    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Theta Prime"
    assert response.json()["user"]["email"] == "theta.prime@example.com"

    login = client.post("/api/auth/login", json={"email": "theta.prime@example.com", "password": PASSWORD})
    assert login.status_code == 200


def test_update_profile_keeping_own_email(client):
    data = signup(client, email="iota@example.com", name="Iota")

    response = client.put(
        "/api/auth/profile",
        json={"name": "Iota Renamed", "email": "IOTA@example.com"},
        headers=auth_headers(data["token"]),
    )
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "iota@example.com"


def test_update_profile_rejects_taken_email(client):
    signup(client, email="kappa@example.com")
    data = signup(client, email="lambda@example.com")

    response = client.put(
        "/api/auth/profile",
        json={"name": "Lambda", "email": "kappa@example.com"},
        headers=auth_headers(data["token"]),
    )
    assert response.status_code == 409
