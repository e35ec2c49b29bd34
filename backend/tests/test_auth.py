from app.core.security import decode_access_token
from app.models.user import Role, User

from conftest import auth_header, register


def test_register_returns_token_and_public_user(client, db):
    body = register(client, "Cleo", "cleo@example.com", password="pw-123456")

    assert body["message"] == "User registered successfully"
    assert body["user"]["email"] == "cleo@example.com"
    assert body["user"]["role"] == "client"
    assert "password" not in body["user"]
    assert "hashed_password" not in body["user"]

    payload = decode_access_token(body["token"])
    assert payload["sub"] == body["user"]["id"]
    assert payload["role"] == "client"

    stored = db.query(User).filter(User.email == "cleo@example.com").one()
    assert stored.hashed_password != "pw-123456"


def test_role_defaults_to_client(client):
    response = client.post("/api/auth/register", json={
        "name": "No Role", "email": "norole@example.com", "password": "pw",
    })
    assert response.status_code == 201
    assert response.json()["user"]["role"] == "client"


def test_duplicate_email_conflicts_and_keeps_first_user(client, db):
    first = register(client, "First", "dup@example.com", password="first-pw")

    response = client.post("/api/auth/register", json={
        "name": "Second", "email": "dup@example.com", "password": "second-pw",
    })

    assert response.status_code == 400
    assert response.json()["error"] == "Email already in use"
    users = db.query(User).filter(User.email == "dup@example.com").all()
    assert len(users) == 1
    assert users[0].id == first["user"]["id"]
    assert users[0].name == "First"

    login = client.post("/api/auth/login", json={"email": "dup@example.com", "password": "first-pw"})
    assert login.status_code == 200


def test_missing_fields_are_rejected(client):
    response = client.post("/api/auth/register", json={"email": "x@example.com", "password": "pw"})
    assert response.status_code == 400
    assert response.json()["error"] == "Please provide all required fields"


def test_vendor_requires_whatsapp_number(client, db):
    response = client.post("/api/auth/register", json={
        "name": "Vic", "email": "vic@example.com", "password": "pw", "role": "vendor",
    })

    assert response.status_code == 400
    assert response.json()["field"] == "whatsappNumber"
    assert db.query(User).count() == 0


def test_vendor_whatsapp_number_is_stored(client, db):
    register(client, "Vic", "vic@example.com", role="vendor", whatsapp="+15551234567")
    register(client, "Cal", "cal@example.com", role="client", whatsapp="+15550000000")

    assert db.query(User).filter(User.email == "vic@example.com").one().whatsapp_number == "+15551234567"
    # Only vendors keep a contact number
    assert db.query(User).filter(User.email == "cal@example.com").one().whatsapp_number is None


def test_unknown_role_is_rejected(client):
    response = client.post("/api/auth/register", json={
        "name": "Root", "email": "root@example.com", "password": "pw", "role": "superuser",
    })
    assert response.status_code == 400
    assert "error" in response.json()


def test_login_returns_fresh_token(client):
    register(client, "Vic", "vic@example.com", role="vendor", password="pw-vendor", whatsapp="+1555")

    response = client.post("/api/auth/login", json={"email": "vic@example.com", "password": "pw-vendor"})

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["role"] == "vendor"
    assert decode_access_token(body["token"])["role"] == Role.VENDOR.value


def test_login_failures_are_indistinguishable(client):
    register(client, "Cleo", "cleo@example.com", password="right-pw")

    wrong_password = client.post("/api/auth/login", json={"email": "cleo@example.com", "password": "wrong-pw"})
    unknown_email = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "right-pw"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"error": "Invalid credentials"}


def test_login_requires_both_fields(client):
    response = client.post("/api/auth/login", json={"email": "cleo@example.com"})
    assert response.status_code == 400
    assert response.json()["error"] == "Please provide email and password"


def test_me_returns_token_owner(client):
    body = register(client, "Cleo", "cleo@example.com")

    response = client.get("/api/auth/me", headers=auth_header(body["token"]))

    assert response.status_code == 200
    assert response.json() == body["user"]


def test_login_with_mixed_case_domain_as_registered(client):
    registered = register(client, "Bob", "Bob@EXAMPLE.com", password="bob-pw")

    response = client.post("/api/auth/login", json={"email": "Bob@EXAMPLE.com", "password": "bob-pw"})

    assert response.status_code == 200
    assert response.json()["user"]["id"] == registered["user"]["id"]


def test_duplicate_check_ignores_domain_case(client):
    register(client, "Bob", "bob@example.com")

    response = client.post("/api/auth/register", json={
        "name": "Bob Again", "email": "bob@EXAMPLE.COM", "password": "pw",
    })

    assert response.status_code == 400
    assert response.json()["error"] == "Email already in use"
