from app.models.user import User
from app.services.passwords import hash_password


def add_login(db, email, password, role="member"):
    user = User(email=email, password_hash=hash_password(password), role=role)
    db.add(user)
    db.commit()
    return user


def test_login_me_logout(client, db):
    user = add_login(db, "writer@example.com", "s3cret-pass")

    res = client.post("/auth/login", json={"email": "Writer@Example.com", "password": "s3cret-pass"})
    assert res.status_code == 200
    assert "nv_session" in res.cookies

    res = client.get("/auth/me")
    assert res.json() == {"userId": str(user.id), "email": "writer@example.com", "role": "member"}

    assert client.get("/jobs").status_code == 200

    client.post("/auth/logout")
    client.cookies.clear()
    assert client.get("/auth/me").status_code == 401


def test_revoked_session_is_rejected(client, db):
    add_login(db, "writer@example.com", "s3cret-pass")
    client.post("/auth/login", json={"email": "writer@example.com", "password": "s3cret-pass"})
    token = client.cookies.get("nv_session")

    client.post("/auth/logout")
    client.cookies.clear()

    res = client.get("/auth/me", headers={"Cookie": f"nv_session={token}"})
    assert res.status_code == 401
    assert res.json() == {"error": "Session expired"}


def test_bad_password(client, db):
    add_login(db, "writer@example.com", "s3cret-pass")

    res = client.post("/auth/login", json={"email": "writer@example.com", "password": "nope"})

    assert res.status_code == 401
    assert res.json() == {"error": "Invalid credentials"}
