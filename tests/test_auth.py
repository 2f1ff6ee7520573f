from datetime import timedelta

from app.auth.identity import ANONYMOUS, Identity
from app.auth.service import create_session, resolve_session
from app.config import settings
from app.models.login_session import LoginSession
from app.utils.clock import utcnow


def test_register_returns_identity_and_logs_in(anon):
    r = anon.post("/api/register", json={"username": "alice", "password": "secret1"})
    assert r.status_code == 201
    body = r.json()
    assert body["username"] == "alice"
    assert body["userId"]

    me = anon.get("/api/current-user")
    assert me.status_code == 200
    assert me.json() == {"username": "alice", "userId": body["userId"], "isAdmin": False}


def test_duplicate_username_is_rejected(anon, make_client):
    make_client("alice")
    r = anon.post("/api/register", json={"username": "alice", "password": "other12"})
    assert r.status_code == 400
    assert r.json()["detail"] == "用户名已存在"


def test_usernames_are_case_sensitive(make_client):
    make_client("alice")
    make_client("Alice")


def test_register_validation(anon):
    assert anon.post("/api/register", json={"username": "", "password": "secret1"}).status_code == 400
    assert anon.post("/api/register", json={"username": "   ", "password": "secret1"}).status_code == 400
    r = anon.post("/api/register", json={"username": "carol", "password": "12345"})
    assert r.status_code == 400
    assert "6" in r.json()["detail"]


def test_password_is_not_stored_in_plaintext(anon, db):
    from app.models.user import User

    anon.post("/api/register", json={"username": "alice", "password": "secret1"})
    user = db.query(User).filter(User.username == "alice").one()
    assert user.password_hash != "secret1"
    assert "secret1" not in user.password_hash


def test_login_and_failure_messages_do_not_leak(make_client, anon):
    make_client("alice")

    ok = anon.post("/api/login", json={"username": "alice", "password": "secret1"})
    assert ok.status_code == 200
    assert ok.json()["username"] == "alice"
    assert ok.json()["isAdmin"] is False
    assert settings.session_cookie_name in ok.cookies

    wrong_pw = anon.post("/api/login", json={"username": "alice", "password": "nope123"})
    no_user = anon.post("/api/login", json={"username": "nobody", "password": "nope123"})
    assert wrong_pw.status_code == no_user.status_code == 401
    assert wrong_pw.json()["detail"] == no_user.json()["detail"]


def test_root_is_always_admin(root):
    me = root.get("/api/current-user").json()
    assert me["username"] == "root"
    assert me["isAdmin"] is True


def test_current_user_requires_session(anon):
    r = anon.get("/api/current-user")
    assert r.status_code == 401


def test_logout_invalidates_session(alice):
    assert alice.post("/api/logout").status_code == 200
    assert alice.get("/api/current-user").status_code == 401


def test_logout_is_idempotent(anon, alice):
    token = alice.cookies.get(settings.session_cookie_name)
    alice.post("/api/logout")
    # replaying the old token is harmless
    r = anon.post("/api/logout", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert anon.post("/api/logout").status_code == 200


def test_bearer_token_is_accepted(anon, alice):
    token = alice.cookies.get(settings.session_cookie_name)
    r = anon.get("/api/current-user", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["username"] == "alice"


def test_tampered_token_resolves_to_anonymous(db):
    assert resolve_session(db, None) is ANONYMOUS
    assert resolve_session(db, "not-a-token") is ANONYMOUS


def test_expired_session_resolves_to_anonymous(db):
    identity = Identity(user_id="u1", username="alice", is_admin=False)
    token, row = create_session(db, identity)
    assert resolve_session(db, token) == identity

    stored = db.get(LoginSession, row.id)
    stored.expires_at = utcnow() - timedelta(minutes=1)
    db.commit()
    assert resolve_session(db, token) is ANONYMOUS


def test_expired_session_row_is_removed_on_resolve(db):
    identity = Identity(user_id="u1", username="alice", is_admin=False)
    token, row = create_session(db, identity)
    row_id = row.id
    db.get(LoginSession, row_id).expires_at = utcnow() - timedelta(seconds=1)
    db.commit()

    assert resolve_session(db, token) is ANONYMOUS
    assert db.get(LoginSession, row_id) is None


def test_new_sessions_purge_expired_ones(db):
    old = Identity(user_id="u1", username="alice")
    _, stale = create_session(db, old)
    stale_id = stale.id
    db.get(LoginSession, stale_id).expires_at = utcnow() - timedelta(hours=1)
    db.commit()

    _, fresh = create_session(db, Identity(user_id="u2", username="bob"))
    assert db.get(LoginSession, stale_id) is None
    assert db.query(LoginSession).count() == 1
    assert db.query(LoginSession).one().id == fresh.id
