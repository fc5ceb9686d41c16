"""HTTP-level tests for the /api/v1/auth endpoints and the health check."""

from __future__ import annotations

import pytest
from auth_service.core.extensions import REDIS_EXTENSION_KEY
from redis.exceptions import ConnectionError as RedisConnectionError

from tests.factories.user import UserFactory

BASE = "/api/v1/auth"
PASSWORD = "Passw0rd!"


class _DownRedis:
    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise RedisConnectionError("Connection refused")

        return _fail


@pytest.fixture()
def user(session):
    return UserFactory(email="a@b.com", password=PASSWORD)


def _sign_in(client, email="a@b.com", password=PASSWORD):
    return client.post(f"{BASE}/sign-in", json={"email": email, "password": password})


def _tokens(resp):
    data = resp.get_json()["data"]
    return data["access_token"], data["refresh_token"]


def _assert_problem(resp, status, code):
    assert resp.status_code == status
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["status"] == status
    assert body["code"] == code
    assert body["request_id"]
    return body


# -------------------------------- Sign-in --------------------------------- #


def test_sign_in_returns_pair_and_stores_session(client, user, fake_redis):
    resp = _sign_in(client)

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["token_type"] == "bearer"
    assert fake_redis.get("a@b.com") == data["refresh_token"]
    assert resp.headers["X-Request-ID"]


def test_sign_in_wrong_password(client, user, fake_redis):
    resp = _sign_in(client, password="wrong")

    _assert_problem(resp, 401, "invalid_credentials")
    assert fake_redis.exists("a@b.com") == 0


def test_sign_in_unknown_and_deleted_accounts_look_the_same(client, session):
    UserFactory(email="gone@b.com", password=PASSWORD, is_deleted=True)

    unknown = _sign_in(client, email="ghost@b.com")
    deleted = _sign_in(client, email="gone@b.com")

    assert unknown.get_json()["detail"] == deleted.get_json()["detail"]
    _assert_problem(unknown, 401, "invalid_credentials")
    _assert_problem(deleted, 401, "invalid_credentials")


@pytest.mark.parametrize(
    "payload",
    [{}, {"email": "a@b.com"}, {"email": "not-an-email", "password": "x"}],
)
def test_sign_in_validation_errors(client, session, payload):
    resp = client.post(f"{BASE}/sign-in", json=payload)

    body = _assert_problem(resp, 422, "validation_error")
    assert body["details"]["errors"]


# -------------------------------- Refresh --------------------------------- #


def test_refresh_rotates_and_rejects_replay(client, user, fake_redis):
    _, refresh_token = _tokens(_sign_in(client))

    resp = client.post(f"{BASE}/refresh", headers={"RefreshToken": refresh_token})
    assert resp.status_code == 200
    _, rotated = _tokens(resp)
    assert rotated != refresh_token
    assert fake_redis.get("a@b.com") == rotated

    replay = client.post(f"{BASE}/refresh", headers={"RefreshToken": refresh_token})
    _assert_problem(replay, 401, "invalid_token")
    assert fake_redis.get("a@b.com") == rotated


def test_refresh_missing_header(client, session):
    resp = client.post(f"{BASE}/refresh")

    _assert_problem(resp, 401, "invalid_token")


def test_refresh_garbage_token(client, session):
    resp = client.post(f"{BASE}/refresh", headers={"RefreshToken": "garbage"})

    _assert_problem(resp, 401, "invalid_token")


def test_refresh_rejected_after_account_deleted(client, user, session):
    _, refresh_token = _tokens(_sign_in(client))
    user.is_deleted = True
    session.commit()

    resp = client.post(f"{BASE}/refresh", headers={"RefreshToken": refresh_token})

    _assert_problem(resp, 401, "invalid_token")


# -------------------------------- Sign-out -------------------------------- #


@pytest.mark.parametrize("scheme", ["Bearer ", ""])
def test_sign_out_blacklists_refresh_token(client, user, fake_redis, scheme):
    access_token, refresh_token = _tokens(_sign_in(client))

    resp = client.post(
        f"{BASE}/sign-out",
        headers={"Authorization": f"{scheme}{access_token}", "RefreshToken": refresh_token},
    )

    assert resp.status_code == 204
    assert fake_redis.exists("a@b.com") == 0
    assert fake_redis.get("Blacklist_a@b.com") == refresh_token
    assert fake_redis.pttl("Blacklist_a@b.com") > 0

    after = client.post(f"{BASE}/refresh", headers={"RefreshToken": refresh_token})
    _assert_problem(after, 401, "invalid_token")


def test_sign_out_requires_both_headers(client, user):
    access_token, refresh_token = _tokens(_sign_in(client))

    no_access = client.post(f"{BASE}/sign-out", headers={"RefreshToken": refresh_token})
    no_refresh = client.post(
        f"{BASE}/sign-out", headers={"Authorization": f"Bearer {access_token}"}
    )

    _assert_problem(no_access, 401, "invalid_token")
    _assert_problem(no_refresh, 401, "invalid_token")


# --------------------------- Store unavailability ------------------------- #


def test_store_outage_maps_to_503(app, client, user):
    app.extensions[REDIS_EXTENSION_KEY] = _DownRedis()

    resp = _sign_in(client)

    body = _assert_problem(resp, 503, "service_unavailable")
    assert "Connection refused" not in body["detail"]


# --------------------------------- Health --------------------------------- #


def test_health_ok(client, session):
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_health_degraded_without_store(app, client, session):
    app.extensions.pop(REDIS_EXTENSION_KEY)

    resp = client.get("/api/v1/health")

    assert resp.status_code == 503
    assert resp.get_json()["store"] == "fail"


def test_unknown_route_is_problem_json(client):
    resp = client.get("/api/v1/nope")

    _assert_problem(resp, 404, "not_found")
