"""
Authorization tests.

Verifies:
- Protected endpoints return 401 without a usable bearer token
- Expired, forged and orphaned tokens are rejected
- CORS headers are only granted to configured origins
"""

from datetime import timedelta, timezone

import pytest
from jose import jwt

from warehouse.models import User
from warehouse.time_utils import utcnow

from conftest import auth_headers


PROTECTED = [
    ("GET", "/api/items"),
    ("POST", "/api/items"),
    ("DELETE", "/api/items/1"),
    ("PATCH", "/api/items/1"),
    ("POST", "/api/sales"),
    ("GET", "/api/sales/summary"),
    ("GET", "/api/sales/trend"),
    ("GET", "/api/auth/me"),
]


def _token(app, subject, *, expires_in=timedelta(days=1), secret=None):
    now = utcnow().replace(tzinfo=timezone.utc)
    claims = {"sub": subject, "iat": now, "exp": now + expires_in}
    return jwt.encode(claims, secret or app.config["JWT_SECRET"], algorithm="HS256")


# =============================================================================
# UNAUTHENTICATED ACCESS - 401
# =============================================================================


class TestUnauthenticatedAccess:

    @pytest.mark.parametrize("method,path", PROTECTED)
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    @pytest.mark.parametrize("method,path", PROTECTED)
    def test_rejects_garbage_token(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path, headers=auth_headers("not-a-jwt"))
        assert resp.status_code == 401

    def test_rejects_non_bearer_scheme(self, client, user_a):
        resp = client.get("/api/items", headers={"Authorization": f"Basic {user_a.id}"})
        assert resp.status_code == 401
        assert resp.json["error"] == "Authentication required"


class TestTokenValidation:

    def test_expired_token(self, app, client, user_a):
        token = _token(app, str(user_a.id), expires_in=timedelta(seconds=-5))
        resp = client.get("/api/items", headers=auth_headers(token))
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid or expired token"

    def test_wrong_signing_secret(self, app, client, user_a):
        token = _token(app, str(user_a.id), secret="someone-elses-secret")
        assert client.get("/api/items", headers=auth_headers(token)).status_code == 401

    def test_token_for_deleted_user(self, app, client, db_session, user_a):
        token = _token(app, str(user_a.id))
        db_session.delete(db_session.get(User, user_a.id))
        db_session.commit()

        assert client.get("/api/items", headers=auth_headers(token)).status_code == 401

    def test_non_numeric_subject(self, app, client, user_a):
        token = _token(app, "owner_a@example.com")
        assert client.get("/api/items", headers=auth_headers(token)).status_code == 401

    def test_valid_token(self, app, client, user_a):
        token = _token(app, str(user_a.id))
        assert client.get("/api/items", headers=auth_headers(token)).status_code == 200


class TestCors:

    def test_allowed_origin_gets_headers(self, client, db_session):
        resp = client.options("/api/items", headers={"Origin": "http://frontend.test"})

        assert resp.headers["Access-Control-Allow-Origin"] == "http://frontend.test"
        assert "Authorization" in resp.headers["Access-Control-Allow-Headers"]
        assert "PATCH" in resp.headers["Access-Control-Allow-Methods"]

    def test_other_origin_gets_nothing(self, client, db_session):
        resp = client.get("/api/health", headers={"Origin": "http://evil.test"})
        assert "Access-Control-Allow-Origin" not in resp.headers


class TestHealth:

    def test_health_reports_database(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json["checks"]["database"]["status"] == "healthy"
