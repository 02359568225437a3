"""
Tests for bearer token resolution and the identity dependencies.
"""

import pytest

from ..api.auth import ANONYMOUS, Identity, parse_bearer, resolve_identity

BINDINGS = {"dev-token": "user1", "tok-user2": "user2"}


class TestParseBearer:

    @pytest.mark.parametrize("header,expected", [
        ("Bearer abc", "abc"),
        ("bearer abc", "abc"),
        ("Bearer   abc  ", "abc"),
        ("Basic abc", None),
        ("Bearer", None),
        ("", None),
        (None, None),
    ])
    def test_parse(self, header, expected):
        """Only the Bearer scheme yields a token."""
        assert parse_bearer(header) == expected


class TestResolveIdentity:

    def test_known_token(self):
        """A bound token resolves to its user."""
        identity = resolve_identity("Bearer tok-user2", BINDINGS)
        assert identity == Identity(user_id="user2", token_valid=True)
        assert identity.is_authenticated

    def test_unknown_token_is_anonymous(self):
        """Unknown tokens never borrow the default identity."""
        assert resolve_identity("Bearer nope", BINDINGS) is ANONYMOUS

    def test_missing_header_is_anonymous(self):
        """No header means anonymous."""
        identity = resolve_identity(None, BINDINGS)
        assert not identity.is_authenticated
        assert not identity.token_valid


class TestIdentityOverHTTP:
    """Dependencies as seen by the routes."""

    def test_acting_user_defaults_without_token(self, client):
        """Routes that prefer an identity fall back to the default user."""
        response = client.post("/v1/explorations", json={"metaGame": "chess", "state": {"fen": "x"}})
        assert response.status_code == 201
        assert response.json()["userId"] == "user1"

    def test_acting_user_uses_token(self, client, user2_headers):
        """A valid token selects its own user."""
        response = client.post(
            "/v1/explorations",
            json={"metaGame": "chess", "state": {}},
            headers=user2_headers,
        )
        assert response.json()["userId"] == "user2"

    def test_required_identity(self, client):
        """Routes that require an identity reject anonymous callers."""
        response = client.delete("/v1/explorations/whatever")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"
        assert response.headers["WWW-Authenticate"].startswith("Bearer realm=")

    @pytest.mark.parametrize("method,path", [
        ("get", "/v1/webhooks"),
        ("post", "/v1/authQuery"),
        ("post", "/v1/game-instances"),
    ])
    def test_protected_groups_reject_missing_token(self, client, method, path):
        """Protected groups answer 401 before validating the body."""
        response = getattr(client, method)(path)
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Valid bearer token required"

    def test_protected_groups_reject_unknown_token(self, client):
        """An unknown token is not accepted by protected groups."""
        response = client.get("/v1/webhooks", headers={"Authorization": "Bearer forged"})
        assert response.status_code == 401
