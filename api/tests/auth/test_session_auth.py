"""Tests for session token verification and the profile update route."""

import json
from datetime import timedelta

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import JWTError, jwt

from learnhub.auth.identity import IdentityDirectoryClient
from learnhub.auth.router import get_identity_client
from learnhub.auth.security import decode_session_token
from learnhub.config.settings import Settings
from learnhub.core.errors import ConfigurationError, UpstreamError


class TestDecodeSessionToken:
    def test_valid_token(self, make_token) -> None:
        payload = decode_session_token(make_token("user_1"))
        assert payload["sub"] == "user_1"

    def test_expired_token(self, make_token) -> None:
        with pytest.raises(JWTError):
            decode_session_token(make_token("user_1", expires_in=timedelta(seconds=-10)))

    def test_wrong_key(self) -> None:
        token = jwt.encode({"sub": "user_1"}, "another-key", algorithm="HS256")
        with pytest.raises(JWTError):
            decode_session_token(token)

    def test_missing_subject(self, settings) -> None:
        token = jwt.encode({"sid": "s"}, settings.auth_jwt_key, algorithm="HS256")
        with pytest.raises(JWTError):
            decode_session_token(token)


def _identity_client(handler, secret: str | None = "sk_test") -> IdentityDirectoryClient:
    settings = Settings(identity_secret_key=secret, identity_api_url="https://idp.test/v1")
    return IdentityDirectoryClient(settings, transport=httpx.MockTransport(handler))


class TestIdentityDirectoryClient:
    @pytest.mark.asyncio
    async def test_patches_public_metadata(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "user_1", "public_metadata": {"userType": "teacher"}})

        result = await _identity_client(handler).update_public_metadata(
            "user_1", {"userType": "teacher"}
        )

        assert result["id"] == "user_1"
        request = seen[0]
        assert request.method == "PATCH"
        assert str(request.url) == "https://idp.test/v1/users/user_1/metadata"
        assert request.headers["Authorization"] == "Bearer sk_test"
        assert json.loads(request.content) == {"public_metadata": {"userType": "teacher"}}

    @pytest.mark.asyncio
    async def test_requires_secret(self) -> None:
        client = _identity_client(lambda r: httpx.Response(200), secret=None)
        with pytest.raises(ConfigurationError):
            await client.update_public_metadata("user_1", {})

    @pytest.mark.asyncio
    async def test_provider_error(self) -> None:
        client = _identity_client(lambda r: httpx.Response(422, json={"errors": []}))
        with pytest.raises(UpstreamError, match="Error updating user"):
            await client.update_public_metadata("user_1", {})


class TestUpdateUserRoute:
    @pytest.fixture
    def identity_requests(self, app) -> list[httpx.Request]:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            body = json.loads(request.content)
            return httpx.Response(200, json={"id": "user_1", **body})

        app.dependency_overrides[get_identity_client] = lambda: _identity_client(handler)
        return seen

    def test_updates_own_profile(self, client: TestClient, auth_headers, identity_requests) -> None:
        response = client.put(
            "/users/clerk/user_1",
            json={"publicMetadata": {"userType": "teacher", "settings": {"theme": "dark"}}},
            headers=auth_headers("user_1"),
        )

        assert response.status_code == 200
        assert response.json()["message"] == "User updated successfully"
        assert response.json()["data"]["public_metadata"]["userType"] == "teacher"
        assert len(identity_requests) == 1

    def test_partial_update_sends_only_given_fields(
        self, client: TestClient, auth_headers, identity_requests
    ) -> None:
        response = client.put(
            "/users/clerk/user_1",
            json={"publicMetadata": {"settings": {"theme": "dark"}}},
            headers=auth_headers("user_1"),
        )

        assert response.status_code == 200
        sent = json.loads(identity_requests[0].content)
        assert sent["public_metadata"] == {"settings": {"theme": "dark"}}

    def test_other_user_forbidden(self, client: TestClient, auth_headers, identity_requests) -> None:
        response = client.put(
            "/users/clerk/user_1",
            json={"publicMetadata": {"userType": "teacher"}},
            headers=auth_headers("user_2"),
        )

        assert response.status_code == 403
        assert identity_requests == []
