"""
Tests for bearer token verification against the identity provider.
"""

import httpx
import pytest

from customs_tracker.api.auth import IdentityProvider
from customs_tracker.core.exceptions import AuthenticationError


def provider_with(handler) -> IdentityProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return IdentityProvider("https://auth.example.com/", "service-key", http_client=client)


@pytest.mark.asyncio
async def test_valid_token():
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == "https://auth.example.com/auth/v1/user"
        assert request.headers["Authorization"] == "Bearer good-token"
        assert request.headers["apikey"] == "service-key"
        return httpx.Response(200, json={"id": "operator-1", "email": "op@example.com"})

    user = await provider_with(handler).verify_token("good-token")

    assert user.id == "operator-1"
    assert user.email == "op@example.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(401, json={"msg": "invalid JWT"}),
    httpx.Response(200, json={}),
    httpx.Response(200, text="not json"),
])
async def test_rejected_token(response):
    with pytest.raises(AuthenticationError) as exc_info:
        await provider_with(lambda request: response).verify_token("bad-token")

    assert exc_info.value.message == "Invalid token"
    assert exc_info.value.http_status == 401


@pytest.mark.asyncio
async def test_unreachable_provider():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AuthenticationError) as exc_info:
        await provider_with(handler).verify_token("token")

    assert exc_info.value.message == "Authentication failed"
