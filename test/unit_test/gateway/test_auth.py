from __future__ import annotations

import pytest
from starlette.datastructures import Headers

from toolmesh_ai.gateway.auth import (
    ANONYMOUS,
    AuthenticationError,
    CallerContext,
    StaticApiKeyResolver,
    authenticate,
    extract_api_key,
)

RESOLVER = StaticApiKeyResolver({"key-alice": "alice"})


@pytest.mark.parametrize(
    ("headers", "expected"),
    [
        ({"X-API-Key": "key-alice"}, "key-alice"),
        ({"Authorization": "Bearer key-alice"}, "key-alice"),
        ({"authorization": "bearer  key-alice "}, "key-alice"),
        ({"Authorization": "Basic abc"}, None),
        ({"Authorization": "Bearer "}, None),
        ({"x-api-key": "   "}, None),
        ({}, None),
    ],
)
def test_extract_api_key(headers, expected) -> None:
    assert extract_api_key(Headers(headers)) == expected


def test_valid_key_is_metered() -> None:
    caller = authenticate(Headers({"x-api-key": "key-alice"}), RESOLVER)
    assert caller == CallerContext(user_id="alice")
    assert caller.metered is True


def test_no_key_is_anonymous() -> None:
    caller = authenticate(Headers({}), RESOLVER)
    assert caller is ANONYMOUS
    assert caller.metered is False


def test_unknown_key_is_rejected() -> None:
    with pytest.raises(AuthenticationError, match="Invalid API key"):
        authenticate(Headers({"x-api-key": "stolen"}), RESOLVER)


def test_key_required() -> None:
    with pytest.raises(AuthenticationError, match="API key required"):
        authenticate(Headers({}), RESOLVER, require_key=True)
