from http import HTTPStatus
from typing import Optional

import pytest

from pluginhub.errors import AuthError
from pluginhub.hashing import hash_bytes, random_bytes
from pluginhub.token import TokenAuth, TokenChecker, TokenGenerator


class _StaticChecker(TokenChecker[int]):
    def __init__(self, tokens):
        self.tokens = tokens
        self.seen = []

    async def get_user_id(self, request_token: str) -> Optional[int]:
        self.seen.append(request_token)
        return self.tokens.get(request_token)


def test_result_empty_before_generate():
    assert TokenGenerator(b"abc").result is None


def test_generate_empty_source():
    generator = TokenGenerator(b"")
    value = generator.generate()
    assert value == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    assert generator.result == value


def test_generate_matches_hash_bytes():
    data = random_bytes()
    assert TokenGenerator(data).generate() == hash_bytes(data)


def test_changing_source_changes_result():
    generator = TokenGenerator(b"first")
    first = generator.generate()
    generator.source = b"second"
    assert generator.result == first
    second = generator.generate()
    assert second != first
    assert generator.result == second


@pytest.mark.asyncio
async def test_valid_token_returns_user_id():
    checker = _StaticChecker({"Bearer token": 7})
    auth = TokenAuth(checker)
    assert await auth.authenticate({"Authorization": "Bearer token"}) == 7
    assert checker.seen == ["Bearer token"]


@pytest.mark.asyncio
async def test_header_name_is_case_insensitive():
    auth = TokenAuth(_StaticChecker({"token": 3}))
    assert await auth.authenticate({"authorization": "token"}) == 3
    assert await auth.authenticate({b"AUTHORIZATION": b"token"}) == 3


@pytest.mark.asyncio
async def test_unknown_token_is_rejected():
    auth = TokenAuth(_StaticChecker({"token": 1}))
    with pytest.raises(AuthError) as info:
        await auth.authenticate({"Authorization": "placeholder"})
    assert info.value.status_code == HTTPStatus.UNAUTHORIZED
    assert str(info.value) == "This Token is not valid"


@pytest.mark.asyncio
async def test_missing_header_is_rejected_without_lookup():
    checker = _StaticChecker({"token": 1})
    with pytest.raises(AuthError):
        await TokenAuth(checker).authenticate({"Accept": "text/plain"})
    assert checker.seen == []


@pytest.mark.asyncio
async def test_non_ascii_header_is_rejected():
    checker = _StaticChecker({"tökèn": 1})
    with pytest.raises(AuthError):
        await TokenAuth(checker).authenticate({"Authorization": "tökèn"})
    assert checker.seen == []