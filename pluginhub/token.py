"""Token hashing and request authentication by Authorization header."""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

from .errors import AuthError

T = TypeVar("T")

AUTHORIZATION = "authorization"
INVALID_TOKEN_MESSAGE = "This Token is not valid"


@dataclass
class TokenGenerator:
    """Hashes a source into a token; the result stays None until generated."""

    source: bytes
    result: Optional[str] = None

    def generate(self) -> str:
        """Hash the current source with SHA-256, store and return the hex digest."""
        self.result = hashlib.sha256(bytes(self.source)).hexdigest()
        return self.result


class TokenChecker(ABC, Generic[T]):
    """Looks up the identity that belongs to a request token."""

    @abstractmethod
    async def get_user_id(self, request_token: str) -> Optional[T]:
        """Return the identity for a valid token, or None if it is not valid."""


def _header_text(value: Union[str, bytes]) -> Optional[str]:
    if isinstance(value, (bytes, bytearray)):
        try:
            value = bytes(value).decode("ascii")
        except UnicodeDecodeError:
            return None
    if not isinstance(value, str):
        return None
    if all(ch == "\t" or 32 <= ord(ch) <= 126 for ch in value):
        return value
    return None


def _find_authorization(headers: Mapping) -> Optional[str]:
    for name, value in headers.items():
        if isinstance(name, (bytes, bytearray)):
            name = bytes(name).decode("latin-1")
        if name.lower() == AUTHORIZATION:
            return _header_text(value)
    return None


class TokenAuth(Generic[T]):
    """Authenticates requests with the token found in their Authorization header."""

    def __init__(self, finder: TokenChecker[T]) -> None:
        self.finder = finder

    async def authenticate(self, headers: Mapping) -> T:
        """Return the identity for the request headers or raise AuthError."""
        token = _find_authorization(headers)
        if token is not None:
            data = await self.finder.get_user_id(token)
            if data is not None:
                return data
        raise AuthError(INVALID_TOKEN_MESSAGE)