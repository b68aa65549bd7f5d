from __future__ import annotations

import abc
import logging
import secrets
import uuid
from typing import Any, Dict, Optional, Tuple

from music_player.models import User
from music_player.storage import JSONStorage

logger = logging.getLogger(__name__)

TOKEN_HEADER = "token"
TOKENS_KEY = "tokens"


class AuthError(Exception):
    """Raised when a request carries no usable authentication token."""

    status_code = 401


class TokenResolver(abc.ABC):
    """Shared contract for mapping tokens to users."""

    @abc.abstractmethod
    async def resolve(self, token: str) -> Optional[User]:
        """Return the user bound to ``token``, or None when it is unknown."""

    @abc.abstractmethod
    async def issue(self) -> str:
        """Create a new user and return a token bound to it."""

    async def authenticate(self, token: Optional[str]) -> User:
        if not token:
            raise AuthError("Missing authentication token")
        user = await self.resolve(token)
        if user is None:
            raise AuthError("Invalid authentication token")
        return user


class StoredTokenResolver(TokenResolver):
    """Tokens kept in the state file as a ``token -> user id`` map."""

    def __init__(self, storage: JSONStorage) -> None:
        self.storage = storage

    async def resolve(self, token: str) -> Optional[User]:
        tokens: Dict[str, str] = await self.storage.get(TOKENS_KEY, default={})
        user_id = tokens.get(token)
        if user_id is None:
            return None
        return User(id=user_id)

    async def issue(self) -> str:
        token = secrets.token_hex(16)
        user_id = uuid.uuid4().hex

        def _bind(tokens: Any) -> Tuple[Dict[str, str], None]:
            tokens = dict(tokens or {})
            tokens[token] = user_id
            return tokens, None

        await self.storage.update(TOKENS_KEY, _bind, default={})
        logger.info("Issued token for new user %s", user_id)
        return token
