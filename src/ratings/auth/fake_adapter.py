"""In-memory token verifier for development and testing.

Tokens are registered explicitly with ``issue()``; anything else is
rejected. Every verification attempt is recorded in ``calls``.
"""

from uuid import uuid4

from ratings.auth.port import Identity, TokenVerifier
from ratings.exceptions import AuthenticationError


class FakeTokenVerifier(TokenVerifier):
    def __init__(self) -> None:
        self.tokens: dict[str, Identity] = {}
        self.calls: list[str] = []

    def issue(self, user_id: str, name: str, token: str | None = None) -> str:
        """Register a token for a user and return it."""
        token = token or f"tok-{uuid4().hex[:16]}"
        self.tokens[token] = Identity(user_id=user_id, name=name)
        return token

    def revoke(self, token: str) -> None:
        self.tokens.pop(token, None)

    def verify(self, token: str) -> Identity:
        self.calls.append(token)
        identity = self.tokens.get(token)
        if identity is None:
            raise AuthenticationError("Invalid token")
        return identity

    def reset(self) -> None:
        self.tokens.clear()
        self.calls.clear()
