"""Token verifier factory.

get_verifier() / set_verifier() swap implementations:
- FakeTokenVerifier for development and testing (default)
- the storefront's real verifier in production
"""

from ratings.auth.fake_adapter import FakeTokenVerifier
from ratings.auth.port import Identity, TokenVerifier
from ratings.exceptions import AuthenticationError

_current_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    """Return the active verifier. Defaults to FakeTokenVerifier."""
    global _current_verifier
    if _current_verifier is None:
        _current_verifier = FakeTokenVerifier()
    return _current_verifier


def set_verifier(verifier: TokenVerifier) -> None:
    global _current_verifier
    _current_verifier = verifier


def reset_verifier() -> None:
    global _current_verifier
    _current_verifier = None


def authenticate(authorization: str | None) -> Identity:
    """Resolve an ``Authorization: Bearer <token>`` header to an identity."""
    if not authorization:
        raise AuthenticationError("Authentication required")

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Authentication required")

    return get_verifier().verify(token)


__all__ = [
    "FakeTokenVerifier",
    "Identity",
    "TokenVerifier",
    "authenticate",
    "get_verifier",
    "reset_verifier",
    "set_verifier",
]
