"""Token verifier port (abstract interface).

Review submission needs the caller's identity. Verifying bearer tokens is
owned by the storefront's auth service; this package only consumes it
through this contract.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """The authenticated user behind a bearer token."""

    user_id: str
    name: str


class TokenVerifier(ABC):
    @abstractmethod
    def verify(self, token: str) -> Identity:
        """Return the identity for ``token``.

        Raises:
            AuthenticationError: token unknown, expired or malformed.
        """
        ...
