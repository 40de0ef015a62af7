"""Identity provider port — abstract interface for the sign-in service.

The storefront never manages credentials itself; it asks the provider for a
stable user id, either from a pre-issued token or anonymously.
"""

from abc import ABC, abstractmethod


class SignInError(Exception):
    """The provider rejected a sign-in attempt or could not be reached."""


class IdentityProviderPort(ABC):
    """Abstract interface for identity provider adapters."""

    @abstractmethod
    async def sign_in_with_token(self, token: str) -> str:
        """Exchange a pre-issued token for a user id.

        Raises:
            SignInError: the token was rejected or the provider is unreachable.
        """
        ...

    @abstractmethod
    async def sign_in_anonymously(self) -> str:
        """Create (or resume) an anonymous user and return its id.

        Raises:
            SignInError: the provider is unreachable.
        """
        ...
