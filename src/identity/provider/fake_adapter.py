"""Fake identity provider — deterministic sign-in for testing and development.

Accepts any token listed in ``tokens`` and hands out ``anon-`` prefixed ids
for anonymous sign-in. Either path can be switched to fail.
"""

import asyncio
from uuid import uuid4

from identity.provider.port import IdentityProviderPort, SignInError


class FakeIdentityProvider(IdentityProviderPort):
    """Fake provider that succeeds by default."""

    def __init__(self, tokens: dict[str, str] | None = None):
        self.tokens = dict(tokens or {})
        self.token_sign_in_succeeds = True
        self.anonymous_sign_in_succeeds = True
        self.failure_reason = "Identity provider unavailable"
        self.calls: list[str] = []

    def configure(
        self,
        token_sign_in_succeeds: bool = True,
        anonymous_sign_in_succeeds: bool = True,
        failure_reason: str = "Identity provider unavailable",
    ):
        """Configure the fake provider behavior for testing."""
        self.token_sign_in_succeeds = token_sign_in_succeeds
        self.anonymous_sign_in_succeeds = anonymous_sign_in_succeeds
        self.failure_reason = failure_reason

    async def sign_in_with_token(self, token):
        await asyncio.sleep(0)
        self.calls.append("token")
        if not self.token_sign_in_succeeds:
            raise SignInError(self.failure_reason)
        if token not in self.tokens:
            raise SignInError("Invalid token")
        return self.tokens[token]

    async def sign_in_anonymously(self):
        await asyncio.sleep(0)
        self.calls.append("anonymous")
        if not self.anonymous_sign_in_succeeds:
            raise SignInError(self.failure_reason)
        return f"anon-{uuid4().hex[:12]}"
