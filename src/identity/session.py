"""Session identity bootstrap.

Every order is scoped to an identity, so nothing can be submitted or tracked
until the session has one. Readiness is explicit: a ``Session`` is either
``Unresolved`` or ``Ready(identity)``, and ``require()`` is the single place
that turns "not yet" into a ``NotReady`` error.

Resolution order:
    1. pre-issued token, if one was supplied
    2. anonymous sign-in
    3. a locally generated identity, so the storefront keeps working offline
"""

import asyncio
from dataclasses import dataclass
from uuid import uuid4

import structlog
from pydantic import BaseModel, Field
from shared.errors import NotReady

from identity.provider.port import IdentityProviderPort, SignInError

logger = structlog.get_logger(__name__)


class Identity(BaseModel):
    model_config = {"frozen": True}

    uid: str = Field(min_length=1)
    is_anonymous: bool = False
    is_local: bool = False


@dataclass(frozen=True)
class Unresolved:
    pass


@dataclass(frozen=True)
class Ready:
    identity: Identity


async def resolve_identity(provider: IdentityProviderPort, token: str | None = None) -> Identity:
    """Sign in and return an identity. Never raises: falls back to a local identity."""
    if token:
        try:
            uid = await provider.sign_in_with_token(token)
            logger.info("Signed in with token", uid=uid)
            return Identity(uid=uid)
        except SignInError as exc:
            logger.warning("Token sign-in failed, trying anonymous sign-in", reason=str(exc))

    try:
        uid = await provider.sign_in_anonymously()
        logger.info("Signed in anonymously", uid=uid)
        return Identity(uid=uid, is_anonymous=True)
    except SignInError as exc:
        logger.warning("Anonymous sign-in failed, using a local identity", reason=str(exc))

    return Identity(uid=f"local-{uuid4().hex}", is_anonymous=True, is_local=True)


class Session:
    def __init__(self, provider: IdentityProviderPort, token: str | None = None):
        self._provider = provider
        self._token = token
        self._state = Unresolved()
        self._bootstrap_task: asyncio.Task | None = None

    @property
    def state(self):
        return self._state

    @property
    def is_ready(self) -> bool:
        return isinstance(self._state, Ready)

    async def bootstrap(self) -> Identity:
        """Resolve the identity once. Concurrent callers share the same attempt."""
        if isinstance(self._state, Ready):
            return self._state.identity

        if self._bootstrap_task is None:
            self._bootstrap_task = asyncio.ensure_future(resolve_identity(self._provider, self._token))
        identity = await self._bootstrap_task
        self._state = Ready(identity)
        return identity

    def require(self) -> Identity:
        """The resolved identity, or ``NotReady`` while bootstrap has not completed."""
        if isinstance(self._state, Ready):
            return self._state.identity
        raise NotReady({"identity": ["Sign-in has not completed yet"]})
