"""
session_store.py — Mock authentication and the single live session.

login() checks a fixed list of demo accounts; signup() always succeeds.
Every successful login/signup/logout writes through to the session slot;
restore() is the only read path.

There is no real authentication here: passwords are compared in plain text
against hardcoded demo entries.
"""
from __future__ import annotations

import logging
import uuid
from typing import Callable, NamedTuple, Optional
from urllib.parse import quote

from pydantic import ValidationError

from finbuddy.auth.schemas import Session
from finbuddy.cache import SessionSlot
from finbuddy.clock import Clock, default_clock
from finbuddy.config import settings

logger = logging.getLogger(__name__)

AVATAR_URL_TEMPLATE = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"


class DemoAccount(NamedTuple):
    id: str
    email: str
    password: str
    name: str


DEMO_ACCOUNTS: tuple[DemoAccount, ...] = (
    DemoAccount("1", "demo@finbuddy.com", "demo123", "Demo User"),
    DemoAccount("2", "user@example.com", "password", "John Doe"),
)


class InvalidCredentials(Exception):
    """Raised by login() when no demo account matches. Session state is untouched."""


def avatar_url_for(name: str) -> str:
    """Deterministic avatar: same name → same URL."""
    return AVATAR_URL_TEMPLATE.format(seed=quote(name, safe=""))


def _new_session_id() -> str:
    return str(uuid.uuid4())


class SessionStore:
    """
    Owns zero or one Session.

    is_loading is True while a login/signup is in flight (and from construction
    until restore() completes) so the view can disable duplicate submissions.
    Overlapping calls are not serialized: the last one to finish wins.
    """

    def __init__(
        self,
        slot: SessionSlot,
        clock: Optional[Clock] = None,
        delay_seconds: float = settings.auth_delay_seconds,
        accounts: tuple[DemoAccount, ...] = DEMO_ACCOUNTS,
        id_factory: Callable[[], str] = _new_session_id,
    ) -> None:
        self.slot = slot
        self.clock = default_clock(clock)
        self.delay_seconds = delay_seconds
        self.accounts = accounts
        self.id_factory = id_factory
        self._session: Optional[Session] = None
        self._restored = False
        self._in_flight = 0

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def is_loading(self) -> bool:
        return not self._restored or self._in_flight > 0

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def restore(self) -> Optional[Session]:
        """
        Load the persisted session. A malformed value (bad JSON, wrong shape)
        is cleared and treated as no session.
        """
        try:
            raw = await self.slot.read()
            if raw is None:
                self._session = None
                return None
            try:
                self._session = Session.model_validate_json(raw)
            except ValidationError:
                logger.warning("Discarding malformed persisted session")
                await self.slot.clear()
                self._session = None
            else:
                logger.info("Session restored session_id=%s", self._session.id)
            return self._session
        finally:
            self._restored = True

    # ------------------------------------------------------------------
    # Write paths
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> Session:
        """
        Match against the demo accounts after the simulated network delay.
        Raises InvalidCredentials on mismatch; nothing is created or persisted.
        """
        self._in_flight += 1
        try:
            await self.clock.sleep(self.delay_seconds)
            account = next(
                (a for a in self.accounts if a.email == email and a.password == password),
                None,
            )
            if account is None:
                logger.info("Login rejected: no matching account")
                raise InvalidCredentials("Invalid email or password")

            session = Session(
                id=account.id,
                email=account.email,
                name=account.name,
                avatar_url=avatar_url_for(account.name),
            )
            await self._persist(session)
            logger.info("Login succeeded session_id=%s", session.id)
            return session
        finally:
            self._in_flight -= 1

    async def signup(self, name: str, email: str, password: str) -> Session:
        """Always succeeds. No uniqueness check; the password is not stored."""
        self._in_flight += 1
        try:
            await self.clock.sleep(self.delay_seconds)
            session = Session(
                id=self.id_factory(),
                email=email,
                name=name,
                avatar_url=avatar_url_for(name),
            )
            await self._persist(session)
            logger.info("Signup succeeded session_id=%s", session.id)
            return session
        finally:
            self._in_flight -= 1

    async def logout(self) -> None:
        """Clear memory and slot unconditionally. Safe to call with no session."""
        self._session = None
        await self.slot.clear()
        logger.info("Logged out")

    def reset(self) -> None:
        """Forget the in-memory session and loading state. The slot is untouched."""
        self._session = None
        self._in_flight = 0
        self._restored = True

    async def _persist(self, session: Session) -> None:
        self._session = session
        await self.slot.write(session.model_dump_json())
