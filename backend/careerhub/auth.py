"""
Authentication and sessions.

Credential resolution (``Authenticator``) is shared by two session carriers:

- ``SessionManager``: an explicitly owned session object with a durable
  ``SessionStore``, used by the admin console. A principal saved with
  "remember me" is restored on the next start without re-checking
  credentials.
- HTTP: a signed JWT in an http-only cookie. With "remember me" the cookie
  is persistent, otherwise it only lives for the browser session.

Credentials are compared in plaintext and the administrator comes from
settings. This is a demo login, not a secure one.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

from fastapi import Request, HTTPException, status
from jose import JWTError, jwt
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from careerhub.config import Settings, get_settings
from careerhub.exceptions import InvalidCredentialsError
from careerhub.middleware.metrics import record_login
from careerhub.schemas import Principal, Role
from careerhub.services.counselors import find_counselor_by_email

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
COOKIE_NAME = "session_token"
SESSION_KEY = "user"


class Authenticator:
    """
    Resolves email/password pairs to a principal.

    The administrator is checked first, then the counselor collection.
    A role hint restricts the check to that source.
    """

    def __init__(self, db: AsyncSession, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()

    def _admin_principal(self) -> Principal:
        return Principal(
            id=self.settings.admin_id,
            name=self.settings.admin_name,
            email=self.settings.admin_email,
            role=Role.ADMIN,
            avatar=self.settings.admin_avatar,
        )

    async def authenticate(
        self, email: str, password: str, role: Optional[Role] = None
    ) -> Principal:
        """
        Raises:
            InvalidCredentialsError: Unknown email, wrong password or a
                failed lookup. The message is the same in every case.
        """
        try:
            if role is None or role == Role.ADMIN:
                if email == self.settings.admin_email and password == self.settings.admin_password:
                    record_login("admin")
                    return self._admin_principal()

            if role is None or role == Role.COUNSELOR:
                counselor = await find_counselor_by_email(self.db, email)
                if counselor is not None and counselor.password == password:
                    record_login("counselor")
                    return Principal(
                        id=counselor.id,
                        name=counselor.name,
                        email=counselor.email,
                        role=Role.COUNSELOR,
                        avatar=counselor.photo_url,
                    )
        except Exception as e:
            logger.error(f"Login error: {e}")
            record_login("failed")
            raise InvalidCredentialsError() from e

        record_login("failed")
        raise InvalidCredentialsError()


# ==================== Durable session stores ====================

class SessionStore:
    """Client-side storage holding at most one principal."""

    def load(self) -> Optional[Principal]:
        raise NotImplementedError

    def save(self, principal: Principal) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class MemorySessionStore(SessionStore):
    def __init__(self):
        self._data: dict[str, dict] = {}

    def load(self) -> Optional[Principal]:
        data = self._data.get(SESSION_KEY)
        return Principal.model_validate(data) if data else None

    def save(self, principal: Principal) -> None:
        self._data[SESSION_KEY] = principal.model_dump(mode="json")

    def clear(self) -> None:
        self._data.pop(SESSION_KEY, None)


class FileSessionStore(SessionStore):
    """
    JSON file holding the principal under the ``"user"`` key.

    An unreadable or malformed file is treated as "no session".
    """

    def __init__(self, path: str):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[Principal]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text())
            stored = data.get(SESSION_KEY)
            return Principal.model_validate(stored) if stored else None
        except (OSError, ValueError, AttributeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return None

    def save(self, principal: Principal) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({SESSION_KEY: principal.model_dump(mode="json")}))

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


# ==================== Session manager ====================

class SessionState(Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED_ADMIN = "authenticated_admin"
    AUTHENTICATED_COUNSELOR = "authenticated_counselor"


class SessionManager:
    """
    Owns one session: the in-memory principal plus its durable store.

    The store is read once, at construction. A stored principal is trusted
    as-is until ``logout``.
    """

    def __init__(self, store: SessionStore, authenticator: Optional[Authenticator] = None):
        self.store = store
        self.authenticator = authenticator
        self._principal: Optional[Principal] = store.load()
        self._authenticating = False

    @property
    def principal(self) -> Optional[Principal]:
        return self._principal

    @property
    def state(self) -> SessionState:
        if self._authenticating:
            return SessionState.AUTHENTICATING
        if self._principal is None:
            return SessionState.UNAUTHENTICATED
        if self._principal.role == Role.ADMIN:
            return SessionState.AUTHENTICATED_ADMIN
        return SessionState.AUTHENTICATED_COUNSELOR

    @property
    def is_authenticated(self) -> bool:
        return self._principal is not None

    @property
    def is_admin(self) -> bool:
        return self._principal is not None and self._principal.role == Role.ADMIN

    @property
    def is_counselor(self) -> bool:
        return self._principal is not None and self._principal.role == Role.COUNSELOR

    async def login(
        self,
        email: str,
        password: str,
        role: Optional[Role] = None,
        remember_me: bool = False,
    ) -> Principal:
        """
        Authenticate and hold the principal; persist it only with ``remember_me``.

        Raises:
            InvalidCredentialsError: Credentials did not resolve
        """
        if self.authenticator is None:
            raise RuntimeError("SessionManager has no authenticator; cannot log in")

        self._authenticating = True
        try:
            principal = await self.authenticator.authenticate(email, password, role)
        finally:
            self._authenticating = False

        self._principal = principal
        if remember_me:
            self.store.save(principal)

        logger.info(f"Signed in {principal.email} as {principal.role.value}")
        return principal

    def logout(self) -> None:
        self._principal = None
        self.store.clear()


# ==================== HTTP session tokens ====================

def create_session_token(principal: Principal, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    expire = datetime.now(timezone.utc) + timedelta(days=settings.session_token_days)
    to_encode = {"exp": expire, "sub": principal.id, SESSION_KEY: principal.model_dump(mode="json")}
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_session_token(token: str, settings: Optional[Settings] = None) -> Optional[Principal]:
    settings = settings or get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
        return Principal.model_validate(payload.get(SESSION_KEY))
    except (JWTError, ValidationError):
        return None


async def get_optional_principal(request: Request) -> Optional[Principal]:
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        return None
    return decode_session_token(token)


async def get_current_principal(request: Request) -> Principal:
    principal = await get_optional_principal(request)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return principal
