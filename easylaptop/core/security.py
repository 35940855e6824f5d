"""
Bearer-token issuing/verification and the FastAPI auth dependencies.

TokenService signs HS256 JWTs (python-jose) carrying the user id and an
expiry. verify() raises InvalidToken for any malformed, tampered or expired
token; the guards below turn that into 401 (mandatory) or an anonymous
caller (optional), so it never escapes to the HTTP layer.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from easylaptop.core.config import Settings, get_settings
from easylaptop.core.dependencies import get_credential_store
from easylaptop.core.errors import Unauthenticated
from easylaptop.models.user import User
from easylaptop.services.credentials import CredentialStore

logger = logging.getLogger(__name__)


class InvalidToken(Exception):
    pass


class TokenService:
    def __init__(self, settings: Settings) -> None:
        self._secret = settings.secret_key
        self._algorithm = settings.algorithm
        self._lifetime = timedelta(days=settings.access_token_expire_days)

    def issue(self, user_id: int, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "user_id": user_id,
            "iat": now,
            "exp": now + (expires_delta if expires_delta is not None else self._lifetime),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> dict:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            raise InvalidToken(str(exc)) from exc
        if "user_id" not in payload:
            raise InvalidToken("token has no user_id claim")
        return payload


# ---------------------------
# Dependencies
# ---------------------------

_bearer_scheme = HTTPBearer(auto_error=False)


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService(settings)


def _resolve_user(
    credentials: Optional[HTTPAuthorizationCredentials],
    store: CredentialStore,
    tokens: TokenService,
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthenticated("No token, authorization denied")
    try:
        payload = tokens.verify(credentials.credentials)
    except InvalidToken as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise Unauthenticated("Token is not valid")

    user = store.find_by_id(payload["user_id"])
    if user is None:
        logger.info("Token for unknown user %s", payload["user_id"])
        raise Unauthenticated("Token is not valid")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    store: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    """Require a valid bearer token. Raises Unauthenticated (401) otherwise."""
    return _resolve_user(credentials, store, tokens)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    store: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[User]:
    """Same as get_current_user, but any failure yields None instead of a 401."""
    try:
        return _resolve_user(credentials, store, tokens)
    except Unauthenticated:
        return None
