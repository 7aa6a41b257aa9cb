from __future__ import annotations

import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .settings import Settings

logger = logging.getLogger(__name__)

_security = HTTPBasic(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Basic"},
    )


def _matches(given: str, expected: str) -> bool:
    return secrets.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


# PUBLIC_INTERFACE
def get_basic_auth_dependency(settings: Settings):
    """
    Return a FastAPI dependency callable that enforces HTTP Basic Auth only when
    ENABLE_BASIC_AUTH is enabled in settings. When disabled, the dependency is a no-op.

    Behavior:
    - If settings.enable_basic_auth is False (default): returns a dependency that does nothing.
    - If True: validates provided credentials against BASIC_AUTH_USERNAME/BASIC_AUTH_PASSWORD.
      If credentials are missing or invalid, raises 401 with WWW-Authenticate: Basic.

    Usage:
        auth_dep = get_basic_auth_dependency(settings)
        app = FastAPI(dependencies=[Depends(auth_dep)])
    """
    if not settings.enable_basic_auth:
        async def _noop() -> None:  # noqa: D401 - trivial
            """No-op dependency (auth disabled)."""
            return None

        return _noop

    expected_user: Optional[str] = settings.basic_auth_username
    expected_pass: Optional[str] = settings.basic_auth_password
    if expected_user is None or expected_pass is None:
        logger.warning("ENABLE_BASIC_AUTH is set but credentials are missing; every request will be rejected")

    async def _enforce(creds: Optional[HTTPBasicCredentials] = Depends(_security)) -> None:
        """
        Enforce HTTP Basic authentication on every route.

        Raises:
            HTTPException(401) if credentials are missing or invalid.
        """
        if creds is None:
            raise _unauthorized("Not authenticated")

        if expected_user is None or expected_pass is None:
            raise _unauthorized("Server authentication not configured")

        # Both comparisons always run
        user_ok = _matches(creds.username, expected_user)
        pass_ok = _matches(creds.password, expected_pass)
        if not (user_ok and pass_ok):
            logger.info("Rejected basic auth for user=%s", creds.username)
            raise _unauthorized("Invalid authentication credentials")

    return _enforce
