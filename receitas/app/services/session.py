# receitas/app/services/session.py
"""
Session provider backed by Supabase Auth (GoTrue).
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from pydantic import BaseModel
from supabase import Client

from receitas.app.domain.errors import AuthError
from receitas.app.domain.models import AuthSession

logger = logging.getLogger(__name__)


class CurrentUser(BaseModel):
    id: str
    email: str | None = None
    name: str | None = None
    photo_url: str | None = None


class SessionProvider:
    """
    Login, logout and token validation.

    Logins run on a fresh client so the signed-in session never replaces the
    service credentials of the shared client.
    """

    def __init__(self, client: Client, login_client_factory: Callable[[], Client]):
        self._client = client
        self._login_client_factory = login_client_factory

    def login(self, email: str, password: str) -> AuthSession:
        try:
            res = self._login_client_factory().auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as error:
            logger.info("Login failed for %s: %s", email, error)
            raise AuthError("Invalid credentials") from error

        session = res.session
        if session is None or res.user is None:
            raise AuthError("Login returned no session")

        logger.info("User logged in: id=%s", res.user.id)
        return AuthSession(
            user_id=str(res.user.id),
            email=res.user.email,
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_at=session.expires_at,
        )

    def logout(self, access_token: str) -> None:
        """Revoke the session. Failures are logged; the client drops its token anyway."""
        try:
            self._client.auth.admin.sign_out(access_token)
        except Exception as error:
            logger.warning("Failed to revoke session: %s", error)

    def identify(self, access_token: Optional[str]) -> CurrentUser:
        if not access_token:
            raise AuthError("Missing token")
        try:
            res = self._client.auth.get_user(access_token)
        except Exception as error:
            raise AuthError("Invalid/expired token") from error

        user = res.user if res else None
        if not user:
            raise AuthError("Invalid token")

        # metadados podem conter 'name' e 'avatar_url'
        meta = getattr(user, "user_metadata", None) or {}
        name = meta.get("name") if isinstance(meta, dict) else None
        avatar = meta.get("avatar_url") if isinstance(meta, dict) else None

        return CurrentUser(id=str(user.id), email=user.email, name=name, photo_url=avatar)
