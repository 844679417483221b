from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from starlette.concurrency import run_in_threadpool

from receitas.app.deps import get_access_token, get_current_user, get_session_provider
from receitas.app.domain.errors import AuthError
from receitas.app.routers.errors import http_error
from receitas.app.schemas.auth import LoginRequest, LoginResponse
from receitas.app.services.session import CurrentUser, SessionProvider

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    sessions: SessionProvider = Depends(get_session_provider),
) -> LoginResponse:
    try:
        session = await run_in_threadpool(sessions.login, payload.email, payload.password)
    except AuthError as exc:
        raise http_error(exc)
    return LoginResponse(
        userId=session.user_id,
        email=session.email,
        accessToken=session.access_token,
        refreshToken=session.refresh_token,
        expiresAt=session.expires_at,
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    token: str = Depends(get_access_token),
    sessions: SessionProvider = Depends(get_session_provider),
) -> Response:
    await run_in_threadpool(sessions.logout, token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=CurrentUser)
async def me(user: CurrentUser = Depends(get_current_user)):
    return user
