"""
SessionStore HTTP routes: POST /api/auth/login, POST /api/auth/signup,
                            POST /api/auth/logout, GET /api/auth/session

Mock authentication only: no tokens are issued. The single live session is
process-wide, as in the single-user dashboard.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from finbuddy.auth.schemas import LoginRequest, Session, SessionState, SignupRequest
from finbuddy.auth.session_store import InvalidCredentials, SessionStore
from finbuddy.dependencies import get_session_store

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=Session)
async def login(
    body: LoginRequest,
    store: SessionStore = Depends(get_session_store),
) -> Session:
    try:
        return await store.login(body.email, body.password)
    except InvalidCredentials as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc


@router.post("/signup", response_model=Session)
async def signup(
    body: SignupRequest,
    store: SessionStore = Depends(get_session_store),
) -> Session:
    return await store.signup(body.name, body.email, body.password)


@router.post("/logout", status_code=204)
async def logout(store: SessionStore = Depends(get_session_store)) -> None:
    await store.logout()


@router.get("/session", response_model=SessionState)
async def current_session(store: SessionStore = Depends(get_session_store)) -> SessionState:
    """Used by the routing layer to gate views behind "session present"."""
    return SessionState(session=store.session, is_loading=store.is_loading)
