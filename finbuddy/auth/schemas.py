"""
schemas.py — SessionStore pydantic v2 data contracts.

Session is what gets persisted in the slot; extra="forbid" makes a slot value
with unexpected keys count as malformed on restore.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Session(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1)
    email: str
    name: str
    avatar_url: Optional[str] = None


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str
    password: str


class SignupRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    email: str
    password: str


class SessionState(BaseModel):
    """What the routing layer needs to gate views."""
    model_config = ConfigDict(extra="forbid")

    session: Optional[Session] = None
    is_loading: bool = False
