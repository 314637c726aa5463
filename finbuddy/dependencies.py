"""
dependencies.py — FastAPI dependencies for the app-owned stores.

SessionStore and RecordAggregator are constructed once in the lifespan and
stored on app.state; routes receive them through these functions.

Usage in routes:
    async def route(store: SessionStore = Depends(get_session_store)): ...
"""
from fastapi import Request

from finbuddy.auth.session_store import SessionStore
from finbuddy.records.aggregator import RecordAggregator


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_records(request: Request) -> RecordAggregator:
    return request.app.state.records
