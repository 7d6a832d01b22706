"""History endpoints: list, restore into the session, clear."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from companion.api.dependencies import get_session
from companion.api.models import HistoryEntry, HistoryResponse, SessionResponse
from companion.assist.session import SessionController

router = APIRouter(prefix="/api/history", tags=["history"])


@router.get("", response_model=HistoryResponse)
async def list_history(session: SessionController = Depends(get_session)) -> HistoryResponse:
    items = session.history.items
    return HistoryResponse(items=[HistoryEntry.from_item(i) for i in items], count=len(items))


@router.post("/{item_id}/load", response_model=SessionResponse)
async def load_history_item(
    item_id: str, session: SessionController = Depends(get_session)
) -> SessionResponse:
    """Restore a past item. Unknown id -> 404 via the CompanionError handler."""
    return SessionResponse.from_snapshot(session.load_history(item_id))


@router.delete("", response_model=HistoryResponse)
async def clear_history(session: SessionController = Depends(get_session)) -> HistoryResponse:
    session.clear_history()
    return HistoryResponse(items=[], count=0)
