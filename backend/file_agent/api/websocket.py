from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from file_agent.services.event_bus import event_bus

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, session_id: Optional[str] = None):
    """Push agent events; `?session_id=` narrows them to one conversation."""
    await event_bus.connect(websocket, session_id)
    try:
        while True:
            # Client messages carry nothing; reading detects the disconnect
            await websocket.receive_text()
    except WebSocketDisconnect:
        await event_bus.disconnect(websocket)


@router.get("/api/events")
async def recent_events(session_id: Optional[str] = None, limit: int = 50):
    """Recently published agent events, optionally for one session."""
    return {"events": event_bus.recent(session_id=session_id, limit=limit)}
