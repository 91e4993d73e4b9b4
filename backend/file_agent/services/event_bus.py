from collections import deque
from typing import Deque, Dict, List, Optional
from fastapi import WebSocket
import json
import asyncio

from file_agent.core.events import AgentEvent


class EventBus:
    """
    Fans agent events out to websocket subscribers and keeps a short history.

    A subscriber registered with a session id only receives that session's
    events; one registered without receives everything.
    """

    def __init__(self, history_size: int = 200):
        self.subscribers: Dict[WebSocket, Optional[str]] = {}
        self.history: Deque[dict] = deque(maxlen=history_size)
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, session_id: Optional[str] = None):
        await websocket.accept()
        async with self._lock:
            self.subscribers[websocket] = session_id

    async def disconnect(self, websocket: WebSocket):
        async with self._lock:
            self.subscribers.pop(websocket, None)

    async def publish(self, event: AgentEvent):
        """Record an agent event and send it to matching subscribers."""
        payload = event.model_dump(mode="json")
        self.history.append(payload)
        await self.broadcast(payload)

    def recent(self, session_id: Optional[str] = None, limit: int = 50) -> List[dict]:
        events = [e for e in self.history if session_id is None or e.get("session_id") == session_id]
        return events[-limit:] if limit > 0 else []

    async def broadcast(self, event: dict):
        message = json.dumps(event, default=str)
        session_id = event.get("session_id")
        dropped = []

        for ws, wanted in list(self.subscribers.items()):
            if wanted is not None and wanted != session_id:
                continue
            try:
                await ws.send_text(message)
            except Exception:
                dropped.append(ws)

        if dropped:
            async with self._lock:
                for ws in dropped:
                    self.subscribers.pop(ws, None)


# Singleton instance
event_bus = EventBus()
