"""Conversational file agent: classify a message, act on it, and handle download confirmations."""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional

from file_agent.agents.base import EventCallback, IntentClassifier, ignore_event
from file_agent.agents.dialog_state import DEFAULT_SESSION_ID, DialogStateStore
from file_agent.agents.prompts import (
    SELECTION_HELP,
    build_confirmation_prompt,
    build_search_summary,
    build_transfer_started,
)
from file_agent.agents.selection import resolve_selection
from file_agent.core.events import AgentEvent, EventType
from file_agent.core.formatting import format_size, preview
from file_agent.schemas.agent import AgentResponse, Intent, IntentType, PendingConfirmation
from file_agent.schemas.files import FileInfo, TransferTask
from file_agent.services.file_search import FileSearchService
from file_agent.services.file_transfer import TransferService
from file_agent.services.llm import LLMClient
from file_agent.services.system_info import memory_snapshot, transfer_counts

logger = logging.getLogger(__name__)


@dataclass
class _Turn:
    """Identifiers and event sink for one processed message."""
    agent_id: str
    session_id: str
    on_event: EventCallback

    async def emit(self, event_type: EventType, data: dict) -> None:
        await self.on_event(AgentEvent.create(event_type, self.agent_id, self.session_id, data))


class FileAgent:
    """
    Entry point for chat messages.

    A session is either idle or awaiting a download confirmation. While a
    confirmation is pending, the very next message of that session is taken
    as the user's pick and never classified; the pending state is cleared
    whether or not the pick resolves.
    """

    def __init__(
        self,
        classifier: IntentClassifier,
        search: FileSearchService,
        transfers: TransferService,
        llm: LLMClient,
        state: Optional[DialogStateStore] = None,
        base_path: str = ".",
        download_directory: str = "./downloads",
        auto_confirm_single_match: bool = True,
    ):
        self.classifier = classifier
        self.search = search
        self.transfers = transfers
        self.llm = llm
        self.state = state or DialogStateStore()
        self.base_path = base_path
        self.download_directory = download_directory
        self.auto_confirm_single_match = auto_confirm_single_match

    async def classify(self, message: str) -> Intent:
        return await self.classifier.classify(message)

    async def process(
        self,
        message: str,
        session_id: Optional[str] = None,
        on_event: Optional[EventCallback] = None,
    ) -> AgentResponse:
        turn = _Turn(
            agent_id=str(uuid.uuid4()),
            session_id=session_id or DEFAULT_SESSION_ID,
            on_event=on_event or ignore_event,
        )
        await turn.emit(EventType.AGENT_STARTED, {"message": message})

        try:
            pending = self.state.consume(turn.session_id)
            if pending is not None:
                response = await self._handle_confirmation(message, pending, turn)
            else:
                intent = await self.classifier.classify(message)
                logger.info("Session %s: %r -> %s %s", turn.session_id, message, intent.type.value, intent.parameters)
                await turn.emit(
                    EventType.INTENT_CLASSIFIED,
                    {"intent": intent.type.value, "parameters": dict(intent.parameters)},
                )
                response = await self._dispatch(intent, message, turn)
        except Exception as e:
            await turn.emit(EventType.AGENT_COMPLETED, {"status": "error", "error": str(e)})
            raise

        await turn.emit(EventType.AGENT_COMPLETED, {"status": "success", "action": response.action})
        return response

    async def _dispatch(self, intent: Intent, message: str, turn: _Turn) -> AgentResponse:
        if intent.type == IntentType.FILE_SEARCH:
            return await self._handle_file_search(intent)
        if intent.type == IntentType.FILE_DOWNLOAD:
            return await self._handle_file_download(intent, turn)
        if intent.type == IntentType.FILE_READ:
            return await self._handle_file_read(intent)
        if intent.type == IntentType.SYSTEM_INFO:
            return self._handle_system_info()
        return await self._handle_general_chat(message, turn)

    # ── Confirmation ──────────────────────────────────────────────────

    async def _handle_confirmation(
        self, reply: str, pending: PendingConfirmation, turn: _Turn
    ) -> AgentResponse:
        selected = resolve_selection(reply, pending.candidates)

        if selected is None:
            logger.info("Session %s: could not resolve selection %r", turn.session_id, reply)
            return AgentResponse(
                action="file_download_error",
                message=(
                    f"Could not recognise your selection: {reply}\n"
                    f"{SELECTION_HELP}\n\n"
                    f"Please request the download of {pending.originalQuery} again."
                ),
                data={"query": pending.originalQuery, "needConfirmation": False},
            )

        task = await self._start_copy(selected, pending.targetDirectory, turn)
        return self._transfer_response(selected, task, selectedFile=selected)

    # ── Handlers ──────────────────────────────────────────────────────

    async def _handle_file_search(self, intent: Intent) -> AgentResponse:
        query = (intent.get("query") or "").strip()
        base_path = intent.get("basePath") or self.base_path

        if not query:
            files, content_matches = [], []
            message = "Please tell me what to search for."
        else:
            files = await asyncio.to_thread(self.search.search_by_name, query, base_path)
            content_matches = await asyncio.to_thread(self.search.search_by_content, query, base_path)
            message = build_search_summary(files, content_matches)

        return AgentResponse(
            action="file_search",
            message=message,
            data={
                "files": [f.model_dump() for f in files],
                "contentMatches": [m.model_dump() for m in content_matches],
                "query": query,
                "basePath": base_path,
                "summary": {
                    "totalFiles": len(files),
                    "totalContentMatches": len(content_matches),
                },
            },
        )

    async def _handle_file_download(self, intent: Intent, turn: _Turn) -> AgentResponse:
        url = intent.get("url")
        file_path = intent.get("filePath")
        query = intent.get("query")
        target_directory = intent.get("targetDirectory") or self.download_directory

        if url and url.lower().startswith(("http://", "https://")):
            task = await self.transfers.start_download(url, target_directory)
            await turn.emit(EventType.TRANSFER_STARTED, {"taskId": task.taskId, "source": url})
            return self._transfer_response(url, task)

        if file_path:
            task = await self._start_copy(file_path, target_directory, turn)
            return self._transfer_response(file_path, task)

        if query:
            return await self._download_with_search(query, target_directory, turn)

        return AgentResponse(
            action="file_download_error",
            message="Please provide a valid file path, URL or file name.",
            data={},
        )

    async def _download_with_search(self, query: str, target_directory: str, turn: _Turn) -> AgentResponse:
        files: List[FileInfo] = await asyncio.to_thread(self.search.search_by_name, query, self.base_path)

        if not files:
            return AgentResponse(
                action="file_download_error",
                message=f"No matching file found: {query}\nTry a more specific file name or path.",
                data={"query": query},
            )

        if len(files) == 1 and self.auto_confirm_single_match:
            selected = files[0].path
            task = await self._start_copy(selected, target_directory, turn)
            return self._transfer_response(selected, task, selectedFile=selected, autoSelected=True)

        self.state.set(files, target_directory, query, turn.session_id)
        await turn.emit(EventType.CONFIRMATION_PENDING, {"query": query, "candidates": len(files)})

        return AgentResponse(
            action="file_download_confirm",
            message=build_confirmation_prompt(files),
            data={
                "query": query,
                "files": [f.model_dump() for f in files],
                "targetDirectory": target_directory,
                "needConfirmation": True,
            },
        )

    async def _handle_file_read(self, intent: Intent) -> AgentResponse:
        file_path = intent.get("filePath")
        content = await asyncio.to_thread(self.search.read, file_path) if file_path else None

        if content is None:
            return AgentResponse(
                action="file_read_error",
                message=f"Could not read file: {file_path or '(no path given)'}",
                data={"filePath": file_path},
            )

        return AgentResponse(
            action="file_read",
            message=f"Read file: {file_path}\n\nPreview (first 500 characters):\n{preview(content)}",
            data={
                "filePath": file_path,
                "content": content,
                "contentLength": len(content),
            },
        )

    def _handle_system_info(self) -> AgentResponse:
        memory = memory_snapshot()
        downloads = transfer_counts(self.transfers)

        message = (
            "System information:\n"
            f"Memory usage: {memory['usagePercent']:.1f}% "
            f"({format_size(memory['used'])} / {format_size(memory['total'])})\n"
            f"Active downloads: {downloads['activeTasks']}\n"
            f"Total downloads: {downloads['totalTasks']}"
        )
        return AgentResponse(
            action="system_info",
            message=message,
            data={"memory": memory, "downloads": downloads},
        )

    async def _handle_general_chat(self, message: str, turn: _Turn) -> AgentResponse:
        await turn.emit(EventType.LLM_REQUEST, {"model": self.llm.model})
        try:
            reply = await self.llm.complete(message)
        except Exception as e:
            logger.warning("General chat failed: %s", e)
            return AgentResponse(
                action="general_chat_error",
                message=f"The language model is unavailable: {e}",
                data={"originalMessage": message},
            )
        await turn.emit(EventType.LLM_RESPONSE, {"response_length": len(reply)})

        return AgentResponse(
            action="general_chat",
            message=reply,
            data={"originalMessage": message},
        )

    # ── Helpers ───────────────────────────────────────────────────────

    async def _start_copy(self, source: str, target_directory: str, turn: _Turn) -> TransferTask:
        task = await self.transfers.start_copy(source, target_directory)
        await turn.emit(EventType.TRANSFER_STARTED, {"taskId": task.taskId, "source": source})
        return task

    def _transfer_response(self, source: str, task: TransferTask, **extra) -> AgentResponse:
        return AgentResponse(
            action="file_download",
            message=build_transfer_started(source, task.taskId, task.targetDirectory, task.status.value),
            data={"downloadTask": task.model_dump(), **extra},
        )
