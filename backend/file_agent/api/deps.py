"""Dependency injection for API routes."""
from typing import Optional

from file_agent.agents.dialog_state import DialogStateStore
from file_agent.agents.fallback_classifier import FallbackIntentClassifier
from file_agent.agents.file_agent import FileAgent
from file_agent.agents.llm_classifier import LLMIntentClassifier
from file_agent.core import config
from file_agent.services.file_search import FileSearchService
from file_agent.services.file_transfer import TransferService
from file_agent.services.llm import LLMClient

# Singleton instances, built on first use
_search_service: Optional[FileSearchService] = None
_transfer_service: Optional[TransferService] = None
_llm_client: Optional[LLMClient] = None
_dialog_state: Optional[DialogStateStore] = None
_file_agent: Optional[FileAgent] = None


def get_settings():
    """Get application settings."""
    return config.settings


def get_search_service() -> FileSearchService:
    global _search_service
    if _search_service is None:
        s = config.settings
        _search_service = FileSearchService(
            max_results=s.max_search_results,
            max_read_bytes=s.max_read_bytes,
        )
    return _search_service


def get_transfer_service() -> TransferService:
    global _transfer_service
    if _transfer_service is None:
        _transfer_service = TransferService(max_transfer_bytes=config.settings.max_transfer_bytes)
    return _transfer_service


def get_llm_client() -> LLMClient:
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client


def get_dialog_state() -> DialogStateStore:
    global _dialog_state
    if _dialog_state is None:
        _dialog_state = DialogStateStore()
    return _dialog_state


def get_file_agent() -> FileAgent:
    global _file_agent
    if _file_agent is None:
        s = config.settings
        llm = get_llm_client()
        _file_agent = FileAgent(
            classifier=FallbackIntentClassifier(
                LLMIntentClassifier(llm),
                timeout=s.llm_timeout_seconds,
            ),
            search=get_search_service(),
            transfers=get_transfer_service(),
            llm=llm,
            state=get_dialog_state(),
            base_path=s.search_base_path,
            download_directory=s.download_directory,
            auto_confirm_single_match=s.auto_confirm_single_match,
        )
    return _file_agent


async def reset_agent() -> None:
    """Drop the LLM client and agent so the next request picks up reloaded settings."""
    global _llm_client, _file_agent
    if _llm_client is not None:
        await _llm_client.close()
    _llm_client = None
    _file_agent = None
