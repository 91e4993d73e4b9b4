"""
HTTP-level tests for the chat and file routes.

Service dependencies are overridden with instances rooted at tmp_path and a
mocked language model.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from file_agent.agents.dialog_state import DialogStateStore
from file_agent.agents.file_agent import FileAgent
from file_agent.agents.regex_classifier import RegexIntentClassifier
from file_agent.api import deps
from file_agent.main import app
from file_agent.services.file_search import FileSearchService
from file_agent.services.file_transfer import TransferService


@pytest.fixture
def workspace(tmp_path):
    base = tmp_path / "repo"
    (base / "app").mkdir(parents=True)
    (base / "lib").mkdir()
    (base / "app" / "pom.xml").write_text("<project>app</project>")
    (base / "lib" / "pom.xml").write_text("<project>lib</project>")
    (base / "notes.txt").write_text("remember the milk\n")
    return base


@pytest.fixture
def client(workspace):
    llm = MagicMock()
    llm.model = "test-model"
    llm.complete = AsyncMock(return_value="Hello from the model")
    llm.chat = AsyncMock(return_value="Conversation reply")

    search = FileSearchService()
    transfers = TransferService()
    agent = FileAgent(
        classifier=RegexIntentClassifier(),
        search=search,
        transfers=transfers,
        llm=llm,
        state=DialogStateStore(),
        base_path=str(workspace),
        download_directory=str(workspace.parent / "downloads"),
    )

    app.dependency_overrides[deps.get_file_agent] = lambda: agent
    app.dependency_overrides[deps.get_search_service] = lambda: search
    app.dependency_overrides[deps.get_transfer_service] = lambda: transfers
    app.dependency_overrides[deps.get_llm_client] = lambda: llm
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestRoot:

    def test_root(self, client):
        assert client.get("/").json()["name"] == "File Agent API"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
        assert client.get("/api/chat/health").json()["status"] == "OK"


class TestChatRoutes:

    def test_agent_confirmation_flow(self, client):
        first = client.post("/api/chat/agent", json={"message": "download pom", "session_id": "web-1"})
        assert first.status_code == 200
        assert first.json()["action"] == "file_download_confirm"
        assert len(first.json()["data"]["files"]) == 2

        second = client.post("/api/chat/agent", json={"message": "first", "session_id": "web-1"})
        body = second.json()
        assert body["action"] == "file_download"
        assert body["data"]["selectedFile"].endswith("pom.xml")

    def test_message_defaults_to_greeting(self, client):
        response = client.post("/api/chat/message", json={})
        body = response.json()
        assert body["message"] == "Hello, please introduce yourself."
        assert body["action"] == "general_chat"
        assert body["reply"] == "Hello from the model"
        assert body["session_id"] == "default"

    def test_debug_intent(self, client):
        body = client.post("/api/chat/debug/intent", json={"message": "下载pom.xml"}).json()
        assert body["intent"] == "FILE_DOWNLOAD"
        assert body["parameters"] == {"query": "pom.xml"}

    def test_debug_intent_requires_message(self, client):
        assert client.post("/api/chat/debug/intent", json={"message": "  "}).status_code == 400

    def test_simple(self, client):
        assert client.get("/api/chat/simple").json() == "Hello from the model"

    def test_conversation(self, client):
        response = client.post(
            "/api/chat/conversation",
            json={
                "messages": [{"role": "user", "content": "hi"}, {"role": "bot", "content": "hello"}],
                "newMessage": "how are you?",
            },
        )
        body = response.json()
        assert body["reply"] == "Conversation reply"
        assert [m["role"] for m in body["conversationHistory"]] == ["user", "assistant", "user"]

    def test_conversation_requires_new_message(self, client):
        assert client.post("/api/chat/conversation", json={"messages": []}).status_code == 400

    def test_events_recorded(self, client):
        client.post("/api/chat/agent", json={"message": "memory", "session_id": "events-1"})
        events = client.get("/api/events", params={"session_id": "events-1"}).json()["events"]
        assert events[0]["type"] == "agent_started"
        assert events[-1]["type"] == "agent_completed"


class TestFileRoutes:

    def test_search_files(self, client, workspace):
        response = client.get("/api/agent/search/files", params={"query": "pom", "basePath": str(workspace)})
        assert [f["name"] for f in response.json()] == ["pom.xml", "pom.xml"]

    def test_search_content(self, client, workspace):
        response = client.get("/api/agent/search/content", params={"query": "milk", "basePath": str(workspace)})
        body = response.json()
        assert len(body) == 1
        assert body[0]["matches"][0]["content"] == "remember the milk"

    def test_smart_search(self, client, workspace):
        body = client.post("/api/agent/smart-search", json={"query": "pom", "basePath": str(workspace)}).json()
        assert body["summary"] == {"totalFiles": 2, "totalContentMatches": 0}

    def test_search_defaults_to_configured_base_path(self, client, workspace, monkeypatch):
        from file_agent.core import config
        monkeypatch.setattr(config.settings, "search_base_path", str(workspace))

        files = client.get("/api/agent/search/files", params={"query": "pom"}).json()
        assert [f["name"] for f in files] == ["pom.xml", "pom.xml"]

        matches = client.get("/api/agent/search/content", params={"query": "milk"}).json()
        assert [m["filePath"] for m in matches] == [str(workspace / "notes.txt")]

        body = client.post("/api/agent/smart-search", json={"query": "pom"}).json()
        assert body["basePath"] == str(workspace)
        assert body["summary"]["totalFiles"] == 2

    def test_list_files(self, client, workspace):
        names = [f["name"] for f in client.get("/api/agent/files/list", params={"directory": str(workspace)}).json()]
        assert names == ["app", "lib", "notes.txt"]

    def test_file_content(self, client, workspace):
        body = client.get("/api/agent/files/content", params={"filePath": str(workspace / "notes.txt")}).json()
        assert body == {"success": True, "filePath": str(workspace / "notes.txt"), "content": "remember the milk\n"}

    def test_file_content_missing(self, client, workspace):
        body = client.get("/api/agent/files/content", params={"filePath": str(workspace / "nope.txt")}).json()
        assert body["success"] is False

    def test_download_start_requires_url(self, client):
        assert client.post("/api/agent/download/start", json={}).status_code == 400

    def test_local_copy_and_status(self, client, workspace, tmp_path):
        response = client.post(
            "/api/agent/download/local",
            json={"filePath": str(workspace / "notes.txt"), "targetDirectory": str(tmp_path / "out")},
        )
        task = response.json()
        assert task["taskId"].startswith("task_")

        status = client.get(f"/api/agent/download/status/{task['taskId']}").json()
        assert status["status"] in ("DOWNLOADING", "COMPLETED")
        assert [t["taskId"] for t in client.get("/api/agent/download/tasks").json()] == [task["taskId"]]

    def test_unknown_task_status(self, client):
        assert client.get("/api/agent/download/status/task_404").status_code == 404

    def test_cancel_unknown_task(self, client):
        assert client.post("/api/agent/download/cancel/task_404").json()["success"] is False

    def test_serve_local_file(self, client, workspace):
        response = client.get("/api/agent/download/local", params={"filePath": str(workspace / "notes.txt")})
        assert response.status_code == 200
        assert response.content == b"remember the milk\n"
        assert "notes.txt" in response.headers["content-disposition"]

    def test_system_info(self, client):
        body = client.get("/api/agent/system/info").json()
        assert body["memory"]["usagePercent"].endswith("%")
        assert body["downloads"] == {"activeTasks": 0, "totalTasks": 0}


class TestSettingsRoutes:

    def test_get_masks_key(self, client, monkeypatch):
        from file_agent.core import config
        monkeypatch.setattr(config.settings, "openai_api_key", "sk-1234567890abcd")

        body = client.get("/api/settings").json()
        assert body["openai_api_key"] == "sk-1*********abcd"
        assert "auto_confirm_single_match" in body

    def test_rejects_non_positive_timeout(self, client):
        response = client.post("/api/settings", json={"llm_timeout_seconds": 0})
        assert response.status_code == 400


class TestCorsOrigins:

    def test_comma_separated(self):
        from file_agent.core.config import parse_origins
        assert parse_origins("http://a.test, http://b.test") == ["http://a.test", "http://b.test"]

    def test_json_list(self):
        from file_agent.core.config import parse_origins
        assert parse_origins('["http://a.test"]') == ["http://a.test"]

    def test_blank(self):
        from file_agent.core.config import parse_origins
        assert parse_origins("  ") == []
