"""Tests for keyword pattern intent classification."""

import pytest
from file_agent.agents.regex_classifier import RegexIntentClassifier, classify_with_patterns
from file_agent.schemas.agent import IntentType


class TestSearchPatterns:

    def test_english_search(self):
        intent = classify_with_patterns("search pom.xml")
        assert intent.type == IntentType.FILE_SEARCH
        assert intent.parameters == {"query": "pom.xml"}

    def test_find_with_colon(self):
        intent = classify_with_patterns("find: config files")
        assert intent.type == IntentType.FILE_SEARCH
        assert intent.get("query") == "config files"

    def test_chinese_search(self):
        intent = classify_with_patterns("搜索 README")
        assert intent.type == IntentType.FILE_SEARCH
        assert intent.get("query") == "README"

    def test_keyword_without_target_is_not_search(self):
        assert classify_with_patterns("search").type == IntentType.GENERAL_CHAT


class TestDownloadPatterns:

    def test_url(self):
        intent = classify_with_patterns("download https://example.com/a.txt")
        assert intent.type == IntentType.FILE_DOWNLOAD
        assert intent.parameters == {"url": "https://example.com/a.txt"}

    def test_file_name_becomes_query(self):
        intent = classify_with_patterns("download OllamaChatController")
        assert intent.type == IntentType.FILE_DOWNLOAD
        assert intent.parameters == {"query": "OllamaChatController"}

    def test_chinese_keyword_glued_to_name(self):
        intent = classify_with_patterns("下载pom.xml")
        assert intent.type == IntentType.FILE_DOWNLOAD
        assert intent.get("query") == "pom.xml"

    def test_remainder_used_when_no_clean_token(self):
        intent = classify_with_patterns("download ~my notes~")
        assert intent.type == IntentType.FILE_DOWNLOAD
        assert intent.get("query") == "~my notes~"

    def test_keyword_alone_is_not_download(self):
        assert classify_with_patterns("download").type == IntentType.GENERAL_CHAT


class TestOtherPatterns:

    def test_read(self):
        intent = classify_with_patterns("read /tmp/notes.txt")
        assert intent.type == IntentType.FILE_READ
        assert intent.parameters == {"filePath": "/tmp/notes.txt"}

    def test_chinese_open(self):
        intent = classify_with_patterns("打开 config.yml")
        assert intent.type == IntentType.FILE_READ
        assert intent.get("filePath") == "config.yml"

    def test_system(self):
        assert classify_with_patterns("show memory usage").type == IntentType.SYSTEM_INFO
        assert classify_with_patterns("系统状态").type == IntentType.SYSTEM_INFO

    def test_keyword_inside_word_does_not_match(self):
        """'filesystem' and 'already' contain keywords but are not commands."""
        assert classify_with_patterns("my filesystem is full").type == IntentType.GENERAL_CHAT
        assert classify_with_patterns("already done").type == IntentType.GENERAL_CHAT

    def test_chat(self):
        intent = classify_with_patterns("hello there")
        assert intent.type == IntentType.GENERAL_CHAT
        assert intent.parameters == {}

    def test_empty_message(self):
        assert classify_with_patterns("").type == IntentType.GENERAL_CHAT

    def test_search_checked_before_download(self):
        assert classify_with_patterns("search download scripts").type == IntentType.FILE_SEARCH


class TestRegexIntentClassifier:

    @pytest.mark.asyncio
    async def test_deterministic(self):
        classifier = RegexIntentClassifier()
        first = await classifier.classify("下载pom.xml")
        second = await classifier.classify("下载pom.xml")
        assert first == second


class TestCanonicalPhrasings:
    """One canonical phrasing per intent kind."""

    @pytest.mark.parametrize("message, intent_type, parameters", [
        ("search: readme", IntentType.FILE_SEARCH, {"query": "readme"}),
        ("download https://x/y.txt", IntentType.FILE_DOWNLOAD, {"url": "https://x/y.txt"}),
        ("download pom.xml", IntentType.FILE_DOWNLOAD, {"query": "pom.xml"}),
        ("read config.yml", IntentType.FILE_READ, {"filePath": "config.yml"}),
        ("show system memory", IntentType.SYSTEM_INFO, {}),
        ("what a nice day", IntentType.GENERAL_CHAT, {}),
    ])
    def test_phrasing(self, message, intent_type, parameters):
        intent = classify_with_patterns(message)
        assert intent.type == intent_type
        assert intent.parameters == parameters
