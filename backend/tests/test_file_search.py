"""Tests for name and content search over a temporary directory tree."""

import pytest
from file_agent.services.file_search import FileSearchService


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "app").mkdir()
    (tmp_path / "app" / "pom.xml").write_text("<project>\n  <artifactId>app</artifactId>\n</project>\n")
    (tmp_path / "lib").mkdir()
    (tmp_path / "lib" / "pom.xml").write_text("<project>\n  <artifactId>lib</artifactId>\n</project>\n")
    (tmp_path / "README.md").write_text("# Demo\nBuild with maven.\n")
    (tmp_path / "image.png").write_bytes(b"\x89PNG maven")
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "node_modules" / "pom.xml").write_text("ignored")
    return tmp_path


class TestSearchByName:

    def test_finds_files_case_insensitively(self, tree):
        service = FileSearchService()
        results = service.search_by_name("POM", str(tree))

        assert [r.name for r in results] == ["pom.xml", "pom.xml"]
        assert all(not r.isDirectory for r in results)
        assert all(r.size > 0 for r in results)

    def test_excluded_directories_skipped(self, tree):
        results = FileSearchService().search_by_name("pom", str(tree))
        assert not any("node_modules" in r.path for r in results)

    def test_stable_order(self, tree):
        results = FileSearchService().search_by_name("pom", str(tree))
        assert results[0].path.endswith("app/pom.xml") or results[0].path.endswith("app\\pom.xml")

    def test_result_cap(self, tree):
        results = FileSearchService(max_results=1).search_by_name("pom", str(tree))
        assert len(results) == 1

    def test_blank_query(self, tree):
        assert FileSearchService().search_by_name("   ", str(tree)) == []

    def test_missing_base_path(self, tmp_path):
        assert FileSearchService().search_by_name("pom", str(tmp_path / "nope")) == []


class TestSearchByContent:

    def test_line_matches(self, tree):
        results = FileSearchService().search_by_content("artifactid", str(tree))

        assert len(results) == 2
        first = results[0]
        assert first.matches[0].lineNumber == 2
        assert first.matches[0].content == "<artifactId>app</artifactId>"

    def test_binary_extensions_skipped(self, tree):
        results = FileSearchService().search_by_content("maven", str(tree))
        assert [r.filePath.endswith("README.md") for r in results] == [True]


class TestListAndRead:

    def test_list_files(self, tree):
        names = [f.name for f in FileSearchService().list_files(str(tree))]
        assert names == sorted(["app", "lib", "README.md", "image.png", "node_modules"])

    def test_list_missing_directory(self, tmp_path):
        assert FileSearchService().list_files(str(tmp_path / "nope")) == []

    def test_read(self, tree):
        content = FileSearchService().read(str(tree / "README.md"))
        assert content.startswith("# Demo")

    def test_read_missing(self, tree):
        assert FileSearchService().read(str(tree / "missing.txt")) is None

    def test_read_directory(self, tree):
        assert FileSearchService().read(str(tree / "app")) is None

    def test_read_over_limit(self, tree):
        assert FileSearchService(max_read_bytes=4).read(str(tree / "README.md")) is None

    def test_read_binary(self, tmp_path):
        path = tmp_path / "blob.bin"
        path.write_bytes(b"\xff\xfe\x00\x80")
        assert FileSearchService().read(str(path)) is None
