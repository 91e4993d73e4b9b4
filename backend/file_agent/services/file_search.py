import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional

from file_agent.schemas.files import ContentMatch, FileContentMatch, FileInfo

logger = logging.getLogger(__name__)

EXCLUDED_DIRS = {
    ".git", ".idea", "target", "node_modules", ".vscode",
    "build", "dist", ".gradle", ".mvn", "logs", "__pycache__", ".venv",
}

TEXT_EXTENSIONS = {
    ".txt", ".md", ".java", ".xml", ".yml", ".yaml", ".json", ".properties",
    ".js", ".ts", ".html", ".css", ".py", ".sh", ".toml", ".cfg", ".ini",
}


class FileSearchService:
    """Searches the local file system by file name and by file content."""

    def __init__(self, max_results: int = 100, max_read_bytes: int = 10 * 1024 * 1024):
        self.max_results = max_results
        self.max_read_bytes = max_read_bytes

    def _walk(self, base_path: str) -> Iterator[Path]:
        """Yield regular files under base_path in a stable order, skipping excluded dirs."""
        root = Path(base_path or ".")
        if not root.exists():
            return
        if root.is_file():
            yield root
            return

        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in EXCLUDED_DIRS)
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if path.is_file():
                    yield path

    def _to_file_info(self, path: Path) -> FileInfo:
        try:
            stat = path.stat()
            return FileInfo(
                path=str(path),
                name=path.name,
                isDirectory=path.is_dir(),
                size=stat.st_size,
                lastModified=int(stat.st_mtime * 1000),
            )
        except OSError:
            return FileInfo(path=str(path), name=path.name, isDirectory=path.is_dir())

    def search_by_name(self, query: str, base_path: str = ".") -> List[FileInfo]:
        """Files whose name contains query, case-insensitively."""
        if not query or not query.strip():
            return []

        needle = query.strip().lower()
        results = []
        for path in self._walk(base_path):
            if needle in path.name.lower():
                results.append(self._to_file_info(path))
                if len(results) >= self.max_results:
                    break

        logger.debug("Name search %r under %s: %d results", query, base_path, len(results))
        return results

    def search_by_content(self, query: str, base_path: str = ".") -> List[FileContentMatch]:
        """Text files containing query on at least one line, with line-indexed matches."""
        if not query or not query.strip():
            return []

        needle = query.strip().lower()
        results = []
        for path in self._walk(base_path):
            if path.suffix.lower() not in TEXT_EXTENSIONS:
                continue
            matches = self._search_in_file(path, needle)
            if matches:
                results.append(FileContentMatch(filePath=str(path), matches=matches))
                if len(results) >= self.max_results:
                    break

        logger.debug("Content search %r under %s: %d files", query, base_path, len(results))
        return results

    def _search_in_file(self, path: Path, needle: str) -> List[ContentMatch]:
        matches = []
        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                for line_number, line in enumerate(f, start=1):
                    if needle in line.lower():
                        matches.append(ContentMatch(lineNumber=line_number, content=line.strip()))
        except OSError as e:
            logger.debug("Skipping unreadable file %s: %s", path, e)
        return matches

    def list_files(self, directory: str = ".") -> List[FileInfo]:
        """Direct children of a directory."""
        dir_path = Path(directory or ".")
        if not dir_path.is_dir():
            return []
        try:
            return [self._to_file_info(p) for p in sorted(dir_path.iterdir())]
        except OSError as e:
            logger.warning("Could not list %s: %s", directory, e)
            return []

    def read(self, file_path: str) -> Optional[str]:
        """Return the text of a file, or None if missing, too large or unreadable."""
        if not file_path:
            return None

        path = Path(file_path)
        if not path.is_file():
            return None

        try:
            size = path.stat().st_size
            if size > self.max_read_bytes:
                logger.warning("Refusing to read %s: %d bytes exceeds limit %d", path, size, self.max_read_bytes)
                return None
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read %s: %s", path, e)
            return None
