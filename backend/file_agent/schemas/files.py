"""Pydantic schemas for file search results and transfer tasks."""

import time
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, computed_field


class FileInfo(BaseModel):
    """A file found on disk."""
    path: str = Field(description="Path as reached from the search base")
    name: str = Field(description="File name without directory")
    isDirectory: bool = False
    size: int = Field(0, description="Size in bytes")
    lastModified: int = Field(0, description="Last modification time, epoch millis")


class ContentMatch(BaseModel):
    """A single matching line inside a file."""
    lineNumber: int = Field(description="1-based line number")
    content: str = Field(description="The matching line, stripped")


class FileContentMatch(BaseModel):
    """All matching lines for one file."""
    filePath: str
    matches: List[ContentMatch]


class TransferStatus(str, Enum):
    PENDING = "PENDING"
    DOWNLOADING = "DOWNLOADING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = {
    TransferStatus.COMPLETED,
    TransferStatus.FAILED,
    TransferStatus.CANCELLED,
}


class TransferTask(BaseModel):
    """A URL download or local copy tracked by the transfer service."""
    taskId: str
    source: str = Field(description="URL or local source path")
    targetDirectory: str
    localPath: Optional[str] = Field(None, description="Destination file once the transfer completes")
    status: TransferStatus = TransferStatus.PENDING
    totalSize: int = Field(-1, description="Expected bytes, -1 if unknown")
    transferredSize: int = 0
    errorMessage: Optional[str] = None
    startTime: int = Field(default_factory=lambda: int(time.time() * 1000))

    @computed_field
    @property
    def progress(self) -> float:
        if self.totalSize <= 0:
            return 0.0
        return self.transferredSize / self.totalSize * 100.0

    @computed_field
    @property
    def elapsedTime(self) -> int:
        return int(time.time() * 1000) - self.startTime

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
