"""Asynchronous URL downloads and local file copies, tracked by task id."""

import asyncio
import itertools
import logging
import re
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import unquote, urlparse

import httpx

from file_agent.schemas.files import TransferStatus, TransferTask

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class TransferError(Exception):
    """Raised inside a transfer worker; recorded on the task, never propagated."""


def filename_from_url(url: str) -> str:
    """
    Last path segment of a URL without the query string, or a timestamped fallback.

    The path is percent-decoded before it is split, so an encoded separator
    can never smuggle a directory component into the name.
    """
    decoded = unquote(urlparse(url).path)
    name = re.split(r"[/\\]", decoded)[-1].strip()
    if name in ("", ".", ".."):
        name = f"downloaded_file_{int(time.time() * 1000)}"
    return name


class TransferService:
    """
    Runs each transfer as an independent asyncio task created at request time.

    Callers get the TransferTask record back immediately and poll it by id.
    Cancellation is cooperative: a cancelled task never changes status again
    and its worker stops at the next chunk boundary.
    """

    def __init__(
        self,
        max_transfer_bytes: int = 2 * 1024 * 1024 * 1024,
        http_timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.max_transfer_bytes = max_transfer_bytes
        self.http_timeout = http_timeout
        self._transport = transport
        self._tasks: Dict[str, TransferTask] = {}
        self._workers: Dict[str, asyncio.Task] = {}
        self._partials: Dict[str, Path] = {}
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    # ── Task registry ─────────────────────────────────────────────────

    def _new_task(self, source: str, target_directory: str) -> TransferTask:
        with self._lock:
            task_id = f"task_{next(self._counter)}"
            task = TransferTask(taskId=task_id, source=source, targetDirectory=target_directory)
            self._tasks[task_id] = task
        return task

    async def _schedule(self, task: TransferTask, worker) -> None:
        runner = asyncio.create_task(self._run(task, worker))
        self._workers[task.taskId] = runner
        runner.add_done_callback(lambda _: self._workers.pop(task.taskId, None))
        # Let the worker pick the task up before the caller reads its status
        await asyncio.sleep(0)

    def get(self, task_id: str) -> Optional[TransferTask]:
        return self._tasks.get(task_id)

    def list_tasks(self) -> List[TransferTask]:
        with self._lock:
            return list(self._tasks.values())

    def active_count(self) -> int:
        return sum(1 for t in self.list_tasks() if t.status == TransferStatus.DOWNLOADING)

    def cancel(self, task_id: str) -> bool:
        """Mark a pending or running task cancelled. Returns False if unknown or finished."""
        task = self._tasks.get(task_id)
        if task is None or task.is_terminal:
            return False
        task.status = TransferStatus.CANCELLED
        logger.info("Transfer %s cancelled", task_id)
        return True

    def delete(self, task_id: str) -> bool:
        """Forget a task, cancelling it first if it is still running."""
        self.cancel(task_id)
        with self._lock:
            return self._tasks.pop(task_id, None) is not None

    def _set_status(self, task: TransferTask, status: TransferStatus) -> bool:
        if task.is_terminal:
            return False
        task.status = status
        return True

    async def wait(self, task_id: str) -> Optional[TransferTask]:
        """Wait for a task's worker to finish. Used by tests and batch callers."""
        runner = self._workers.get(task_id)
        if runner is not None:
            await asyncio.gather(runner, return_exceptions=True)
        return self.get(task_id)

    # ── Public entry points ───────────────────────────────────────────

    async def start_download(self, url: str, target_directory: str) -> TransferTask:
        """Start fetching url into target_directory."""
        task = self._new_task(url, target_directory)
        logger.info("Starting download %s: %s -> %s", task.taskId, url, target_directory)
        await self._schedule(task, self._perform_download)
        return task

    async def start_copy(self, source_path: str, target_directory: str) -> TransferTask:
        """Start copying a local file into target_directory."""
        task = self._new_task(source_path, target_directory)
        logger.info("Starting copy %s: %s -> %s", task.taskId, source_path, target_directory)
        await self._schedule(task, self._perform_copy)
        return task

    # ── Workers ───────────────────────────────────────────────────────

    async def _run(self, task: TransferTask, worker) -> None:
        if not self._set_status(task, TransferStatus.DOWNLOADING):
            return
        try:
            await worker(task)
            if self._set_status(task, TransferStatus.COMPLETED):
                target = self._partials.pop(task.taskId, None)
                task.localPath = str(target) if target is not None else None
                logger.info("Transfer %s completed: %d bytes", task.taskId, task.transferredSize)
        except (TransferError, httpx.HTTPError, OSError) as e:
            self._fail(task, str(e))
        except Exception as e:
            logger.exception("Unexpected error in transfer %s", task.taskId)
            self._fail(task, str(e))
        finally:
            # Cancelled or failed: nothing half-written stays behind
            self._discard_partial(task)

    def _fail(self, task: TransferTask, message: str) -> None:
        task.errorMessage = message
        if self._set_status(task, TransferStatus.FAILED):
            logger.warning("Transfer %s failed: %s", task.taskId, message)

    def _discard_partial(self, task: TransferTask) -> None:
        partial = self._partials.pop(task.taskId, None)
        if partial is None:
            return
        try:
            partial.unlink(missing_ok=True)
            logger.info("Removed partial file %s of transfer %s", partial, task.taskId)
        except OSError as e:
            logger.warning("Could not remove partial file %s: %s", partial, e)

    def _check_size(self, size: int) -> None:
        if size > self.max_transfer_bytes:
            raise TransferError(
                f"File size {size} exceeds transfer limit of {self.max_transfer_bytes} bytes"
            )

    def _prepare_target(self, task: TransferTask, filename: str) -> Path:
        """Destination file inside the task's target directory; never outside it."""
        target_dir = Path(task.targetDirectory)
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / filename
        if target.resolve().parent != target_dir.resolve():
            raise TransferError(f"Refusing to write outside {target_dir}: {filename}")
        return target

    def _claim(self, task: TransferTask, target: Path) -> None:
        """Mark target as written by this task until it completes."""
        self._partials[task.taskId] = target

    async def _perform_download(self, task: TransferTask) -> None:
        target = self._prepare_target(task, filename_from_url(task.source))

        async with httpx.AsyncClient(
            timeout=self.http_timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            async with client.stream("GET", task.source) as response:
                response.raise_for_status()
                length = response.headers.get("content-length")
                if length and length.isdigit():
                    task.totalSize = int(length)
                    self._check_size(task.totalSize)

                self._claim(task, target)
                with open(target, "wb") as out:
                    async for chunk in response.aiter_bytes(CHUNK_SIZE):
                        if task.status == TransferStatus.CANCELLED:
                            return
                        out.write(chunk)
                        task.transferredSize += len(chunk)
                        self._check_size(task.transferredSize)

    async def _perform_copy(self, task: TransferTask) -> None:
        source = Path(task.source)
        if not source.is_file():
            raise TransferError(f"Source file does not exist or is not a regular file: {source}")

        task.totalSize = source.stat().st_size
        self._check_size(task.totalSize)

        target = self._prepare_target(task, source.name)
        if target.exists() and target.resolve() == source.resolve():
            raise TransferError(f"Source and target are the same file: {source}")

        self._claim(task, target)
        await asyncio.to_thread(self._copy_chunks, task, source, target)

    def _copy_chunks(self, task: TransferTask, source: Path, target: Path) -> None:
        with open(source, "rb") as src, open(target, "wb") as out:
            while True:
                if task.status == TransferStatus.CANCELLED:
                    return
                chunk = src.read(CHUNK_SIZE)
                if not chunk:
                    break
                out.write(chunk)
                task.transferredSize += len(chunk)
