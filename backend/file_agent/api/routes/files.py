"""Direct file routes: search, read, transfers and system status."""

import logging
import mimetypes
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from pydantic import BaseModel

from file_agent.api.deps import get_search_service, get_settings, get_transfer_service
from file_agent.schemas.files import FileContentMatch, FileInfo, TransferTask
from file_agent.services.file_search import FileSearchService
from file_agent.services.file_transfer import TransferService
from file_agent.services.system_info import system_info

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/agent", tags=["agent"])


class DownloadRequest(BaseModel):
    url: Optional[str] = None
    targetDirectory: Optional[str] = None


class LocalCopyRequest(BaseModel):
    filePath: Optional[str] = None
    targetDirectory: Optional[str] = None


class SmartSearchRequest(BaseModel):
    query: Optional[str] = None
    basePath: Optional[str] = None


class BatchDownloadRequest(BaseModel):
    urls: List[str] = []
    targetDirectory: Optional[str] = None


def _target_directory(requested: Optional[str]) -> str:
    return requested or get_settings().download_directory


def _base_path(requested: Optional[str]) -> str:
    return requested or get_settings().search_base_path


# ── Search ────────────────────────────────────────────────────────────

@router.get("/search/files", response_model=List[FileInfo])
def search_files(
    query: str,
    basePath: Optional[str] = None,
    search: FileSearchService = Depends(get_search_service),
):
    return search.search_by_name(query, _base_path(basePath))


@router.get("/search/content", response_model=List[FileContentMatch])
def search_content(
    query: str,
    basePath: Optional[str] = None,
    search: FileSearchService = Depends(get_search_service),
):
    return search.search_by_content(query, _base_path(basePath))


@router.post("/smart-search")
def smart_search(body: SmartSearchRequest, search: FileSearchService = Depends(get_search_service)):
    """Name and content search in one call, with totals."""
    if body.query is None or not body.query.strip():
        raise HTTPException(status_code=400, detail="Query must not be empty")

    base_path = _base_path(body.basePath)
    files = search.search_by_name(body.query, base_path)
    content_matches = search.search_by_content(body.query, base_path)
    return {
        "query": body.query,
        "basePath": base_path,
        "files": [f.model_dump() for f in files],
        "contentMatches": [m.model_dump() for m in content_matches],
        "summary": {
            "totalFiles": len(files),
            "totalContentMatches": len(content_matches),
        },
    }


# ── Files ─────────────────────────────────────────────────────────────

@router.get("/files/list", response_model=List[FileInfo])
def list_files(directory: str = ".", search: FileSearchService = Depends(get_search_service)):
    return search.list_files(directory)


@router.get("/files/content")
def read_file_content(filePath: str, search: FileSearchService = Depends(get_search_service)):
    content = search.read(filePath)
    if content is None:
        return {"success": False, "error": f"Could not read file content: {filePath}"}
    return {"success": True, "filePath": filePath, "content": content}


# ── Transfers ─────────────────────────────────────────────────────────

@router.post("/download/start", response_model=TransferTask)
async def start_download(body: DownloadRequest, transfers: TransferService = Depends(get_transfer_service)):
    if body.url is None or not body.url.strip():
        raise HTTPException(status_code=400, detail="URL is required")
    return await transfers.start_download(body.url.strip(), _target_directory(body.targetDirectory))


@router.post("/download/local", response_model=TransferTask)
async def copy_local_file(body: LocalCopyRequest, transfers: TransferService = Depends(get_transfer_service)):
    if body.filePath is None or not body.filePath.strip():
        raise HTTPException(status_code=400, detail="File path is required")
    return await transfers.start_copy(body.filePath.strip(), _target_directory(body.targetDirectory))


@router.post("/batch-download", response_model=List[TransferTask])
async def batch_download(body: BatchDownloadRequest, transfers: TransferService = Depends(get_transfer_service)):
    if not body.urls:
        raise HTTPException(status_code=400, detail="URLs list is required")
    target = _target_directory(body.targetDirectory)
    logger.info("Batch download of %d URLs into %s", len(body.urls), target)
    return [await transfers.start_download(url, target) for url in body.urls]


@router.get("/download/status/{task_id}", response_model=TransferTask)
async def download_status(task_id: str, transfers: TransferService = Depends(get_transfer_service)):
    task = transfers.get(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Download task not found: {task_id}")
    return task


@router.get("/download/tasks", response_model=List[TransferTask])
async def download_tasks(transfers: TransferService = Depends(get_transfer_service)):
    return transfers.list_tasks()


@router.post("/download/cancel/{task_id}")
async def cancel_download(task_id: str, transfers: TransferService = Depends(get_transfer_service)):
    cancelled = transfers.cancel(task_id)
    return {
        "success": cancelled,
        "message": "Download cancelled" if cancelled else "Download could not be cancelled",
    }


@router.delete("/download/task/{task_id}")
async def delete_download_task(task_id: str, transfers: TransferService = Depends(get_transfer_service)):
    deleted = transfers.delete(task_id)
    return {
        "success": deleted,
        "message": "Task deleted" if deleted else "Task not found",
    }


@router.get("/download/local")
def serve_local_file(filePath: str):
    """Send a local file to the client as an attachment."""
    path = Path(filePath)
    if not path.is_file():
        raise HTTPException(status_code=404, detail=f"File not found: {filePath}")

    mime_type, _ = mimetypes.guess_type(path.name)
    return FileResponse(
        path=str(path),
        filename=path.name,
        media_type=mime_type or "application/octet-stream",
    )


# ── System ────────────────────────────────────────────────────────────

@router.get("/system/info")
async def get_system_info(transfers: TransferService = Depends(get_transfer_service)):
    return system_info(transfers)
