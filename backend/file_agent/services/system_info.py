import time

import psutil

from file_agent.core.formatting import format_size
from file_agent.services.file_transfer import TransferService


def memory_snapshot() -> dict:
    """
    Memory figures for this process in bytes.

    `used` is the process resident set size; `total` and `free` are the host's
    physical and available memory, so `usagePercent` is the share of host
    memory this process holds.
    """
    host = psutil.virtual_memory()
    used = psutil.Process().memory_info().rss
    total = host.total
    return {
        "total": total,
        "used": used,
        "free": host.available,
        "usagePercent": round(used / total * 100, 1) if total else 0.0,
    }


def transfer_counts(transfers: TransferService) -> dict:
    tasks = transfers.list_tasks()
    return {
        "activeTasks": transfers.active_count(),
        "totalTasks": len(tasks),
    }


def system_info(transfers: TransferService) -> dict:
    """System status with human-readable memory figures, as served by the REST API."""
    memory = memory_snapshot()
    return {
        "memory": {
            "total": format_size(memory["total"]),
            "used": format_size(memory["used"]),
            "free": format_size(memory["free"]),
            "usagePercent": f"{memory['usagePercent']:.1f}%",
        },
        "downloads": transfer_counts(transfers),
        "timestamp": int(time.time() * 1000),
    }
