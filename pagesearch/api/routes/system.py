from __future__ import annotations

import os
import platform
import time
from datetime import datetime, timezone

from fastapi import APIRouter

from pagesearch import __version__
from pagesearch.config import settings

router = APIRouter(prefix="/api", tags=["system"])

STARTED_AT = datetime.now(timezone.utc)
_started_monotonic = time.monotonic()


def format_uptime(seconds: float) -> str:
    seconds = int(seconds)
    days, rest = divmod(seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)
    parts = [
        f"{value}{unit}"
        for value, unit in ((days, "d"), (hours, "h"), (minutes, "m"), (secs, "s"))
        if value > 0
    ]
    return " ".join(parts) or "0s"


@router.get("/info")
async def info():
    return {
        "success": True,
        "data": {
            "name": "pagesearch",
            "version": __version__,
            "description": "Intelligent search over a Notion workspace with cited answers",
            "startTime": STARTED_AT.isoformat(),
            "endpoints": {
                "search": "POST /api/search",
                "progress": "GET /api/search/progress/{request_id}",
                "notionSearch": "GET /api/notion/search",
                "page": "GET /api/notion/page/{page_id}",
                "database": "GET /api/notion/database/{database_id}",
            },
            "features": [
                "Keyword extraction",
                "Notion page search",
                "Page reranking",
                "Page content reading",
                "Database queries",
                "Cited answers",
                "Live progress stream",
            ],
        },
    }


@router.get("/status")
async def status():
    uptime = time.monotonic() - _started_monotonic
    return {
        "success": True,
        "data": {
            "system": {
                "platform": platform.system().lower(),
                "arch": platform.machine(),
                "pythonVersion": platform.python_version(),
                "pid": os.getpid(),
            },
            "performance": {
                "uptime": format_uptime(uptime),
                "uptimeSeconds": int(uptime),
            },
            "environment": {
                "logLevel": settings.app_log_level,
                "hasNotionKey": bool(settings.notion_api_key),
                "hasOpenRouterKey": bool(settings.openrouter_api_key),
            },
        },
    }
