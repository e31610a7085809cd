from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from pagesearch.services import logger as log_service
from pagesearch.tools import notion_client
from pagesearch.tools.notion_client import (
    NotionClient,
    clean_notion_id,
    notion_error_code,
    page_ref_from_payload,
)

router = APIRouter(prefix="/api/notion", tags=["notion"])


def get_notion_client() -> NotionClient:
    return notion_client.client()


def _is_not_found(exc: Exception) -> bool:
    if notion_error_code(exc) == "object_not_found":
        return True
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code == 404


def _failure(
    exc: Exception, *, event_type: str, error: str, not_found: str | None = None
) -> JSONResponse:
    log_service.log_event(
        event_type=event_type,
        message=error,
        level=logging.ERROR,
        error=str(exc),
    )
    if not_found and _is_not_found(exc):
        return JSONResponse(status_code=404, content={"success": False, "error": not_found})
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": error, "details": str(exc)},
    )


@router.get("/search")
async def search_pages(q: str = "", limit: int = Query(default=10, ge=1)):
    """Search workspace pages by title and text."""
    query = q.strip()
    if not query:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Query parameter q is required"},
        )

    try:
        pages = await get_notion_client().search(query)
    except Exception as e:
        return _failure(
            e,
            event_type="notion_search_failed",
            error="Notion search failed",
        )

    returned = pages[:limit]
    return {
        "success": True,
        "data": {
            "query": query,
            "results": [page.to_dict() for page in returned],
            "total": len(pages),
            "returned": len(returned),
        },
    }


@router.get("/page/{page_id:path}")
async def get_page(page_id: str):
    """One page's metadata and rendered content."""
    clean_id = clean_notion_id(page_id)
    client = get_notion_client()
    try:
        info, content = await asyncio.gather(
            client.get_page_info(clean_id),
            client.get_page_content(clean_id),
        )
    except Exception as e:
        return _failure(
            e,
            event_type="notion_page_failed",
            error="Failed to read page",
            not_found="Page not found",
        )

    return {
        "success": True,
        "data": {
            "page": info.to_dict(),
            "content": content,
            "contentLength": len(content),
        },
    }


@router.get("/database/{database_id:path}")
async def query_database(database_id: str, limit: int = Query(default=20, ge=1)):
    """Records of a Notion database with their raw properties."""
    clean_id = clean_notion_id(database_id)
    try:
        records = await get_notion_client().query_database(clean_id)
    except Exception as e:
        return _failure(
            e,
            event_type="notion_database_failed",
            error="Failed to query database",
            not_found="Database not found",
        )

    returned = records[:limit]
    rows: list[dict[str, Any]] = []
    for record in returned:
        row = page_ref_from_payload(record).to_dict()
        row["properties"] = record.get("properties") or {}
        rows.append(row)
    return {
        "success": True,
        "data": {
            "databaseId": clean_id,
            "records": rows,
            "total": len(records),
            "returned": len(returned),
        },
    }
