from __future__ import annotations

from typing import Any

import httpx

from pagesearch.config import settings
from pagesearch.models.pages import PageRef

UNTITLED = "Untitled"


def rich_text_to_plain(rich_text: Any) -> str:
    if not isinstance(rich_text, list):
        return ""
    return "".join(str(item.get("plain_text", "")) for item in rich_text if isinstance(item, dict))


def page_title(page: dict[str, Any]) -> str:
    """Plain text of the page's `title` property."""
    properties = page.get("properties") or {}
    for prop in properties.values():
        if isinstance(prop, dict) and prop.get("type") == "title":
            return rich_text_to_plain(prop.get("title"))
    return UNTITLED


def page_ref_from_payload(page: dict[str, Any]) -> PageRef:
    return PageRef(
        id=str(page.get("id", "")),
        title=page_title(page),
        url=page.get("url", "") or "",
        created_time=page.get("created_time", "") or "",
        last_edited_time=page.get("last_edited_time", "") or "",
    )


def _block_text(block: dict[str, Any]) -> str:
    btype = block.get("type")
    body = block.get(btype) if isinstance(btype, str) else None
    if not isinstance(body, dict):
        body = {}
    text = rich_text_to_plain(body.get("rich_text"))

    if btype == "paragraph":
        return f"{text}\n\n"
    if btype == "heading_1":
        return f"# {text}\n\n"
    if btype == "heading_2":
        return f"## {text}\n\n"
    if btype == "heading_3":
        return f"### {text}\n\n"
    if btype == "bulleted_list_item":
        return f"• {text}\n"
    if btype == "numbered_list_item":
        return f"1. {text}\n"
    if btype == "to_do":
        checked = "[✓]" if body.get("checked") else "[ ]"
        return f"{checked} {text}\n"
    if btype == "quote":
        return f"> {text}\n\n"
    if btype == "code":
        language = body.get("language") or ""
        return f"```{language}\n{text}\n```\n\n"
    if btype == "divider":
        return "---\n\n"
    return ""


def blocks_to_text(blocks: list[dict[str, Any]]) -> str:
    """Render Notion blocks as markdown-ish plain text. Unknown block types are skipped."""
    return "".join(_block_text(block) for block in blocks if isinstance(block, dict)).strip()


def clean_notion_id(raw_id: str) -> str:
    """Accept a bare id, a dashed uuid or a full page URL."""
    return raw_id.rsplit("/", 1)[-1].replace("-", "")


def notion_error_code(exc: Exception) -> str | None:
    """The `code` field of a Notion error response (e.g. `object_not_found`)."""
    if not isinstance(exc, httpx.HTTPStatusError):
        return None
    try:
        payload = exc.response.json()
    except ValueError:
        return None
    if isinstance(payload, dict) and isinstance(payload.get("code"), str):
        return payload["code"]
    return None


class NotionClient:
    """Page search, metadata and content over the Notion REST API."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        notion_version: str | None = None,
        timeout: float | None = None,
        page_size: int | None = None,
    ):
        self.api_key = settings.notion_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.notion_base_url).rstrip("/")
        self.notion_version = notion_version or settings.notion_version
        self.timeout = float(timeout or settings.notion_timeout_seconds)
        self.page_size = max(min(int(page_size or settings.notion_page_size), 100), 1)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Notion-Version": self.notion_version,
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        if not self.api_key:
            raise RuntimeError("NOTION_API_KEY is not configured")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.request(
                method,
                f"{self.base_url}{path}",
                json=json,
                params=params,
                headers=self._headers(),
            )
            response.raise_for_status()
            payload = response.json()

        if not isinstance(payload, dict):
            raise ValueError(f"Unexpected Notion response for {path}")
        return payload

    async def search(self, query: str) -> list[PageRef]:
        payload = await self._request(
            "POST",
            "/search",
            json={
                "query": query,
                "filter": {"value": "page", "property": "object"},
            },
        )
        return [
            page_ref_from_payload(page)
            for page in payload.get("results", [])
            if isinstance(page, dict) and page.get("id")
        ]

    async def get_page_info(self, page_id: str) -> PageRef:
        payload = await self._request("GET", f"/pages/{page_id}")
        return page_ref_from_payload(payload)

    async def get_page_content(self, page_id: str) -> str:
        payload = await self._request(
            "GET",
            f"/blocks/{page_id}/children",
            params={"page_size": self.page_size},
        )
        return blocks_to_text(payload.get("results", []))

    async def query_database(
        self, database_id: str, filter: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        body: dict[str, Any] = {"page_size": self.page_size}
        if filter:
            body["filter"] = filter
        payload = await self._request("POST", f"/databases/{database_id}/query", json=body)
        return [record for record in payload.get("results", []) if isinstance(record, dict)]


_client: NotionClient | None = None


def client() -> NotionClient:
    """Get or create the shared Notion client."""
    global _client
    if _client is None:
        _client = NotionClient()
    return _client
