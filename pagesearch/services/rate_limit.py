from __future__ import annotations

import asyncio


async def pause(delay_ms: int) -> None:
    """Wait between collaborator calls to stay under the upstream API rate limit."""
    if delay_ms > 0:
        await asyncio.sleep(delay_ms / 1000)
