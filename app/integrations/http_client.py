"""
Pooled aiohttp session shared by the detector fan-out and the image downloader.

The session is opened in the FastAPI lifespan and closed on shutdown. One
verification fans out to every HTTP provider at once, so the connector limit
(HTTP_POOL_LIMIT) caps how many provider calls can be in flight service-wide.

Usage:
    async with http_client.request_session() as sess:
        async with sess.post(url, json=payload) as response:
            ...

Outside the lifespan (tests, scripts) `request_session` opens a throwaway
session for the duration of the block.
"""

import logging
from contextlib import asynccontextmanager

import aiohttp

from app.config import settings

logger = logging.getLogger(__name__)

session: aiohttp.ClientSession | None = None


def _new_session() -> aiohttp.ClientSession:
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=settings.http_timeout_sec),
        connector=aiohttp.TCPConnector(limit=settings.http_pool_limit),
        headers={"User-Agent": settings.http_user_agent},
    )


def is_open() -> bool:
    return session is not None and not session.closed


async def initialize() -> None:
    global session
    if is_open():
        return
    session = _new_session()
    logger.info(f"[HTTP] Shared session opened (pool={settings.http_pool_limit}, timeout={settings.http_timeout_sec}s)")


async def close() -> None:
    global session
    if is_open():
        await session.close()
        logger.info("[HTTP] Shared session closed")
    session = None


@asynccontextmanager
async def request_session():
    """Yields the shared session, or a temporary one closed on exit."""
    if is_open():
        yield session
        return

    temporary = _new_session()
    try:
        yield temporary
    finally:
        await temporary.close()
