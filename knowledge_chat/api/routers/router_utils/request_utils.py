"""
Request utility functions.

Source address resolution behind proxies and cancellation of in-flight work
when the caller disconnects.

Dependencies: fastapi, asyncio
System role: Chat endpoint request helpers
"""

import asyncio
import logging
from typing import Awaitable, TypeVar

from fastapi import Request

from knowledge_chat.core.exceptions import ClientDisconnectedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNKNOWN_ADDRESS = "unknown"


def get_source_address(request: Request) -> str:
    """
    Caller address: first X-Forwarded-For entry, then X-Real-IP, then the peer.

    Args:
        request: Incoming request

    Returns:
        Address string, or "unknown" when none is available
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_ADDRESS


async def run_until_disconnect(
    request: Request,
    work: Awaitable[T],
    poll_interval: float = 0.5,
) -> T:
    """
    Await work while watching for the caller to disconnect.

    The work runs as a task; if the client goes away first the task is
    cancelled, which cancels any in-flight embedding or completion call.

    Args:
        request: Incoming request
        work: Coroutine producing the response payload
        poll_interval: Seconds between disconnect checks

    Returns:
        The work's result

    Raises:
        ClientDisconnectedError: If the caller disconnected first
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info(
                    f"{__name__}:run_until_disconnect - Client disconnected, "
                    f"cancelling {request.url.path}"
                )
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                raise ClientDisconnectedError("Client disconnected before completion")
    finally:
        if not task.done():
            task.cancel()
