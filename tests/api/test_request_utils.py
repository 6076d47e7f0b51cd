"""
Tests for chat request helpers.

System role: Verification of source address resolution and disconnect handling
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from starlette.requests import Request

from knowledge_chat.api.routers.router_utils import get_source_address, run_until_disconnect
from knowledge_chat.core.exceptions import ClientDisconnectedError


def make_request(headers: dict[str, str] | None = None, client=("10.1.1.1", 5555)) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/v1/chat/completions",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestGetSourceAddress:
    """Test suite for get_source_address."""

    def test_first_forwarded_for_entry_wins(self) -> None:
        request = make_request(
            {"X-Forwarded-For": " 198.51.100.4 , 10.0.0.1", "X-Real-IP": "192.0.2.1"}
        )

        assert get_source_address(request) == "198.51.100.4"

    def test_real_ip_when_no_forwarded_for(self) -> None:
        assert get_source_address(make_request({"X-Real-IP": "192.0.2.1"})) == "192.0.2.1"

    def test_peer_address(self) -> None:
        assert get_source_address(make_request()) == "10.1.1.1"

    def test_unknown_without_any_source(self) -> None:
        assert get_source_address(make_request(client=None)) == "unknown"


class TestRunUntilDisconnect:
    """Test suite for run_until_disconnect."""

    @pytest.mark.asyncio
    async def test_returns_result_when_connected(self) -> None:
        request = SimpleNamespace(is_disconnected=AsyncMock(return_value=False))

        async def work():
            await asyncio.sleep(0.02)
            return "reply"

        assert await run_until_disconnect(request, work(), poll_interval=0.01) == "reply"

    @pytest.mark.asyncio
    async def test_cancels_work_on_disconnect(self) -> None:
        request = SimpleNamespace(
            is_disconnected=AsyncMock(return_value=True),
            url=SimpleNamespace(path="/api/v1/chat/completions"),
        )
        cancelled = asyncio.Event()

        async def work():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        with pytest.raises(ClientDisconnectedError) as exc_info:
            await run_until_disconnect(request, work(), poll_interval=0.01)

        assert cancelled.is_set()
        assert exc_info.value.status_code == 499

    @pytest.mark.asyncio
    async def test_work_errors_propagate(self) -> None:
        request = SimpleNamespace(is_disconnected=AsyncMock(return_value=False))

        async def work():
            raise ValueError("bad")

        with pytest.raises(ValueError):
            await run_until_disconnect(request, work(), poll_interval=0.01)
