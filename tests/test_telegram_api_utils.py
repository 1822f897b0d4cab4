from unittest.mock import AsyncMock

import pytest
from aiogram.exceptions import TelegramBadRequest, TelegramForbiddenError, TelegramRetryAfter

from duckwheel.telegram.api_utils import deliver, reply


class DummyForbidden(TelegramForbiddenError):
    def __init__(self) -> None:
        Exception.__init__(self, "forbidden")


class DummyBadRequest(TelegramBadRequest):
    def __init__(self, message: str) -> None:
        Exception.__init__(self, message)
        self.message = message


class DummyRetryAfter(TelegramRetryAfter):
    def __init__(self, retry_after: float) -> None:
        Exception.__init__(self, f"retry after {retry_after}")
        self.retry_after = retry_after


@pytest.mark.asyncio()
async def test_deliver_returns_result():
    async def ok() -> int:
        return 42

    assert await deliver("test", ok) == 42


@pytest.mark.asyncio()
async def test_deliver_handles_forbidden_and_bad_request():
    async def forbidden() -> None:
        raise DummyForbidden()

    async def unchanged() -> None:
        raise DummyBadRequest("Bad Request: message is not modified")

    assert await deliver("forbidden", forbidden) is None
    assert await deliver("unchanged", unchanged) is None


@pytest.mark.asyncio()
async def test_deliver_retries_on_retry_after(monkeypatch):
    mock_call = AsyncMock(side_effect=[DummyRetryAfter(0.0), 7])

    async def fake_sleep(delay: float) -> None:
        assert delay >= 0.0

    monkeypatch.setattr("duckwheel.telegram.api_utils.asyncio.sleep", fake_sleep)

    assert await deliver("retry", mock_call, retries=2) == 7
    assert mock_call.await_count == 2


@pytest.mark.asyncio()
async def test_deliver_gives_up_after_retries(monkeypatch):
    mock_call = AsyncMock(side_effect=DummyRetryAfter(0.0))
    monkeypatch.setattr("duckwheel.telegram.api_utils.asyncio.sleep", AsyncMock())

    assert await deliver("retry", mock_call, retries=3) is None
    assert mock_call.await_count == 3


@pytest.mark.asyncio()
async def test_reply_without_message():
    assert await reply(None, "hello") is False
