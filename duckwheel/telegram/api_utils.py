"""Wrappers around Telegram Bot API calls that tolerate expected failures."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from aiogram.exceptions import (
    TelegramAPIError,
    TelegramBadRequest,
    TelegramForbiddenError,
    TelegramRetryAfter,
)
from aiogram.types import CallbackQuery, Message

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def deliver(label: str, call: Callable[[], Awaitable[T]], *, retries: int = 3) -> T | None:
    """Run ``call`` and return its result, or ``None`` if Telegram refused it.

    Flood-control responses are retried after the delay Telegram asks for.
    """
    for attempt in range(1, retries + 1):
        try:
            return await call()
        except TelegramRetryAfter as exc:
            if attempt == retries:
                logger.warning("Giving up on '%s' after %s rate-limited attempts", label, attempt)
                return None
            logger.info("'%s' rate limited, retrying in %s s", label, exc.retry_after)
            await asyncio.sleep(float(exc.retry_after or 1))
        except TelegramForbiddenError:
            logger.info("'%s' forbidden, the user probably blocked the bot", label)
            return None
        except TelegramBadRequest as exc:
            if "message is not modified" in str(exc).lower():
                logger.debug("'%s' skipped, message unchanged", label)
            else:
                logger.warning("'%s' rejected: %s", label, exc)
            return None
        except TelegramAPIError:
            logger.exception("'%s' failed", label)
            return None
    return None


async def reply(message: Message | None, text: str, **kwargs) -> bool:
    if not message:
        return False
    return await deliver("message.answer", lambda: message.answer(text, **kwargs)) is not None


async def edit(message: Message | None, text: str, **kwargs) -> bool:
    """Replace the text of a bot message, e.g. the result under a keyboard."""
    if not message:
        return False
    return await deliver("message.edit_text", lambda: message.edit_text(text, **kwargs)) is not None


async def acknowledge(callback: CallbackQuery | None, text: str | None = None, **kwargs) -> bool:
    if not callback:
        return False
    if text is not None:
        kwargs["text"] = text
    return await deliver("callback.answer", lambda: callback.answer(**kwargs)) is not None
