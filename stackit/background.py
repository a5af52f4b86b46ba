"""Supervised fire-and-forget tasks.

Routers hand notification fan-out to :func:`spawn` once their transaction
has committed. The module holds a strong reference to every running task
until it finishes and logs anything it raised; :func:`drain` waits for the
whole set, which shutdown and the tests rely on.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)

_pending: Set[asyncio.Task[Any]] = set()


def spawn(coro: Awaitable[Any], *, name: Optional[str] = None,
          on_error: Optional[Callable[[BaseException], None]] = None) -> asyncio.Task[Any]:
    """Schedule ``coro`` on the running loop and keep track of it.

    ``on_error`` is called with the exception if the task fails; the failure
    is logged either way.
    """
    task = asyncio.create_task(coro, name=name)  # type: ignore[arg-type]
    _pending.add(task)
    label = name or task.get_name()

    def _done(t: asyncio.Task[Any]) -> None:
        _pending.discard(t)
        if t.cancelled():
            logger.debug("task %s cancelled", label)
            return
        exc = t.exception()
        if exc is None:
            return
        if on_error is not None:
            try:
                on_error(exc)
            except Exception:  # noqa: BLE001
                logger.exception("on_error hook for task %s raised", label)
        logger.error("task %s failed", label, exc_info=exc)

    task.add_done_callback(_done)
    return task


def pending_count() -> int:
    return len(_pending)


async def drain() -> None:
    """Wait for every tracked task, including ones spawned while waiting."""
    while _pending:
        batch = list(_pending)
        await asyncio.gather(*batch, return_exceptions=True)
        # done callbacks run on the next loop iteration
        await asyncio.sleep(0)
        _pending.difference_update(t for t in batch if t.done())


__all__ = ["spawn", "drain", "pending_count"]
