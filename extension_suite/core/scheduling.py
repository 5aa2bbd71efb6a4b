import concurrent.futures
import logging
from typing import Callable, Optional, TypeVar

from reactivex import abc

logger = logging.getLogger(__name__)

T = TypeVar("T")


def schedule(scheduler: abc.SchedulerBase, work: Callable[[], T]) -> "concurrent.futures.Future[T]":
    """
    Run ``work`` on ``scheduler`` and hand back a Future for its result.

    The Future resolves with the return value of ``work`` or carries the
    exception it raised. Use ``asyncio.wrap_future`` to await it from a
    coroutine.
    """
    future: "concurrent.futures.Future[T]" = concurrent.futures.Future()

    def action(_: abc.SchedulerBase, __: Optional[object] = None) -> None:
        if not future.set_running_or_notify_cancel():
            logger.debug(f"Scheduled work {getattr(work, '__name__', work)!r} was cancelled before it ran")
            return
        try:
            future.set_result(work())
        except Exception as e:
            logger.debug(f"Scheduled work raised {e!r}")
            future.set_exception(e)

    scheduler.schedule(action)
    return future
