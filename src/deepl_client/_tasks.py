"""Spawn and await units of work.

'why': express multi-step operations as short pipelines of dependent tasks
"""
from __future__ import annotations

import asyncio
import threading
from collections.abc import Awaitable, Callable, Coroutine, Generator
from typing import Any, Generic, TypeVar


T = TypeVar("T")


class AsyncTask(Generic[T]):
    """Handle to a spawned unit of work.

    Awaiting the handle suspends the caller until the work finishes and returns its
    result, or re-raises its exception unchanged. The result is handed out once.
    """

    def __init__(self, task: asyncio.Task[T]) -> None:
        self._task: asyncio.Task[T] = task
        self._consumed: bool = False

    def done(self) -> bool:
        return self._task.done()

    async def result(self) -> T:
        if self._consumed:
            raise RuntimeError("task result already consumed")
        self._consumed = True
        return await self._task

    def __await__(self) -> Generator[Any, None, T]:
        return self.result().__await__()


def spawn(fn: Callable[[], Awaitable[T]]) -> AsyncTask[T]:
    """Start `fn` on the running event loop and return its handle."""

    async def _run() -> T:
        return await fn()

    return AsyncTask(asyncio.create_task(_run()))


class LoopThread:
    """Private event loop running in a daemon thread.

    Blocking calls are submitted to this one loop, so connections pooled by a
    long-lived transport stay bound to the loop that opened them. Started on
    first use; `close` stops the loop and joins the thread.
    """

    def __init__(self, name: str = "deepl-client-loop") -> None:
        self._name: str = name
        self._lock: threading.Lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None

    def run_sync(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run `coro` on the private loop and block until it finishes.

        Raises RuntimeError when called from inside a running event loop; use the
        `_async` variant there instead.
        """

        if _in_running_loop():
            coro.close()
            raise RuntimeError("blocking call made inside a running event loop; await the _async variant instead")
        loop = self._started_loop()
        return asyncio.run_coroutine_threadsafe(coro, loop).result()

    def close(self) -> None:
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop, self._thread = None, None
        if loop is None or thread is None:
            return
        _ = loop.call_soon_threadsafe(loop.stop)
        thread.join()
        loop.close()

    def _started_loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(target=_serve_forever, args=(loop,), name=self._name, daemon=True)
                thread.start()
                self._loop, self._thread = loop, thread
            return self._loop


def _serve_forever(loop: asyncio.AbstractEventLoop) -> None:
    asyncio.set_event_loop(loop)
    loop.run_forever()


def _in_running_loop() -> bool:
    try:
        _ = asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True
