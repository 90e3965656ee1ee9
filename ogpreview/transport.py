"""Network transport for image downloads.

A transport hands out data tasks: one per URL, started with ``resume()`` and
stoppable with ``cancel()``. Each resumed task reports back exactly once
through its completion with ``(content, headers, error)``.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Coroutine, Mapping
from concurrent.futures import Future
from typing import Any, Protocol, TypeVar

import httpx

logger = logging.getLogger("ogpreview.transport")

T = TypeVar("T")

Completion = Callable[[bytes | None, Mapping[str, str] | None, BaseException | None], None]


class TransferCancelled(RuntimeError):
    """Error handed to a completion when its task was cancelled."""


class DataTask(Protocol):
    def resume(self) -> None: ...

    def cancel(self) -> None: ...


class Transport(Protocol):
    def data_task(self, url: str, completion: Completion) -> DataTask: ...


class HttpxDataTask:
    """A single GET scheduled on the transport's event loop."""

    def __init__(self, transport: HttpxTransport, url: str, completion: Completion) -> None:
        self.url = url
        self._transport = transport
        self._completion = completion
        self._future: Future | None = None
        self._finished = False
        self._cancelled = False
        self._lock = threading.Lock()

    def resume(self) -> None:
        with self._lock:
            if self._future is not None or self._cancelled:
                return
            coro = self._transport.fetch(self.url)
            try:
                self._future = asyncio.run_coroutine_threadsafe(coro, self._transport.loop)
            except RuntimeError as exc:
                coro.close()
                logger.warning("Could not schedule download of %s: %s", self.url, exc)
                error: BaseException | None = exc
            else:
                error = None
        if error is not None:
            self._finish(None, None, error)
            return
        self._future.add_done_callback(self._on_done)

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
            future = self._future
        if future is None:
            self._finish(None, None, TransferCancelled(self.url))
        else:
            future.cancel()

    def _on_done(self, future: Future) -> None:
        if future.cancelled():
            self._finish(None, None, TransferCancelled(self.url))
            return
        error = future.exception()
        if error is not None:
            self._finish(None, None, error)
            return
        content, headers = future.result()
        self._finish(content, headers, None)

    def _finish(
        self,
        content: bytes | None,
        headers: Mapping[str, str] | None,
        error: BaseException | None,
    ) -> None:
        with self._lock:
            if self._finished:
                return
            self._finished = True
        self._completion(content, headers, error)


class HttpxTransport:
    """Run data tasks with an ``httpx.AsyncClient`` on a given event loop.

    The loop may live on another thread (see :class:`BackgroundLoop`); tasks
    are handed to it with ``run_coroutine_threadsafe``. There is no limit on
    how many tasks run at once beyond what the client allows.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        loop: asyncio.AbstractEventLoop,
        *,
        user_agent: str | None = None,
        follow_redirects: bool = True,
    ) -> None:
        self.client = client
        self.loop = loop
        self.follow_redirects = follow_redirects
        self._headers = {"User-Agent": user_agent} if user_agent else {}

    async def fetch(self, url: str) -> tuple[bytes, httpx.Headers]:
        response = await self.client.get(
            url, headers=self._headers, follow_redirects=self.follow_redirects
        )
        return response.content, response.headers

    def data_task(self, url: str, completion: Completion) -> HttpxDataTask:
        return HttpxDataTask(self, url, completion)


class BackgroundLoop:
    """An asyncio event loop running on its own daemon thread."""

    def __init__(self, name: str = "ogpreview-transport") -> None:
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def _run(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def start(self) -> BackgroundLoop:
        self._thread.start()
        return self

    def run(self, coro: Coroutine[Any, Any, T], timeout: float | None = None) -> T:
        """Run a coroutine on the loop and block until it finishes."""
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result(timeout)

    def stop(self) -> None:
        if self._thread.is_alive():
            self.loop.call_soon_threadsafe(self.loop.stop)
            self._thread.join()
        self.loop.close()

    def __enter__(self) -> BackgroundLoop:
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.stop()
