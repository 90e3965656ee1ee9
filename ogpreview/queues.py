"""Executors used as issue/delivery contexts for the image downloader."""

from __future__ import annotations

import threading
from concurrent.futures import Executor, Future


class ImmediateExecutor(Executor):
    """Run each submitted callable right away, in the submitting thread.

    Useful when completions should be delivered on whatever thread the
    transport completes on, or in tests.
    """

    def __init__(self) -> None:
        self._shutdown = False
        self._lock = threading.Lock()

    def submit(self, fn, /, *args, **kwargs) -> Future:
        with self._lock:
            if self._shutdown:
                raise RuntimeError("cannot schedule new futures after shutdown")

        future: Future = Future()
        if not future.set_running_or_notify_cancel():
            return future
        try:
            result = fn(*args, **kwargs)
        except BaseException as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)
        return future

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        with self._lock:
            self._shutdown = True
