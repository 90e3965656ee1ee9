"""Concurrent preview image downloads with content-type validation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import Executor, Future

from .transport import DataTask, Transport

logger = logging.getLogger("ogpreview.image_downloader")

ACCEPTED_CONTENT_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/gif"})


def content_type(headers: Mapping[str, str] | None) -> str | None:
    """Return the Content-Type header value, matching the header name in any case."""
    if not headers:
        return None
    for name, value in headers.items():
        if name.lower() == "content-type":
            return value
    return None


def is_accepted_content_type(headers: Mapping[str, str] | None) -> bool:
    # Exact match only: "image/png; charset=binary" is rejected.
    value = content_type(headers)
    return value is not None and value.strip().lower() in ACCEPTED_CONTENT_TYPES


class ImageDownloader:
    """Fetch images through a transport and deliver validated bytes.

    ``worker_queue`` is where each data task is created and resumed;
    ``results_queue`` is where every completion runs. Both are plain
    ``concurrent.futures`` executors, and either may be an
    :class:`~ogpreview.queues.ImmediateExecutor`. A completion receives the
    body bytes, or ``None`` when the transfer failed, was cancelled, or did
    not declare an accepted image content type.
    """

    def __init__(self, transport: Transport, results_queue: Executor, worker_queue: Executor) -> None:
        self.transport = transport
        self.results_queue = results_queue
        self.worker_queue = worker_queue

    def download_image(self, url: str, completion: Callable[[bytes | None], None]) -> Future:
        """Start one download; the returned future resolves to its data task.

        The future resolves to None when the transport could not start the
        transfer; ``completion`` still runs once, with None.
        """
        return self.worker_queue.submit(self._start_task, url, completion)

    def download_images(
        self, urls: Iterable[str], completion: Callable[[str, bytes | None], None]
    ) -> list[Future]:
        """Start one download per URL at once; ``completion(url, data)`` runs once per URL."""
        return [
            self.download_image(url, lambda data, url=url: completion(url, data))
            for url in urls
        ]

    def _start_task(self, url: str, completion: Callable[[bytes | None], None]) -> DataTask | None:
        lock = threading.Lock()
        delivered = False

        def deliver(data: bytes | None) -> None:
            nonlocal delivered
            with lock:
                if delivered:
                    return
                delivered = True
            self.results_queue.submit(completion, data)

        def handle(content: bytes | None, headers: Mapping[str, str] | None, error: BaseException | None) -> None:
            deliver(self._validated(url, content, headers, error))

        try:
            task = self.transport.data_task(url, handle)
            task.resume()
        except Exception:
            logger.warning("Could not start download of %s", url, exc_info=True)
            deliver(None)
            return None
        return task

    def _validated(
        self,
        url: str,
        content: bytes | None,
        headers: Mapping[str, str] | None,
        error: BaseException | None,
    ) -> bytes | None:
        if error is not None:
            logger.info("Failed to fetch image %s: %s", url, error)
            return None
        if content is None:
            return None
        if not is_accepted_content_type(headers):
            logger.info(
                "Skipping %s: unsupported image type (Content-Type=%s)",
                url,
                content_type(headers),
            )
            return None
        return content
