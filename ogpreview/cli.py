"""Command-line entry point: print the link preview for a URL.

Usage:
    ogpreview https://example.com/article
    ogpreview https://example.com/article --offset 12 --extended --images previews/
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

import httpx

from .config import Settings, get_settings
from .image_downloader import ImageDownloader
from .link_preview import fetch_link_preview
from .queues import ImmediateExecutor
from .resolver import DEFAULT_RULES, EXTENDED_RULES
from .schemas import link_preview_adapter
from .transport import BackgroundLoop, HttpxTransport

logger = logging.getLogger("ogpreview.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Build an OpenGraph link preview for a URL")
    parser.add_argument("url", help="Page to preview")
    parser.add_argument(
        "--offset",
        type=int,
        default=0,
        help="Character offset of the link in the text it came from",
    )
    parser.add_argument(
        "--extended",
        action="store_true",
        help="Also produce Foursquare location and Instagram picture previews",
    )
    parser.add_argument(
        "--images",
        type=Path,
        default=None,
        help="Download the preview's images into this directory",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def _image_filename(index: int, url: str) -> str:
    suffix = PurePosixPath(urlparse(url).path).suffix.lower()
    if suffix not in {".jpg", ".jpeg", ".png", ".gif"}:
        suffix = ".img"
    return f"image-{index:02d}{suffix}"


def download_preview_images(urls: Sequence[str], output_dir: Path, settings: Settings) -> int:
    """Download images concurrently and save the accepted ones. Returns how many were saved."""
    urls = list(dict.fromkeys(urls))
    if not urls:
        return 0
    output_dir.mkdir(parents=True, exist_ok=True)

    results: dict[str, Future] = {url: Future() for url in urls}
    with BackgroundLoop() as background:
        client = httpx.AsyncClient(timeout=settings.request_timeout)
        transport = HttpxTransport(
            client,
            background.loop,
            user_agent=settings.user_agent,
            follow_redirects=settings.follow_redirects,
        )
        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="ogpreview-results") as results_queue:
            downloader = ImageDownloader(transport, results_queue=results_queue, worker_queue=ImmediateExecutor())
            downloader.download_images(urls, lambda url, data: results[url].set_result(data))
            wait(list(results.values()))
        background.run(client.aclose())

    saved = 0
    for index, url in enumerate(urls, start=1):
        data = results[url].result()
        if data is None:
            print(f"  ✗ Skipped {url}")
            continue
        destination = output_dir / _image_filename(index, url)
        try:
            destination.write_bytes(data)
        except OSError as exc:
            logger.warning("Failed to write image %s: %s", destination, exc)
            continue
        print(f"  ✓ Saved {destination}")
        saved += 1
    return saved


async def _fetch_preview(args: argparse.Namespace, settings: Settings):
    rules = EXTENDED_RULES if args.extended else DEFAULT_RULES
    async with httpx.AsyncClient() as client:
        return await fetch_link_preview(
            args.url, client, offset=args.offset, rules=rules, settings=settings
        )


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    preview = asyncio.run(_fetch_preview(args, settings))
    if preview is None:
        print(f"No link preview available for {args.url}", file=sys.stderr)
        return 1

    print(link_preview_adapter.dump_json(preview, indent=2).decode("utf-8"))

    if args.images is not None:
        saved = download_preview_images(preview.image_urls, args.images, settings)
        print(f"Saved {saved} of {len(preview.image_urls)} images to {args.images}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
