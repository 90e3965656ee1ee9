"""OpenGraph meta tag scanner.

Reads the ``<meta>`` tags of a page's head and turns the recognised OpenGraph
properties into a :class:`~ogpreview.schemas.PageDescription`. This is not a
DOM parse: everything after the first ``</head>`` is ignored and only meta
tags are looked at.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from urllib.parse import urljoin

from bs4 import BeautifulSoup, SoupStrainer

from .schemas import OpenGraphProperty, PageDescription, PropertyMapping

logger = logging.getLogger("ogpreview.scanner")

_HEAD_END = re.compile(r"</head\s*>", re.IGNORECASE)
_DANGLING_TAG = re.compile(r"<[A-Za-z][^<>]*\Z")

ScanCompletion = Callable[[PageDescription | None], None]


def _head_section(markup: str) -> str:
    match = _HEAD_END.search(markup)
    head = markup[: match.start()] if match else markup
    # html.parser drops a start tag left open at the end of its input.
    dangling = _DANGLING_TAG.search(head)
    if dangling:
        head += '">' if dangling.group().count('"') % 2 else ">"
    return head


def _image_url(url: str, content: str) -> str | None:
    try:
        return urljoin(url, content)
    except ValueError:
        logger.debug("Ignoring unparseable og:image %r on %s", content, url)
        return None


def _attribute(tag, name: str) -> str | None:
    value = tag.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        value = " ".join(value)
    return str(value).strip()


def scan_properties(markup: str, url: str) -> tuple[PropertyMapping, list[str]]:
    """Collect OpenGraph properties and image URLs from the markup.

    The first occurrence of a property wins. Every ``og:image`` is kept in
    document order, resolved against ``url`` when relative.
    """
    mapping: PropertyMapping = {}
    images: list[str] = []

    soup = BeautifulSoup(_head_section(markup), "html.parser", parse_only=SoupStrainer("meta"))
    for tag in soup.find_all("meta"):
        prop = OpenGraphProperty.from_markup_name(_attribute(tag, "property") or _attribute(tag, "name"))
        if prop is None:
            continue
        content = _attribute(tag, "content")
        if not content:
            continue

        if prop is OpenGraphProperty.IMAGE:
            image = _image_url(url, content)
            if image is not None:
                images.append(image)
        elif prop not in mapping:
            mapping[prop] = content
        else:
            logger.debug("Ignoring duplicate %s on %s", prop.value, url)

    return mapping, images


class OpenGraphScanner:
    """Scan markup once and hand the resulting description to ``completion``.

    ``completion`` is called exactly once per :meth:`parse`, with ``None`` when
    the page lacks a title or url or the markup could not be read.
    """

    def __init__(self, markup: str, url: str, completion: ScanCompletion) -> None:
        self.markup = markup
        self.url = url
        self.completion = completion

    def parse(self) -> None:
        try:
            mapping, images = scan_properties(self.markup, self.url)
            description = PageDescription.from_property_mapping(mapping, images)
        except Exception:
            logger.warning("Failed to scan OpenGraph data for %s", self.url, exc_info=True)
            description = None

        if description is None:
            logger.debug("No OpenGraph description for %s", self.url)
        self.completion(description)


def scan_page_description(markup: str, url: str) -> PageDescription | None:
    result: list[PageDescription | None] = []
    OpenGraphScanner(markup, url, result.append).parse()
    return result[0]
