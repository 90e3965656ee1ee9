"""Pick and build the link preview variant that fits a page description."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import NamedTuple
from urllib.parse import urlsplit

from .schemas import (
    Article,
    LinkPreview,
    LocationPreview,
    MediaPicturePreview,
    OpenGraphType,
    PageDescription,
    SiteName,
    SocialStatus,
)

TWITTER_TITLE_SUFFIX = " on Twitter"


class PreviewRule(NamedTuple):
    name: str
    predicate: Callable[[PageDescription], bool]
    builder: Callable[[PageDescription, str, int], LinkPreview]


def _parses_as_url(value: str) -> bool:
    if not value or any(char.isspace() for char in value):
        return False
    try:
        urlsplit(value)
    except ValueError:
        return False
    return True


def _image_urls(description: PageDescription) -> tuple[str, ...]:
    return tuple(url for url in description.image_urls if _parses_as_url(url))


def _first_image(description: PageDescription) -> tuple[str, ...]:
    return _image_urls(description)[:1]


def is_social_status(description: PageDescription) -> bool:
    return description.type == OpenGraphType.ARTICLE.value and description.site_name is SiteName.TWITTER


def is_location(description: PageDescription) -> bool:
    return (
        description.type == OpenGraphType.FOURSQUARE_VENUE.value
        and description.site_name is SiteName.FOURSQUARE
    )


def is_media_picture(description: PageDescription) -> bool:
    return (
        description.type == OpenGraphType.INSTAGRAM_PHOTO.value
        and description.site_name is SiteName.INSTAGRAM
    )


def strip_twitter_suffix(title: str) -> str:
    """Turn "Someone on Twitter" into "Someone"; other titles are returned as-is."""
    if title.endswith(TWITTER_TITLE_SUFFIX):
        return title[: -len(TWITTER_TITLE_SUFFIX)]
    return title


def build_social_status(description: PageDescription, original_url: str, offset: int) -> SocialStatus:
    # Images on status pages are only user content when the page says so;
    # otherwise they are avatars and site chrome.
    images = _image_urls(description) if description.is_user_generated_image else ()
    return SocialStatus(
        original_url=original_url,
        permanent_url=description.url,
        offset=offset,
        author=strip_twitter_suffix(description.title),
        message=description.description,
        image_urls=images,
    )


def build_location(description: PageDescription, original_url: str, offset: int) -> LocationPreview:
    coordinates = description.foursquare_coordinates
    return LocationPreview(
        original_url=original_url,
        permanent_url=description.url,
        offset=offset,
        title=description.title,
        subtitle=description.description,
        latitude=coordinates.latitude if coordinates else None,
        longitude=coordinates.longitude if coordinates else None,
        image_urls=_first_image(description),
    )


def build_media_picture(description: PageDescription, original_url: str, offset: int) -> MediaPicturePreview:
    return MediaPicturePreview(
        original_url=original_url,
        permanent_url=description.url,
        offset=offset,
        title=description.title,
        subtitle=description.description,
        image_urls=_first_image(description),
    )


def build_article(description: PageDescription, original_url: str, offset: int) -> Article:
    return Article(
        original_url=original_url,
        permanent_url=description.url,
        offset=offset,
        title=description.title,
        summary=description.description,
        image_urls=_first_image(description),
    )


SOCIAL_STATUS_RULE = PreviewRule("social_status", is_social_status, build_social_status)
LOCATION_RULE = PreviewRule("location", is_location, build_location)
MEDIA_PICTURE_RULE = PreviewRule("media_picture", is_media_picture, build_media_picture)
ARTICLE_RULE = PreviewRule("article", lambda description: True, build_article)

DEFAULT_RULES: tuple[PreviewRule, ...] = (SOCIAL_STATUS_RULE, ARTICLE_RULE)

# Opt-in: Foursquare venues and Instagram photos get their own variants.
EXTENDED_RULES: tuple[PreviewRule, ...] = (
    SOCIAL_STATUS_RULE,
    LOCATION_RULE,
    MEDIA_PICTURE_RULE,
    ARTICLE_RULE,
)


def resolve_link_preview(
    description: PageDescription,
    original_url: str,
    offset: int,
    rules: Sequence[PreviewRule] = DEFAULT_RULES,
) -> LinkPreview:
    """Build the preview of the first rule whose predicate matches, in table order.

    Raises LookupError only when a custom rule table has no fallback that matches.
    """
    for rule in rules:
        if rule.predicate(description):
            return rule.builder(description, original_url, offset)
    raise LookupError(f"No preview rule matched {description.url!r}")
