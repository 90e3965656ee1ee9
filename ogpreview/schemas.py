"""OpenGraph page descriptions and the link preview variants built from them."""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator


class OpenGraphProperty(str, Enum):
    TITLE = "og:title"
    TYPE = "og:type"
    URL = "og:url"
    IMAGE = "og:image"
    SITE_NAME = "og:site_name"
    DESCRIPTION = "og:description"
    USER_GENERATED_IMAGE = "og:image:user_generated"
    FOURSQUARE_LATITUDE = "playfoursquare:location:latitude"
    FOURSQUARE_LONGITUDE = "playfoursquare:location:longitude"

    @classmethod
    def from_markup_name(cls, name: str | None) -> "OpenGraphProperty | None":
        """Map a meta tag's property/name attribute to a known property, ignoring case."""
        if not name:
            return None
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


PropertyMapping = dict[OpenGraphProperty, str]


class OpenGraphType(str, Enum):
    WEBSITE = "website"
    ARTICLE = "article"
    FOURSQUARE_VENUE = "playfoursquare:venue"
    INSTAGRAM_PHOTO = "instapp:photo"


class SiteName(str, Enum):
    TWITTER = "twitter"
    YOUTUBE = "youtube"
    VIMEO = "vimeo"
    INSTAGRAM = "instagram"
    FOURSQUARE = "foursquare"
    OTHER = "other"

    @classmethod
    def classify(cls, raw: str | None) -> "SiteName":
        if raw is None:
            return cls.OTHER
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.OTHER


class FoursquareCoordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float

    @classmethod
    def from_property_mapping(cls, mapping: PropertyMapping) -> "FoursquareCoordinates | None":
        latitude = mapping.get(OpenGraphProperty.FOURSQUARE_LATITUDE)
        longitude = mapping.get(OpenGraphProperty.FOURSQUARE_LONGITUDE)
        if latitude is None or longitude is None:
            return None
        try:
            return cls(latitude=float(latitude), longitude=float(longitude))
        except ValueError:
            return None


class PageDescription(BaseModel):
    """Validated OpenGraph description of a single page.

    ``title`` and ``url`` are required; everything else is optional or has a
    default. ``site_name_raw`` keeps whatever the page declared, even when it
    does not match a known site.
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    type: str = OpenGraphType.WEBSITE.value
    url: str = Field(min_length=1)
    image_urls: tuple[str, ...] = ()
    site_name: SiteName = SiteName.OTHER
    site_name_raw: str | None = None
    description: str | None = None
    is_user_generated_image: bool = False
    foursquare_coordinates: FoursquareCoordinates | None = None

    @model_validator(mode="before")
    @classmethod
    def classify_site_name(cls, data):
        if isinstance(data, dict) and "site_name" not in data and data.get("site_name_raw") is not None:
            data = {**data, "site_name": SiteName.classify(data["site_name_raw"])}
        return data

    @classmethod
    def from_property_mapping(
        cls, mapping: PropertyMapping, images: list[str] | tuple[str, ...]
    ) -> "PageDescription | None":
        """Build a description, or return None when the title or url is missing."""
        title = mapping.get(OpenGraphProperty.TITLE)
        url = mapping.get(OpenGraphProperty.URL)
        if not title or not title.strip() or not url or not url.strip():
            return None

        user_generated = mapping.get(OpenGraphProperty.USER_GENERATED_IMAGE, "")
        return cls(
            title=title,
            type=mapping.get(OpenGraphProperty.TYPE) or OpenGraphType.WEBSITE.value,
            url=url,
            image_urls=tuple(images),
            site_name=SiteName.classify(mapping.get(OpenGraphProperty.SITE_NAME)),
            site_name_raw=mapping.get(OpenGraphProperty.SITE_NAME),
            description=mapping.get(OpenGraphProperty.DESCRIPTION),
            is_user_generated_image=user_generated == "true",
            foursquare_coordinates=FoursquareCoordinates.from_property_mapping(mapping),
        )

    def link_preview(self, original_url: str, offset: int) -> "LinkPreview":
        from .resolver import resolve_link_preview

        return resolve_link_preview(self, original_url, offset)


class _PreviewBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    original_url: str
    permanent_url: str
    offset: int = Field(ge=0)
    image_urls: tuple[str, ...] = ()


class Article(_PreviewBase):
    kind: Literal["article"] = "article"
    title: str
    summary: str | None = None
    image_urls: tuple[str, ...] = Field(default=(), max_length=1)


class SocialStatus(_PreviewBase):
    kind: Literal["social_status"] = "social_status"
    author: str
    message: str | None = None


class LocationPreview(_PreviewBase):
    kind: Literal["location"] = "location"
    title: str
    subtitle: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    image_urls: tuple[str, ...] = Field(default=(), max_length=1)


class MediaPicturePreview(_PreviewBase):
    kind: Literal["media_picture"] = "media_picture"
    title: str
    subtitle: str | None = None
    image_urls: tuple[str, ...] = Field(default=(), max_length=1)


LinkPreview = Annotated[
    Union[Article, SocialStatus, LocationPreview, MediaPicturePreview],
    Field(discriminator="kind"),
]

link_preview_adapter: TypeAdapter[LinkPreview] = TypeAdapter(LinkPreview)
