"""Tests for building page descriptions from OpenGraph property mappings."""

import pytest
from pydantic import ValidationError

from ogpreview.schemas import (
    Article,
    FoursquareCoordinates,
    OpenGraphProperty,
    PageDescription,
    SiteName,
    SocialStatus,
    link_preview_adapter,
)

P = OpenGraphProperty


def test_creates_description_from_property_mapping():
    mapping = {P.TITLE: "title", P.TYPE: "article", P.DESCRIPTION: "description", P.URL: "www.example.com/url"}
    images = ["www.example.com/image"]

    description = PageDescription.from_property_mapping(mapping, images)

    assert description.title == "title"
    assert description.type == "article"
    assert description.description == "description"
    assert description.url == "www.example.com/url"
    assert description.image_urls == ("www.example.com/image",)
    assert description.site_name_raw is None
    assert description.site_name is SiteName.OTHER
    assert description.is_user_generated_image is False
    assert description.foursquare_coordinates is None


def test_type_defaults_to_website():
    mapping = {P.TITLE: "title", P.URL: "www.example.com/url"}

    description = PageDescription.from_property_mapping(mapping, [])

    assert description is not None
    assert description.type == "website"


@pytest.mark.parametrize(
    "mapping",
    [
        {P.TITLE: "title", P.DESCRIPTION: "no url"},
        {P.URL: "www.example.com/url", P.DESCRIPTION: "no title"},
        {P.TITLE: "", P.URL: "www.example.com/url"},
        {P.TITLE: "title", P.URL: "   "},
        {},
    ],
)
def test_returns_none_when_required_properties_are_missing(mapping):
    assert PageDescription.from_property_mapping(mapping, ["www.example.com/image"]) is None


@pytest.mark.parametrize(
    "site_name",
    [SiteName.TWITTER, SiteName.YOUTUBE, SiteName.VIMEO, SiteName.INSTAGRAM, SiteName.FOURSQUARE],
)
@pytest.mark.parametrize("transform", [str.lower, str.capitalize, str.upper])
def test_classifies_site_names_ignoring_case(site_name, transform):
    raw = transform(site_name.value)
    mapping = {P.TITLE: "title", P.TYPE: "article", P.SITE_NAME: raw, P.URL: "www.example.com/url"}

    description = PageDescription.from_property_mapping(mapping, [])

    assert description.site_name is site_name
    assert description.site_name_raw == raw


def test_unknown_site_name_is_other_but_raw_value_is_kept():
    mapping = {P.TITLE: "title", P.SITE_NAME: "The Guardian", P.URL: "www.example.com/url"}

    description = PageDescription.from_property_mapping(mapping, [])

    assert description.site_name is SiteName.OTHER
    assert description.site_name_raw == "The Guardian"


def test_site_name_is_classified_from_raw_value_when_not_given():
    description = PageDescription(title="title", url="www.example.com/url", site_name_raw="Vimeo")

    assert description.site_name is SiteName.VIMEO


@pytest.mark.parametrize(
    "value, expected", [("true", True), ("TRUE", False), ("True", False), ("false", False), ("yes", False)]
)
def test_user_generated_image_flag(value, expected):
    mapping = {P.TITLE: "title", P.URL: "www.example.com/url", P.USER_GENERATED_IMAGE: value}

    description = PageDescription.from_property_mapping(mapping, [])

    assert description.is_user_generated_image is expected


def test_parses_foursquare_coordinates():
    mapping = {
        P.TITLE: "title",
        P.URL: "www.example.com/url",
        P.FOURSQUARE_LATITUDE: "40.7",
        P.FOURSQUARE_LONGITUDE: "-74.0",
    }

    description = PageDescription.from_property_mapping(mapping, [])

    assert description.foursquare_coordinates == FoursquareCoordinates(latitude=40.7, longitude=-74.0)


@pytest.mark.parametrize(
    "coordinates",
    [
        {P.FOURSQUARE_LATITUDE: "abc", P.FOURSQUARE_LONGITUDE: "-74.0"},
        {P.FOURSQUARE_LATITUDE: "40.7", P.FOURSQUARE_LONGITUDE: ""},
        {P.FOURSQUARE_LATITUDE: "40.7"},
        {P.FOURSQUARE_LONGITUDE: "-74.0"},
    ],
)
def test_unparseable_coordinates_do_not_invalidate_the_description(coordinates):
    mapping = {P.TITLE: "title", P.URL: "www.example.com/url", **coordinates}

    description = PageDescription.from_property_mapping(mapping, [])

    assert description is not None
    assert description.title == "title"
    assert description.foursquare_coordinates is None


def test_descriptions_are_immutable():
    description = PageDescription(title="title", url="www.example.com/url")

    with pytest.raises(ValidationError):
        description.title = "changed"


def test_descriptions_compare_by_value():
    first = PageDescription(title="title", url="www.example.com/url", image_urls=("a", "b"))
    second = PageDescription(title="title", url="www.example.com/url", image_urls=("a", "b"))

    assert first == second
    assert first != PageDescription(title="title", url="www.example.com/url", image_urls=("b", "a"))


def test_markup_names_map_to_properties_ignoring_case():
    assert OpenGraphProperty.from_markup_name("OG:Site_Name") is P.SITE_NAME
    assert OpenGraphProperty.from_markup_name(" og:image ") is P.IMAGE
    assert OpenGraphProperty.from_markup_name("og:locale") is None
    assert OpenGraphProperty.from_markup_name(None) is None


def test_article_keeps_at_most_one_image():
    with pytest.raises(ValidationError):
        Article(
            original_url="www.example.com",
            permanent_url="https://example.com",
            offset=0,
            title="title",
            image_urls=("a", "b"),
        )


def test_link_previews_round_trip_through_json_by_kind():
    status = SocialStatus(
        original_url="twitter.com/wire/status/1",
        permanent_url="https://twitter.com/wire/status/1",
        offset=3,
        author="Wire",
        message="hello",
        image_urls=("https://pbs.twimg.com/media/1.jpg", "https://pbs.twimg.com/media/2.jpg"),
    )

    payload = link_preview_adapter.dump_json(status)

    assert b'"kind":"social_status"' in payload
    assert link_preview_adapter.validate_json(payload) == status
