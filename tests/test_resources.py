from __future__ import annotations

from pathlib import Path

import pytest

from epubkit.core.media_types import CSS, MediaType, XHTML
from epubkit.core.resources import (
    ResourceResolver,
    resolve_full_href,
    split_fragment,
    strip_parent_segments,
)
from epubkit.models.book import EpubResource


def _resource(resource_id: str, href: str, media_type: str = "application/xhtml+xml", properties: str | None = None) -> EpubResource:
    return EpubResource(
        id=resource_id,
        properties=properties,
        media_type=MediaType.by(media_type, href),
        href=href,
        full_href=resolve_full_href("/book/OEBPS", href),
    )


@pytest.fixture
def resolver() -> ResourceResolver:
    return ResourceResolver(
        [
            _resource("nav", "nav.xhtml", properties="nav scripted"),
            _resource("ch1", "text/ch1.xhtml"),
            _resource("ch2", "text/ch%202.xhtml"),
            _resource("css", "styles/book.css", "text/css"),
            _resource("up", "../shared/notes.xhtml"),
        ]
    )


def test_resolve_full_href_decodes_and_normalizes() -> None:
    assert resolve_full_href("/book/OEBPS", "text/ch%202.xhtml#top") == "/book/OEBPS/text/ch 2.xhtml"
    assert resolve_full_href(Path("/book/OEBPS"), "./text/../ch1.xhtml") == "/book/OEBPS/ch1.xhtml"


def test_split_fragment() -> None:
    assert split_fragment("ch1.xhtml#sec") == ("ch1.xhtml", "sec")
    assert split_fragment("ch1.xhtml") == ("ch1.xhtml", None)
    assert split_fragment("ch1.xhtml#") == ("ch1.xhtml", None)
    assert split_fragment("#sec") == ("", "sec")


def test_strip_parent_segments() -> None:
    assert strip_parent_segments("../../images/a.png") == "images/a.png"
    assert strip_parent_segments("./a.png") == "a.png"
    assert strip_parent_segments("images/../a.png") == "images/../a.png"


def test_find_by_id(resolver: ResourceResolver) -> None:
    assert resolver.find_by_id("ch1").href == "text/ch1.xhtml"
    assert resolver.find_by_id("nope") is None
    assert resolver.find_by_id(None) is None
    assert resolver.contains_id("css")
    assert len(resolver) == 5


def test_find_by_property_matches_whole_tokens(resolver: ResourceResolver) -> None:
    assert resolver.find_by_property("nav").id == "nav"
    assert resolver.find_by_property("scripted").id == "nav"
    assert resolver.find_by_property("script") is None


def test_find_by_media_type_and_extension(resolver: ResourceResolver) -> None:
    assert resolver.find_by_media_type(CSS).id == "css"
    assert resolver.find_by_media_type(XHTML).id == "nav"
    assert resolver.find_by_extension(".css").id == "css"
    assert resolver.find_by_extension("ncx") is None


def test_find_by_href_ignores_fragment_and_encoding(resolver: ResourceResolver) -> None:
    assert resolver.find_by_href("text/ch1.xhtml#sec").id == "ch1"
    assert resolver.find_by_href("text/ch 2.xhtml").id == "ch2"
    assert resolver.find_by_href("text/ch%202.xhtml").id == "ch2"
    assert resolver.find_by_href("") is None
    assert resolver.find_by_href("#only-fragment") is None


def test_find_by_href_relative_to_document(resolver: ResourceResolver) -> None:
    assert resolver.find_by_href("ch1.xhtml", relative_to="text/ch2.xhtml").id == "ch1"
    assert resolver.find_by_href("../nav.xhtml", relative_to="text/ch1.xhtml").id == "nav"


def test_find_by_href_strips_parent_segments(resolver: ResourceResolver) -> None:
    assert resolver.find_by_href("../text/ch1.xhtml").id == "ch1"
    assert resolver.find_by_href("shared/notes.xhtml").id == "up"


def test_find_by_href_is_stable(resolver: ResourceResolver) -> None:
    first = resolver.find_by_href("../text/ch1.xhtml#a")
    second = resolver.find_by_href("../text/ch1.xhtml#a")
    assert first is second
