from __future__ import annotations

from pathlib import Path

from bs4 import BeautifulSoup

from epubkit.core.archive import extract
from epubkit.core.container import resolve_container
from epubkit.core.media_types import NCX, XHTML, MediaType
from epubkit.core.package_parser import PackageParser
from epubkit.core.resources import ResourceResolver
from epubkit.core.toc_builder import build_table_of_contents, find_nav_element, is_ncx_mode
from epubkit.models.book import EpubResource


def _package(epub_path: Path, tmp_path: Path):
    extracted = extract(epub_path, tmp_path / "out")
    container = resolve_container(extracted)
    return PackageParser(container.base_path, container.opf_href).parse_file(
        extracted / container.opf_href
    )


def _toc(package):
    resolver = ResourceResolver(package.manifest)
    return build_table_of_contents(resolver, package.toc_resource, package.version)


def test_ncx_toc_structure(epub2_path: Path, tmp_path: Path) -> None:
    result = _toc(_package(epub2_path, tmp_path))
    assert result.warning is None

    toc = result.references
    assert [ref.title for ref in toc] == ["One", "Two", "Three"]
    assert [len(ref.children) for ref in toc] == [1, 1, 0]
    assert toc[0].resource.id == "c1"
    assert toc[0].fragment_id is None
    assert toc[0].children[0].title == "One A"
    assert toc[0].children[0].resource.id == "c1"
    assert toc[0].children[0].fragment_id == "a"


def test_ncx_toc_flatten(epub2_path: Path, tmp_path: Path) -> None:
    toc = _toc(_package(epub2_path, tmp_path)).references
    flat = [(level, ref.title) for root in toc for level, ref in root.flatten()]
    assert flat == [(0, "One"), (1, "One A"), (0, "Two"), (1, "Two A"), (0, "Three")]


def test_nav_toc_structure(epub3_path: Path, tmp_path: Path) -> None:
    package = _package(epub3_path, tmp_path)
    assert package.toc_resource.id == "nav"

    toc = _toc(package).references
    assert [ref.title for ref in toc] == ["Chapter One", "Chapter Two", "Lost Chapter"]
    assert toc[0].resource.id == "ch1"
    assert toc[0].children[0].title == "Part A"
    assert toc[0].children[0].fragment_id == "part-a"
    assert toc[1].resource.id == "ch2"
    assert toc[2].resource is None


def test_missing_toc_resource() -> None:
    result = build_table_of_contents(ResourceResolver([]), None, 3.0)
    assert result.references == []
    assert result.warning


def test_unreadable_toc_resource(tmp_path: Path) -> None:
    resource = EpubResource(
        id="ncx",
        media_type=NCX,
        href="toc.ncx",
        full_href=str(tmp_path / "toc.ncx"),
    )
    result = build_table_of_contents(ResourceResolver([resource]), resource, 2.0)
    assert result.references == []
    assert "toc.ncx" in result.warning


def test_malformed_ncx(tmp_path: Path) -> None:
    path = tmp_path / "toc.ncx"
    path.write_text("<ncx><navMap><navPoint>")
    resource = EpubResource(id="ncx", media_type=NCX, href="toc.ncx", full_href=str(path))
    result = build_table_of_contents(ResourceResolver([resource]), resource, 2.0)
    assert result.references == []
    assert result.warning


def test_nav_toc_relative_to_nav_document(tmp_path: Path) -> None:
    (tmp_path / "nav").mkdir()
    nav_path = tmp_path / "nav" / "toc.xhtml"
    nav_path.write_text(
        '<html><body><nav><ol><li><a href="../text/one.xhtml">One</a></li>'
        "<li><span>Heading only</span></li></ol></nav></body></html>"
    )
    nav = EpubResource(
        id="nav", properties="nav", media_type=XHTML, href="nav/toc.xhtml", full_href=str(nav_path)
    )
    chapter = EpubResource(
        id="one",
        media_type=XHTML,
        href="text/one.xhtml",
        full_href=str(tmp_path / "text" / "one.xhtml"),
    )
    toc = build_table_of_contents(ResourceResolver([nav, chapter]), nav, 3.0).references
    assert toc[0].resource.id == "one"
    assert toc[1].title == "Heading only"
    assert toc[1].resource is None


def test_nav_entry_without_own_label(tmp_path: Path) -> None:
    nav_path = tmp_path / "toc.xhtml"
    nav_path.write_text(
        '<html><body><nav><ol>'
        '<li><ol><li><a href="child.xhtml">Child</a></li></ol></li>'
        '<li><div><a href="wrapped.xhtml">Wrapped</a></div></li>'
        "</ol></nav></body></html>"
    )
    resources = [
        EpubResource(id="nav", properties="nav", media_type=XHTML, href="toc.xhtml", full_href=str(nav_path)),
        EpubResource(id="child", media_type=XHTML, href="child.xhtml", full_href=str(tmp_path / "child.xhtml")),
        EpubResource(
            id="wrapped", media_type=XHTML, href="wrapped.xhtml", full_href=str(tmp_path / "wrapped.xhtml")
        ),
    ]
    toc = build_table_of_contents(ResourceResolver(resources), resources[0], 3.0).references

    assert toc[0].title == ""
    assert toc[0].resource is None
    assert [child.title for child in toc[0].children] == ["Child"]
    assert toc[0].children[0].resource.id == "child"
    assert toc[1].title == "Wrapped"
    assert toc[1].resource.id == "wrapped"


def test_is_ncx_mode() -> None:
    xhtml = EpubResource(id="nav", media_type=XHTML, href="nav.xhtml", full_href="/nav.xhtml")
    ncx = EpubResource(id="ncx", media_type=MediaType.by("", "toc.ncx"), href="toc.ncx", full_href="/toc.ncx")
    assert is_ncx_mode(ncx, 3.0)
    assert is_ncx_mode(xhtml, 2.0)
    assert not is_ncx_mode(xhtml, 3.0)


def test_find_nav_element_prefers_direct_children() -> None:
    soup = BeautifulSoup(
        '<html><body><div><nav id="deep"></nav></div><nav id="top"></nav></body></html>', "lxml"
    )
    assert find_nav_element(soup.body)["id"] == "top"


def test_find_nav_element_prefers_toc_type() -> None:
    soup = BeautifulSoup(
        '<html><body><nav epub:type="page-list" id="pages"></nav>'
        '<nav epub:type="toc" id="toc"></nav></body></html>',
        "lxml",
    )
    assert find_nav_element(soup.body)["id"] == "toc"


def test_find_nav_element_missing() -> None:
    soup = BeautifulSoup("<html><body><p>No nav</p></body></html>", "lxml")
    assert find_nav_element(soup.body) is None
