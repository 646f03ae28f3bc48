from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from epubkit.config import ReaderConfig
from epubkit.core.reader import EpubReader

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{opf_path}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

EPUB3_OPF = """<?xml version="1.0" encoding="UTF-8"?>
<package version="3.0" unique-identifier="BookId" xmlns="http://www.idpf.org/2007/opf">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:opf="http://www.idpf.org/2007/opf">
    <dc:title>Sample Book</dc:title>
    <dc:creator id="creator1">Jane Author</dc:creator>
    <meta refines="#creator1" property="role" scheme="marc:relators">aut</meta>
    <meta refines="#creator1" property="file-as">Author, Jane</meta>
    <dc:contributor opf:role="ill">Ivan Illustrator</dc:contributor>
    <dc:identifier id="BookId">urn:uuid:1234</dc:identifier>
    <dc:language>fr</dc:language>
    <dc:date>2020-01-01</dc:date>
    <dc:subject>Fiction</dc:subject>
    <dc:publisher>Sample Press</dc:publisher>
    <dc:rights>All rights reserved</dc:rights>
    <meta property="dcterms:modified">2020-01-02T00:00:00Z</meta>
    <meta name="cover" content="cover-img"/>
  </metadata>
  <manifest>
    <item id="nav" href="nav.xhtml" media-type="application/xhtml+xml" properties="nav"/>
    <item id="ch1" href="text/ch1.xhtml" media-type="application/xhtml+xml"/>
    <item id="ch2" href="text/ch%202.xhtml" media-type="application/xhtml+xml"/>
    <item id="broken" href="text/broken.xhtml" media-type="application/xhtml+xml"/>
    <item id="stylesheet" href="styles/book.css" media-type="text/css"/>
    <item id="cover-img" href="images/cover.jpg" media-type="image/jpeg"/>
    <item id="fig1" href="images/fig1.png" media-type="image/png"/>
  </manifest>
  <spine page-progression-direction="ltr">
    <itemref idref="ch1"/>
    <itemref idref="ch2" linear="no"/>
    <itemref idref="missing"/>
    <itemref idref="broken"/>
  </spine>
</package>
"""

EPUB3_NAV = """<?xml version="1.0" encoding="utf-8"?>
<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">
  <head><title>Contents</title></head>
  <body>
    <section>
      <nav epub:type="landmarks"><ol><li><a href="text/ch1.xhtml">Start</a></li></ol></nav>
      <nav epub:type="toc">
        <h1>Contents</h1>
        <ol>
          <li><a href="text/ch1.xhtml">Chapter One</a>
            <ol>
              <li><a href="text/ch1.xhtml#part-a">Part A</a></li>
            </ol>
          </li>
          <li><a href="text/ch%202.xhtml">Chapter Two</a></li>
          <li><a href="text/nowhere.xhtml">Lost Chapter</a></li>
        </ol>
      </nav>
    </section>
  </body>
</html>
"""

CH1_XHTML = """<?xml version="1.0" encoding="utf-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml">
  <head><title>Chapter One</title></head>
  <body>
    <h2 class="title">Chapter&nbsp;One</h2>
    <p class="first" style="text-align: end">Hello <em>brave</em> new <a href="ch2.xhtml">world</a>.</p>
    <img src="../images/fig1.png" alt="Figure 1"/>
    <ul>
      <li>Plain item</li>
      <li><a href="#part-a">Linked item</a></li>
    </ul>
    <div class="box"><p>Inside</p><br/></div>
    <table><tr><td>ignored</td></tr></table>
  </body>
</html>
"""

CH2_XHTML = """<?xml version="1.0" encoding="utf-8"?>
<html xmlns="http://www.w3.org/1999/xhtml">
  <head><title>Chapter Two</title></head>
  <body><p>Second chapter.</p></body>
</html>
"""

BROKEN_XHTML = """<?xml version="1.0" encoding="utf-8"?>
<html xmlns="http://www.w3.org/1999/xhtml">
  <head><title>Broken</title></head>
  <body><p>Unterminated paragraph
  </body>
</html>
"""

BOOK_CSS = """
/* book styles */
.title { font-size: 1.5em; text-align: center; margin-top: 2em; }
.first, .lead { font-size: 1.25em; }
.box { padding: 0.5em; }
@media screen { .title { font-size: 9em; } }
"""

EPUB2_OPF = """<?xml version="1.0" encoding="UTF-8"?>
<package version="2.0" unique-identifier="uid" xmlns="http://www.idpf.org/2007/opf">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:opf="http://www.idpf.org/2007/opf">
    <dc:title>Old Book</dc:title>
    <dc:creator opf:role="aut" opf:file-as="Writer, Old">Old Writer</dc:creator>
    <dc:identifier id="uid" opf:scheme="ISBN">9780000000000</dc:identifier>
    <dc:language>en</dc:language>
    <dc:date opf:event="publication">1999</dc:date>
  </metadata>
  <manifest>
    <item id="ncx" href="toc.ncx" media-type="application/x-dtbncx+xml"/>
    <item id="c1" href="c1.html" media-type="application/xhtml+xml"/>
    <item id="c2" href="c2.html" media-type="application/xhtml+xml"/>
    <item id="c3" href="c3.html" media-type="application/xhtml+xml"/>
  </manifest>
  <spine toc="ncx">
    <itemref idref="c1"/>
    <itemref idref="c2"/>
    <itemref idref="c3"/>
  </spine>
  <guide>
    <reference type="text" title="Start" href="c1.html"/>
  </guide>
</package>
"""

EPUB2_NCX = """<?xml version="1.0" encoding="UTF-8"?>
<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">
  <head><meta name="dtb:uid" content="9780000000000"/></head>
  <docTitle><text>Old Book</text></docTitle>
  <navMap>
    <navPoint id="n1" playOrder="1">
      <navLabel><text>One</text></navLabel>
      <content src="c1.html"/>
      <navPoint id="n1a" playOrder="2">
        <navLabel><text>One A</text></navLabel>
        <content src="c1.html#a"/>
      </navPoint>
    </navPoint>
    <navPoint id="n2" playOrder="3">
      <navLabel><text>Two</text></navLabel>
      <content src="c2.html"/>
      <navPoint id="n2a" playOrder="4">
        <navLabel><text>Two A</text></navLabel>
        <content src="c2.html#a"/>
      </navPoint>
    </navPoint>
    <navPoint id="n3" playOrder="5">
      <navLabel><text>Three</text></navLabel>
      <content src="c3.html"/>
    </navPoint>
  </navMap>
</ncx>
"""

SIMPLE_HTML = """<html xmlns="http://www.w3.org/1999/xhtml"><head><title>{title}</title></head>
<body><p>{title}</p></body></html>
"""


def write_epub(target: Path, files: dict[str, str | bytes]) -> Path:
    """Write a zip with the mimetype entry first, as EPUB requires."""
    with zipfile.ZipFile(target, "w") as zf:
        zf.writestr("mimetype", "application/epub+zip", compress_type=zipfile.ZIP_STORED)
        for name, content in files.items():
            zf.writestr(name, content, compress_type=zipfile.ZIP_DEFLATED)
    return target


def epub3_files() -> dict[str, str | bytes]:
    return {
        "META-INF/container.xml": CONTAINER_XML.format(opf_path="OEBPS/content.opf"),
        "OEBPS/content.opf": EPUB3_OPF,
        "OEBPS/nav.xhtml": EPUB3_NAV,
        "OEBPS/text/ch1.xhtml": CH1_XHTML,
        "OEBPS/text/ch 2.xhtml": CH2_XHTML,
        "OEBPS/text/broken.xhtml": BROKEN_XHTML,
        "OEBPS/styles/book.css": BOOK_CSS,
        "OEBPS/images/cover.jpg": b"\xff\xd8\xff",
        "OEBPS/images/fig1.png": b"\x89PNG",
    }


def epub2_files() -> dict[str, str | bytes]:
    return {
        "META-INF/container.xml": CONTAINER_XML.format(opf_path="content.opf"),
        "content.opf": EPUB2_OPF,
        "toc.ncx": EPUB2_NCX,
        "c1.html": SIMPLE_HTML.format(title="One"),
        "c2.html": SIMPLE_HTML.format(title="Two"),
        "c3.html": SIMPLE_HTML.format(title="Three"),
    }


@pytest.fixture
def epub3_path(tmp_path: Path) -> Path:
    return write_epub(tmp_path / "sample.epub", epub3_files())


@pytest.fixture
def epub2_path(tmp_path: Path) -> Path:
    return write_epub(tmp_path / "old.epub", epub2_files())


@pytest.fixture
def reader(tmp_path: Path) -> EpubReader:
    return EpubReader(ReaderConfig(cache_dir=tmp_path / "cache"))
