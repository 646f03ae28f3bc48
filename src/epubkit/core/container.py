"""Locate the OPF package document through META-INF/container.xml."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from urllib.parse import unquote

from lxml import etree

from epubkit.core.archive import CONTAINER_PATH
from epubkit.core.errors import InvalidPathError, PackageParseError
from epubkit.core.xmlutils import parse_xml

log = logging.getLogger(__name__)

_FULL_PATH_RE = re.compile(r'full-path\s*=\s*["\']([^"\']*)["\']')


@dataclass
class ContainerInfo:
    opf_href: str  # relative to the extracted directory
    base_path: Path  # directory every manifest href is relative to


def find_full_path(container_xml: bytes) -> str | None:
    """Return the first rootfile full-path of a container document."""
    try:
        root = parse_xml(container_xml)
    except etree.XMLSyntaxError:
        log.debug("container.xml is not well-formed, falling back to a text scan")
        match = _FULL_PATH_RE.search(container_xml.decode("utf-8", errors="replace"))
        return match.group(1) if match else None

    for rootfile in root.iter("{*}rootfile"):
        full_path = rootfile.get("full-path")
        if full_path:
            return full_path
    return None


def resolve_container(extracted_dir: Path) -> ContainerInfo:
    """Read the container file of an extracted EPUB.

    Raises:
        InvalidPathError: If the directory or container file cannot be read
        PackageParseError: If the container names no package document
    """
    container = extracted_dir / CONTAINER_PATH
    try:
        container_xml = container.read_bytes()
    except OSError as e:
        raise InvalidPathError(f"Cannot read {CONTAINER_PATH}: {e}", str(extracted_dir)) from e

    full_path = find_full_path(container_xml)
    if not full_path:
        raise PackageParseError("container.xml has no rootfile full-path", str(container))

    opf_href = unquote(full_path).lstrip("/")
    parent = PurePosixPath(opf_href).parent
    base_path = extracted_dir if str(parent) == "." else extracted_dir / parent
    return ContainerInfo(opf_href=opf_href, base_path=base_path)
