"""Lookups over the manifest."""

import os
import posixpath
from pathlib import Path
from urllib.parse import unquote

from epubkit.core.media_types import MediaType
from epubkit.models.book import EpubResource


def resolve_full_href(base_path: Path | str, href: str) -> str:
    """Join a manifest href to the base path, percent-decoded and normalized."""
    decoded = unquote(href.split("#")[0])
    return os.path.normpath(os.path.join(str(base_path), decoded))


def split_fragment(href: str) -> tuple[str, str | None]:
    """Split 'chapter.xhtml#sec' into ('chapter.xhtml', 'sec')."""
    path, sep, fragment = href.partition("#")
    return path, (fragment or None) if sep else None


def strip_parent_segments(href: str) -> str:
    """Drop leading './' and '../' segments from a relative href."""
    while True:
        if href.startswith("../"):
            href = href[3:]
        elif href.startswith("./"):
            href = href[2:]
        else:
            return href


def _normalize_href(href: str) -> str:
    return unquote(split_fragment(href)[0])


class ResourceResolver:
    """Find manifest resources by id, property, media type, extension or href."""

    def __init__(self, resources: list[EpubResource]):
        self.resources = resources
        self._by_id = {resource.id: resource for resource in resources}
        self._by_href = {_normalize_href(resource.href): resource for resource in resources}

    def __len__(self) -> int:
        return len(self.resources)

    def contains_id(self, resource_id: str) -> bool:
        return resource_id in self._by_id

    def find_by_id(self, resource_id: str | None) -> EpubResource | None:
        if not resource_id:
            return None
        return self._by_id.get(resource_id)

    def find_by_property(self, name: str) -> EpubResource | None:
        for resource in self.resources:
            if resource.has_property(name):
                return resource
        return None

    def find_by_media_type(self, media_type: MediaType) -> EpubResource | None:
        for resource in self.resources:
            if resource.media_type == media_type:
                return resource
        return None

    def find_by_extension(self, extension: str) -> EpubResource | None:
        """First resource whose media type defaults to the given extension."""
        extension = extension.lower().lstrip(".")
        for resource in self.resources:
            if resource.media_type.default_extension == extension:
                return resource
        return None

    def find_by_href(self, href: str, relative_to: str | None = None) -> EpubResource | None:
        """Find a resource by href, ignoring any fragment.

        When relative_to (the href of the referring document) is given, the
        href is first resolved against that document's directory. Otherwise,
        or when that fails, leading '../' segments are stripped before the
        comparison.
        """
        path = _normalize_href(href)
        if not path:
            return None

        if relative_to:
            base_dir = posixpath.dirname(_normalize_href(relative_to))
            joined = posixpath.normpath(posixpath.join(base_dir, path))
            found = self._by_href.get(joined)
            if found is not None:
                return found

        found = self._by_href.get(path)
        if found is not None:
            return found

        stripped = strip_parent_segments(path)
        found = self._by_href.get(stripped)
        if found is not None:
            return found

        # Manifest hrefs may themselves carry ../ segments
        for key, resource in self._by_href.items():
            if strip_parent_segments(key) == stripped:
                return resource
        return None
