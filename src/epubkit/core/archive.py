"""Extract EPUB archives to disk."""

import logging
import zipfile
from pathlib import Path, PurePosixPath

from epubkit.core.errors import InvalidPathError

log = logging.getLogger(__name__)

CONTAINER_PATH = "META-INF/container.xml"


def is_extracted(dest_dir: Path) -> bool:
    """Check whether a directory already holds an extracted EPUB."""
    return (dest_dir / CONTAINER_PATH).is_file()


def extract(archive_path: Path, dest_dir: Path) -> Path:
    """Extract archive_path into dest_dir, skipping work already done.

    Returns:
        The destination directory

    Raises:
        InvalidPathError: If the file is not a readable zip archive or a
            member would be written outside dest_dir
    """
    if is_extracted(dest_dir):
        log.debug("Archive %s already extracted to %s", archive_path, dest_dir)
        return dest_dir

    try:
        with zipfile.ZipFile(archive_path, "r") as zf:
            _check_members(zf, archive_path)
            dest_dir.mkdir(parents=True, exist_ok=True)
            zf.extractall(dest_dir)
    except zipfile.BadZipFile as e:
        raise InvalidPathError(f"Not a zip archive: {e}", str(archive_path)) from e
    except OSError as e:
        raise InvalidPathError(f"Cannot read archive: {e}", str(archive_path)) from e

    log.debug("Extracted %s to %s", archive_path, dest_dir)
    return dest_dir


def _check_members(zf: zipfile.ZipFile, archive_path: Path) -> None:
    """Reject absolute member names and names climbing out of the target."""
    for name in zf.namelist():
        member = PurePosixPath(name)
        if member.is_absolute() or ".." in member.parts:
            raise InvalidPathError(
                f"Archive member escapes extraction directory: {name}",
                str(archive_path),
            )
