"""Errors raised to callers of the reader."""


class EpubError(Exception):
    """Base error for EPUB loading failures."""

    error_type = "epub_error"

    def __init__(self, message: str, path: str | None = None):
        self.message = message
        self.path = path
        super().__init__(f"{self.error_type}: {message}")


class BookNotAvailableError(EpubError):
    """No book exists at the given path."""

    error_type = "book_not_available"


class InvalidPathError(EpubError):
    """The path exists but cannot be read as an EPUB."""

    error_type = "invalid_path"


class PackageParseError(EpubError):
    """The OPF package document is missing, unreadable or malformed."""

    error_type = "package_parse_error"
