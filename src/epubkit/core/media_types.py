"""Known EPUB media types and lookup by MIME name or file extension."""

from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict, Field


class MediaType(BaseModel):
    """A MIME type with the file extensions it is usually stored under.

    Two media types are equal when their MIME names are equal.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    default_extension: str = ""
    extensions: tuple[str, ...] = Field(default_factory=tuple)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MediaType):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    @property
    def is_image(self) -> bool:
        return self.name.startswith("image/")

    @classmethod
    def by(cls, name: str, filename: str | None = None) -> "MediaType":
        """Resolve a media type from its MIME name, falling back to the filename.

        An exact MIME match against the known table wins. Otherwise a known
        type with the same extension is returned, and failing that a new type
        carrying the declared name and the file's extension.
        """
        known = _BY_NAME.get(name)
        if known is not None:
            return known

        extension = _extension_of(filename)
        if extension:
            by_extension = _BY_EXTENSION.get(extension)
            if by_extension is not None:
                return by_extension

        return cls(
            name=name,
            default_extension=extension,
            extensions=(extension,) if extension else (),
        )


def _extension_of(filename: str | None) -> str:
    if not filename:
        return ""
    return PurePosixPath(filename.split("#")[0]).suffix.lower().lstrip(".")


XHTML = MediaType(
    name="application/xhtml+xml",
    default_extension="xhtml",
    extensions=("htm", "html", "xhtml", "xml"),
)
HTML = MediaType(name="text/html", default_extension="html", extensions=("html", "htm"))
EPUB = MediaType(name="application/epub+zip", default_extension="epub", extensions=("epub",))
NCX = MediaType(name="application/x-dtbncx+xml", default_extension="ncx", extensions=("ncx",))
OPF = MediaType(name="application/oebps-package+xml", default_extension="opf", extensions=("opf",))
JAVASCRIPT = MediaType(name="text/javascript", default_extension="js", extensions=("js",))
CSS = MediaType(name="text/css", default_extension="css", extensions=("css",))

JPEG = MediaType(name="image/jpeg", default_extension="jpg", extensions=("jpg", "jpeg"))
PNG = MediaType(name="image/png", default_extension="png", extensions=("png",))
GIF = MediaType(name="image/gif", default_extension="gif", extensions=("gif",))
SVG = MediaType(name="image/svg+xml", default_extension="svg", extensions=("svg",))

TTF = MediaType(name="application/x-font-ttf", default_extension="ttf", extensions=("ttf",))
OPENTYPE = MediaType(
    name="application/vnd.ms-opentype", default_extension="otf", extensions=("otf",)
)
WOFF = MediaType(name="application/font-woff", default_extension="woff", extensions=("woff",))
WOFF2 = MediaType(name="font/woff2", default_extension="woff2", extensions=("woff2",))

MP3 = MediaType(name="audio/mpeg", default_extension="mp3", extensions=("mp3",))
MP4 = MediaType(name="audio/mp4", default_extension="mp4", extensions=("mp4", "m4a"))
OGG = MediaType(name="audio/ogg", default_extension="ogg", extensions=("ogg",))

SMIL = MediaType(name="application/smil+xml", default_extension="smil", extensions=("smil",))
XPGT = MediaType(
    name="application/adobe-page-template+xml",
    default_extension="xpgt",
    extensions=("xpgt",),
)
PLS = MediaType(name="application/pls+xml", default_extension="pls", extensions=("pls",))

KNOWN_MEDIA_TYPES: tuple[MediaType, ...] = (
    XHTML,
    HTML,
    EPUB,
    NCX,
    OPF,
    JAVASCRIPT,
    CSS,
    JPEG,
    PNG,
    GIF,
    SVG,
    TTF,
    OPENTYPE,
    WOFF,
    WOFF2,
    MP3,
    MP4,
    OGG,
    SMIL,
    XPGT,
    PLS,
)

# Aliases seen in the wild for the same formats
_ALIASES = {
    "application/javascript": JAVASCRIPT,
    "font/ttf": TTF,
    "font/otf": OPENTYPE,
    "application/font-sfnt": TTF,
    "font/woff": WOFF,
    "application/vnd.adobe-page-template+xml": XPGT,
}

_BY_NAME: dict[str, MediaType] = {mt.name: mt for mt in KNOWN_MEDIA_TYPES}
_BY_NAME.update(_ALIASES)

_BY_EXTENSION: dict[str, MediaType] = {}
for _media_type in KNOWN_MEDIA_TYPES:
    for _ext in _media_type.extensions:
        _BY_EXTENSION.setdefault(_ext, _media_type)
