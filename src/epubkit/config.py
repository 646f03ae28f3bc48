"""Reader configuration."""

import os
from pathlib import Path

from pydantic import BaseModel, Field

from epubkit.models.metadata import DEFAULT_LANGUAGE

CACHE_DIR_ENV = "EPUBKIT_CACHE_DIR"


def default_cache_dir() -> Path:
    override = os.environ.get(CACHE_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".cache" / "epubkit"


class ReaderConfig(BaseModel):
    """Settings shared by the parsing pipeline."""

    # Pixel size of 1em
    base_font_size: float = 16.0
    default_language: str = DEFAULT_LANGUAGE
    paragraph_font_size: float = 16.0
    heading_font_sizes: dict[int, float] = Field(
        default_factory=lambda: {1: 28.0, 2: 22.0, 3: 18.0, 4: 14.0}
    )
    cache_dir: Path = Field(default_factory=default_cache_dir)

    def heading_font_size(self, level: int) -> float:
        return self.heading_font_sizes.get(level, self.paragraph_font_size)
