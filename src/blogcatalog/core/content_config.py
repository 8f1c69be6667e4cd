"""Explicit content collection configuration.

The site assembly code receives a SiteConfig describing which collections
exist and where their files live, instead of reading a global registry.
"""

from dataclasses import dataclass, field
from pathlib import Path

from blogcatalog.config import Settings
from blogcatalog.core.models import COLLECTION_NAME

DEFAULT_PATTERN = "**/*.md"


@dataclass(frozen=True)
class GlobLoader:
    """Discovers collection entries by glob pattern under a base directory."""

    base: Path
    pattern: str = DEFAULT_PATTERN

    def discover(self) -> list[Path]:
        """Return matching files in sorted path order."""
        return sorted(p for p in self.base.glob(self.pattern) if p.is_file())


@dataclass(frozen=True)
class CollectionDefinition:
    name: str
    loader: GlobLoader


def define_collection(base: Path | str, pattern: str = DEFAULT_PATTERN) -> CollectionDefinition:
    """Define the blog collection loaded from markdown files under base."""
    return CollectionDefinition(
        name=COLLECTION_NAME,
        loader=GlobLoader(base=Path(base), pattern=pattern),
    )


@dataclass(frozen=True)
class SiteConfig:
    """Collections available to the site, keyed by collection name."""

    collections: dict[str, CollectionDefinition] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SiteConfig":
        blog = define_collection(settings.content_dir, settings.pattern)
        return cls(collections={blog.name: blog})

    def get(self, name: str = COLLECTION_NAME) -> CollectionDefinition:
        """Return a collection definition by name.

        Raises:
            KeyError: No collection with that name is configured.
        """
        return self.collections[name]
