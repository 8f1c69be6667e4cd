"""Error types raised or reported by the content catalog."""

from pathlib import Path


class CatalogError(Exception):
    """Base class for all catalog errors."""


class LoadError(CatalogError):
    """A file could not be turned into a post.

    Load errors are collected per file and returned alongside the posts
    that did load; they are never raised out of a load.
    """

    def __init__(self, file_path: Path | str, message: str):
        self.file_path = Path(file_path)
        self.message = message
        super().__init__(f"{self.file_path}: {message}")


class ValidationError(LoadError):
    """A frontmatter field is missing or has the wrong type."""

    def __init__(self, file_path: Path | str, field: str, message: str):
        self.field = field
        super().__init__(file_path, f"{field}: {message}")
        self.message = message


class InvalidArgumentError(CatalogError):
    """Query options are malformed."""

    def __init__(self, argument: str, message: str):
        self.argument = argument
        self.message = message
        super().__init__(f"invalid {argument!r}: {message}")


class NotFoundError(CatalogError):
    """No post matches the requested id or slug."""

    def __init__(self, post_id: str):
        self.post_id = post_id
        super().__init__(f"post not found: {post_id!r}")
