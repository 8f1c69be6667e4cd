"""Data models for the blog catalog."""

from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

COLLECTION_NAME = "blog"


class _Model(BaseModel):
    """Frozen model serialized with camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class BlogFrontmatter(_Model):
    """Validated frontmatter of a blog post."""

    title: str
    pub_date: date
    description: str
    author: str
    tags: tuple[str, ...] = ()
    image: str | None = None


class Heading(_Model):
    """One entry of a document outline."""

    depth: int
    slug: str
    text: str


class RenderMetadata(_Model):
    headings: tuple[Heading, ...] = ()
    local_image_paths: tuple[str, ...] = ()
    remote_image_paths: tuple[str, ...] = ()
    frontmatter: BlogFrontmatter
    image_paths: tuple[str, ...] = ()


class RenderedContent(_Model):
    html: str
    metadata: RenderMetadata


class BlogPost(_Model):
    """A loaded and rendered blog post."""

    id: str
    data: BlogFrontmatter
    body: str
    file_path: Path
    digest: str
    rendered: RenderedContent
    collection: Literal["blog"] = COLLECTION_NAME

    @property
    def slug(self) -> str:
        """Return the URL slug, which is the post id."""
        return self.id

    def summary(self) -> "BlogPostSummary":
        """Project the post down to its listing fields."""
        return BlogPostSummary(id=self.id, slug=self.slug, data=self.data)


class BlogPostSummary(_Model):
    """Listing projection of a post: no body, no rendered HTML."""

    id: str
    slug: str
    data: BlogFrontmatter


class BlogPostParams(_Model):
    slug: str


class BlogPostProps(_Model):
    post: BlogPost


class BlogPostPath(_Model):
    """Route parameters and props for one statically generated post page."""

    params: BlogPostParams
    props: BlogPostProps


class BlogQueryOptions(_Model):
    """Filter, sort and limit options for a catalog query.

    Field types are kept loose so that semantic checks happen in one
    place (``ContentCatalog.query``) and surface as InvalidArgumentError.
    """

    model_config = ConfigDict(extra="forbid")

    tag: str | None = None
    tags: list[str] | None = None
    author: str | None = None
    limit: int | None = None
    sort_by: str | None = None
    sort_order: str = "asc"


def _is_object(value: Any) -> bool:
    return isinstance(value, (Mapping, BaseModel)) or hasattr(value, "__dict__")


def is_blog_post(value: Any) -> bool:
    """Return True if value has the shape of a blog post.

    Accepts BlogPost instances, plain mappings and attribute-style objects
    (dataclasses, namespaces), as produced by loaders whose output is not
    guaranteed to match the model.
    """
    if isinstance(value, BlogPost):
        return True
    if isinstance(value, Mapping):
        get = value.get
    elif hasattr(value, "__dict__"):
        def get(name: str) -> Any:
            return getattr(value, name, None)
    else:
        return False
    return (
        isinstance(get("id"), str)
        and _is_object(get("data"))
        and isinstance(get("body"), str)
        and get("collection") == COLLECTION_NAME
    )
