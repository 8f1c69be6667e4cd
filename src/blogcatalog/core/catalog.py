"""Content catalog: load, validate, render and query blog posts."""

import hashlib
import logging
import re
from collections import Counter
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable

import pydantic
import yaml

from blogcatalog.core.content_config import CollectionDefinition, SiteConfig
from blogcatalog.core.errors import (
    InvalidArgumentError,
    LoadError,
    NotFoundError,
    ValidationError,
)
from blogcatalog.core.models import (
    COLLECTION_NAME,
    BlogFrontmatter,
    BlogPost,
    BlogPostParams,
    BlogPostPath,
    BlogPostProps,
    BlogPostSummary,
    BlogQueryOptions,
    RenderedContent,
)
from blogcatalog.core.parser import render_markdown, split_frontmatter
from blogcatalog.core.schema import Invalid, validate_frontmatter

logger = logging.getLogger(__name__)

SORT_KEYS: dict[str, Callable[[BlogPost], Any]] = {
    "pubDate": lambda post: post.data.pub_date,
    "title": lambda post: post.data.title,
}
SORT_ORDERS = ("asc", "desc")


def slugify_segment(segment: str) -> str:
    """Slugify one path segment: lowercase, spaces to dashes, no punctuation."""
    slug = re.sub(r"[^\w\s-]", "", segment.strip().lower())
    return re.sub(r"\s", "-", slug)


def derive_id(file_path: Path, base: Path) -> str:
    """Derive a post id from its path relative to the collection base.

    ``2024/Hello World.md`` becomes ``2024/hello-world`` and
    ``guides/index.md`` becomes ``guides``.
    """
    parts = list(file_path.relative_to(base).with_suffix("").parts)
    if len(parts) > 1 and parts[-1].lower() == "index":
        parts.pop()
    return "/".join(s for s in (slugify_segment(p) for p in parts) if s)


def compute_digest(text: str) -> str:
    """Return a short content hash of the raw file text."""
    return hashlib.blake2b(text.encode("utf-8"), digest_size=8).hexdigest()


def _read_file(path: Path) -> str | LoadError:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return LoadError(path, f"cannot read file: {e}")


@dataclass(frozen=True)
class LoadResult:
    """Posts that loaded, keyed by id in discovery order, and per-file errors."""

    posts: Mapping[str, BlogPost]
    errors: tuple[LoadError, ...] = ()


class RenderCache:
    """Rendered content memoized by post id and digest."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, RenderedContent]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_render(
        self, post_id: str, digest: str, body: str, data: BlogFrontmatter
    ) -> RenderedContent:
        """Return cached output if the digest is unchanged, else re-render."""
        entry = self._entries.get(post_id)
        if entry is not None and entry[0] == digest:
            logger.debug("Render cache hit for %s", post_id)
            return entry[1]
        rendered = render_markdown(body, data)
        self._entries[post_id] = (digest, rendered)
        return rendered

    def retain(self, post_ids: set[str]) -> None:
        """Drop entries for posts that no longer exist."""
        for post_id in list(self._entries):
            if post_id not in post_ids:
                del self._entries[post_id]


class ContentCatalog:
    """The blog collection loaded from disk.

    A catalog is filled by ``load()`` and read through ``query()``,
    ``get()``, ``static_paths()`` and ``tag_counts()``. Each load replaces
    the previous collection wholesale; loaded posts are never mutated.
    """

    def __init__(self, collection: CollectionDefinition, workers: int = 4):
        self.collection = collection
        self.workers = workers
        self.render_cache = RenderCache()
        self._result = LoadResult(posts=MappingProxyType({}))

    @classmethod
    def from_config(cls, config: SiteConfig, workers: int = 4) -> "ContentCatalog":
        """Create a catalog for the blog collection of a site configuration."""
        return cls(config.get(COLLECTION_NAME), workers=workers)

    @property
    def posts(self) -> Mapping[str, BlogPost]:
        return self._result.posts

    @property
    def errors(self) -> tuple[LoadError, ...]:
        return self._result.errors

    def load(self) -> LoadResult:
        """Load every matching file, isolating failures per file.

        Returns:
            LoadResult with the posts that validated and one error per
            rejected file field.
        """
        loader = self.collection.loader
        if not loader.base.is_dir():
            error = LoadError(loader.base, "content directory does not exist")
            logger.warning("%s", error)
            self._result = LoadResult(posts=MappingProxyType({}), errors=(error,))
            return self._result

        paths = loader.discover()
        with ThreadPoolExecutor(max_workers=max(1, self.workers)) as pool:
            texts = list(pool.map(_read_file, paths))

        posts: dict[str, BlogPost] = {}
        errors: list[LoadError] = []
        for path, text in zip(paths, texts):
            if isinstance(text, LoadError):
                outcome: BlogPost | list[LoadError] = [text]
            else:
                outcome = self._build_post(path, text, posts)
            if isinstance(outcome, BlogPost):
                posts[outcome.id] = outcome
                continue
            for error in outcome:
                logger.warning("Skipping %s", error)
            errors.extend(outcome)

        self.render_cache.retain(set(posts))
        self._result = LoadResult(posts=MappingProxyType(posts), errors=tuple(errors))
        logger.info(
            "Loaded %d posts from %s (%d errors)",
            len(posts),
            loader.base,
            len(errors),
        )
        return self._result

    def _build_post(
        self, path: Path, text: str, loaded: Mapping[str, BlogPost]
    ) -> BlogPost | list[LoadError]:
        try:
            raw, body = split_frontmatter(text)
        except (yaml.YAMLError, ValueError) as e:
            # PyYAML raises ValueError for out-of-range dates such as 2024-13-45
            return [LoadError(path, f"malformed frontmatter: {e}")]

        result = validate_frontmatter(raw, path)
        if isinstance(result, Invalid):
            return list(result.errors)

        slug = raw.get("slug")
        if isinstance(slug, str) and slug.strip("/ "):
            post_id = slug.strip("/ ")
        else:
            post_id = derive_id(path, self.collection.loader.base)
        if not post_id:
            return [ValidationError(path, "id", "cannot derive an id from the file path")]
        if post_id in loaded:
            return [
                ValidationError(
                    path,
                    "id",
                    f"duplicate id {post_id!r}, already used by {loaded[post_id].file_path}",
                )
            ]

        digest = compute_digest(text)
        return BlogPost(
            id=post_id,
            data=result.data,
            body=body,
            file_path=path,
            digest=digest,
            rendered=self.render_cache.get_or_render(post_id, digest, body, result.data),
        )

    def query(
        self, options: BlogQueryOptions | Mapping[str, Any] | None = None, **kwargs: Any
    ) -> list[BlogPostSummary]:
        """Filter, sort and limit the loaded posts.

        Options may be given as a BlogQueryOptions, a mapping using either
        camelCase or snake_case keys, keyword arguments, or a mix.

        Raises:
            InvalidArgumentError: The options are malformed.
        """
        opts = coerce_query_options(options, **kwargs)

        posts = list(self.posts.values())
        if opts.tag is not None:
            posts = [p for p in posts if opts.tag in p.data.tags]
        if opts.tags:
            # every requested tag must be present
            posts = [p for p in posts if all(t in p.data.tags for t in opts.tags)]
        if opts.author is not None:
            posts = [p for p in posts if p.data.author == opts.author]
        if opts.sort_by is not None:
            posts.sort(key=SORT_KEYS[opts.sort_by], reverse=opts.sort_order == "desc")
        if opts.limit is not None:
            posts = posts[: opts.limit]
        return [p.summary() for p in posts]

    def get(self, id_or_slug: str) -> BlogPost:
        """Get a single post by id or slug.

        Raises:
            NotFoundError: No post has that id.
        """
        post = self.posts.get(id_or_slug.strip("/"))
        if post is None:
            raise NotFoundError(id_or_slug)
        return post

    def static_paths(self) -> list[BlogPostPath]:
        """Return one route entry per post for static page generation."""
        return [
            BlogPostPath(
                params=BlogPostParams(slug=post.slug),
                props=BlogPostProps(post=post),
            )
            for post in self.posts.values()
        ]

    def tag_counts(self) -> dict[str, int]:
        """Count posts per tag, most used first, then by tag name."""
        counts: Counter[str] = Counter()
        for post in self.posts.values():
            counts.update(set(post.data.tags))
        return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))


def coerce_query_options(
    options: BlogQueryOptions | Mapping[str, Any] | None = None, **kwargs: Any
) -> BlogQueryOptions:
    """Build checked query options from any accepted input form.

    Raises:
        InvalidArgumentError: The options are malformed.
    """
    if isinstance(options, BlogQueryOptions):
        data: dict[str, Any] = options.model_dump(exclude_unset=True)
    elif isinstance(options, Mapping):
        data = dict(options)
    elif options is None:
        data = {}
    else:
        raise InvalidArgumentError("options", f"unsupported type {type(options).__name__}")
    # camelCase and snake_case keys name the same option; later values win
    field_names = {
        info.alias: name for name, info in BlogQueryOptions.model_fields.items() if info.alias
    }
    data = {field_names.get(key, key): value for key, value in data.items()}
    data.update((field_names.get(key, key), value) for key, value in kwargs.items())

    try:
        opts = BlogQueryOptions.model_validate(data)
    except pydantic.ValidationError as e:
        detail = e.errors()[0]
        argument = ".".join(str(part) for part in detail["loc"]) or "options"
        raise InvalidArgumentError(argument, detail["msg"]) from e

    if opts.limit is not None and opts.limit < 0:
        raise InvalidArgumentError("limit", "must not be negative")
    if opts.sort_by is not None and opts.sort_by not in SORT_KEYS:
        raise InvalidArgumentError("sortBy", f"must be one of {sorted(SORT_KEYS)}")
    if opts.sort_order not in SORT_ORDERS:
        raise InvalidArgumentError("sortOrder", f"must be one of {list(SORT_ORDERS)}")
    return opts
