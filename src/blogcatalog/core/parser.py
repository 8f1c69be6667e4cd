"""Frontmatter splitting and Markdown rendering for blog posts."""

import html
import re
from typing import Any
from xml.etree.ElementTree import Element

import yaml
from markdown import Markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import SimpleTagInlineProcessor
from markdown.treeprocessors import Treeprocessor

from blogcatalog.core.models import (
    BlogFrontmatter,
    Heading,
    RenderedContent,
    RenderMetadata,
)

# Leading YAML block delimited by --- lines; the block may be empty
FRONTMATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(.*?)\r?\n?^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)

# Pattern for strikethrough: ~~text~~
# Group 2 must contain the text (SimpleTagInlineProcessor expectation)
STRIKETHROUGH_PATTERN = r"(~~)(.*?)~~"

# URL scheme such as https: or data:, but not a Windows drive letter
REMOTE_PATH_PATTERN = re.compile(r"^(?:[a-zA-Z][a-zA-Z\d+\-.]+:|//)")


def split_frontmatter(text: str) -> tuple[Any, str]:
    """Split raw file text into parsed frontmatter and markdown body.

    Args:
        text: Full file content.

    Returns:
        Tuple of (parsed YAML, body). The YAML value is whatever the
        block contains, or an empty dict when there is no block.

    Raises:
        yaml.YAMLError: The frontmatter block is not valid YAML.
    """
    text = text.removeprefix("\ufeff")
    match = FRONTMATTER_PATTERN.match(text)
    if not match:
        return {}, text
    raw = yaml.safe_load(match.group(1))
    return ({} if raw is None else raw), text[match.end() :]


def is_remote_path(src: str) -> bool:
    """Return True if an image source points outside the site."""
    return bool(REMOTE_PATH_PATTERN.match(src))


class StrikethroughExtension(Extension):
    """Markdown extension for ~~strikethrough~~ text."""

    def extendMarkdown(self, md: Markdown) -> None:
        """Add strikethrough pattern to markdown parser."""
        md.inlinePatterns.register(
            SimpleTagInlineProcessor(STRIKETHROUGH_PATTERN, "del"),
            "strikethrough",
            50,
        )


class ImageCollectorTreeprocessor(Treeprocessor):
    """Record the src of every image in document order."""

    def run(self, root: Element) -> None:
        for img in root.iter("img"):
            src = (img.get("src") or "").strip()
            if not src:
                continue
            if is_remote_path(src):
                target = self.md.remote_image_paths
            else:
                target = self.md.local_image_paths
            if src not in target:
                target.append(src)


class ImageCollectorExtension(Extension):
    """Markdown extension exposing local and remote image paths.

    After conversion the parser carries ``local_image_paths`` and
    ``remote_image_paths`` lists, like the toc extension's ``toc_tokens``.
    """

    def extendMarkdown(self, md: Markdown) -> None:
        md.registerExtension(self)
        self.md = md
        self.reset()
        # After inline processing so reference-style images are resolved
        md.treeprocessors.register(ImageCollectorTreeprocessor(md), "image_collector", 5)

    def reset(self) -> None:
        self.md.local_image_paths = []
        self.md.remote_image_paths = []


def create_parser() -> Markdown:
    """Create a Markdown parser for blog post bodies."""
    return Markdown(
        extensions=[
            # Core formatting
            "extra",  # Includes: abbreviations, attr_list, def_list, fenced_code, footnotes, md_in_html, tables
            "sane_lists",  # Better list handling
            "smarty",  # Smart quotes and dashes
            "toc",  # Heading ids and the document outline
            # PyMdown extensions
            "pymdownx.tasklist",  # Task lists with checkboxes
            # Custom extensions
            StrikethroughExtension(),  # ~~strikethrough~~
            ImageCollectorExtension(),  # local/remote image paths
        ]
    )


def flatten_toc_tokens(tokens: list[dict]) -> list[Heading]:
    """Flatten nested toc tokens into an ordered list of headings."""
    headings: list[Heading] = []
    for token in tokens:
        headings.append(
            Heading(
                depth=token["level"],
                slug=token["id"],
                text=html.unescape(token["name"]),
            )
        )
        headings.extend(flatten_toc_tokens(token.get("children", [])))
    return headings


def render_markdown(body: str, frontmatter: BlogFrontmatter) -> RenderedContent:
    """Render a post body to HTML with its outline and image references.

    Args:
        body: Markdown text without the frontmatter block.
        frontmatter: Validated frontmatter, carried into the metadata.

    Returns:
        Rendered HTML plus metadata derived from the body.
    """
    parser = create_parser()
    content = parser.convert(body)
    local_paths = list(parser.local_image_paths)
    remote_paths = list(parser.remote_image_paths)
    return RenderedContent(
        html=content,
        metadata=RenderMetadata(
            headings=flatten_toc_tokens(getattr(parser, "toc_tokens", [])),
            local_image_paths=local_paths,
            remote_image_paths=remote_paths,
            frontmatter=frontmatter,
            image_paths=local_paths + remote_paths,
        ),
    )
