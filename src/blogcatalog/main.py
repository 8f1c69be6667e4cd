"""Blog catalog FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query

from blogcatalog.config import settings
from blogcatalog.core.catalog import ContentCatalog
from blogcatalog.core.content_config import SiteConfig
from blogcatalog.core.errors import InvalidArgumentError, NotFoundError, ValidationError
from blogcatalog.core.models import BlogPost, BlogPostSummary

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: load the blog collection."""
    if settings.debug:
        logging.getLogger("blogcatalog").setLevel(logging.DEBUG)
    catalog.load()
    yield


# Initialize app
app = FastAPI(
    title=settings.app_title,
    debug=settings.debug,
    lifespan=lifespan,
)

# Initialize catalog
site_config = SiteConfig.from_settings(settings)
catalog = ContentCatalog.from_config(site_config, workers=settings.load_workers)


@app.get("/api/posts", response_model=list[BlogPostSummary])
async def list_posts(
    tag: str | None = None,
    tags: list[str] | None = Query(None),
    author: str | None = None,
    limit: int | None = None,
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder"),
):
    """List post summaries matching the query options."""
    try:
        return catalog.query(
            tag=tag,
            tags=tags,
            author=author,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/api/posts/{slug:path}", response_model=BlogPost)
async def get_post(slug: str):
    """Full post including rendered HTML and metadata."""
    try:
        return catalog.get(slug)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/api/tags")
async def list_tags() -> dict[str, int]:
    """Number of posts per tag."""
    return catalog.tag_counts()


@app.get("/api/load-errors")
async def list_load_errors() -> list[dict]:
    """Files rejected by the last load."""
    return [
        {
            "filePath": str(error.file_path),
            "field": error.field if isinstance(error, ValidationError) else None,
            "message": error.message,
        }
        for error in catalog.errors
    ]
