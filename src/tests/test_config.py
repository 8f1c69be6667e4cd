"""Unit tests for application configuration."""

from pathlib import Path
from unittest.mock import patch

import pytest

from blogcatalog.config import Settings
from blogcatalog.core.content_config import SiteConfig


class TestSettings:
    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            s = Settings()
            assert s.content_dir == Path("src/blog")
            assert s.pattern == "**/*.md"
            assert s.load_workers == 4
            assert s.debug is False
            assert s.app_title == "Blog"

    def test_from_env(self):
        env = {
            "BLOG_CONTENT_DIR": "/tmp/posts",
            "BLOG_PATTERN": "*.md",
            "BLOG_LOAD_WORKERS": "8",
            "BLOG_DEBUG": "true",
            "BLOG_APP_TITLE": "MyBlog",
        }
        with patch.dict("os.environ", env, clear=True):
            s = Settings()
            assert s.content_dir == Path("/tmp/posts")
            assert s.pattern == "*.md"
            assert s.load_workers == 8
            assert s.debug is True
            assert s.app_title == "MyBlog"

    def test_debug_false_values(self):
        with patch.dict("os.environ", {"BLOG_DEBUG": "false"}, clear=True):
            s = Settings()
            assert s.debug is False


class TestSiteConfig:
    def test_from_settings_defines_blog_collection(self):
        with patch.dict("os.environ", {"BLOG_CONTENT_DIR": "/tmp/posts"}, clear=True):
            config = SiteConfig.from_settings(Settings())
        assert list(config.collections) == ["blog"]
        blog = config.get("blog")
        assert blog.name == "blog"
        assert blog.loader.base == Path("/tmp/posts")
        assert blog.loader.pattern == "**/*.md"

    def test_get_unknown_collection(self):
        with pytest.raises(KeyError):
            SiteConfig().get("docs")
