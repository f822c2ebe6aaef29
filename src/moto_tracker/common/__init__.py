"""Common utilities shared across tracker modules."""

from .config import Config
from .http_client import AsyncHTTPClient
from .renderer import PageRenderer, PlaywrightRenderer

__all__ = ["Config", "AsyncHTTPClient", "PageRenderer", "PlaywrightRenderer"]
