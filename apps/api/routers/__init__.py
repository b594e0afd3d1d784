"""Routers package."""

from . import (
    health,
    auth,
    content,
    search,
    submissions,
    rss,
    metadata,
)
