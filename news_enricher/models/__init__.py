"""Typed models used across the application."""

from .source import FeedSource, SourceType
from .article import ArticleRecord, FeedItem, ImageCandidate

__all__ = ["FeedSource", "SourceType", "ArticleRecord", "FeedItem", "ImageCandidate"]
