"""Enrichment processors: text normalization, image extraction, classification."""

from .normalize import build_summary, clean_html_to_text, normalize_plain_text
from .urls import resolve_url, select_best_from_srcset
from .images import ImageExtractor, find_main_image

__all__ = [
    "build_summary",
    "clean_html_to_text",
    "normalize_plain_text",
    "resolve_url",
    "select_best_from_srcset",
    "ImageExtractor",
    "find_main_image",
]
