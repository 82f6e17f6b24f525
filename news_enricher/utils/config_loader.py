from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional
from urllib.parse import urlparse

import yaml

from ..models import FeedSource


class ConfigError(Exception):
    """Raised when the configuration file is invalid or missing required fields."""


REQUIRED_FIELDS = {"name", "url", "type"}
ALLOWED_TYPES = {"rss"}


@dataclass(slots=True)
class SourcesConfig:
    sources: List[FeedSource] = field(default_factory=list)
    # Optional override of the keyword classifier table
    categories: Optional[Dict[str, List[str]]] = None

    @property
    def enabled_sources(self) -> List[FeedSource]:
        return [s for s in self.sources if s.enabled]


def _validate_source_dict(entry: dict) -> None:
    """Validate a single source mapping from YAML.

    Required fields: name (str), url (http/https), type ('rss').
    Optional fields:
      - max_items: positive int, caps how many entries of the feed get enriched
      - enabled: bool
    """
    missing = REQUIRED_FIELDS - set(entry)
    if missing:
        raise ConfigError(f"Missing required fields: {sorted(missing)} in {entry}")

    if entry["type"] not in ALLOWED_TYPES:
        raise ConfigError(f"Invalid type '{entry['type']}'. Must be one of {sorted(ALLOWED_TYPES)}.")

    url_str = str(entry["url"]).strip()
    parsed = urlparse(url_str)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid URL '{url_str}'. Must be absolute http(s) URL.")

    max_items = entry.get("max_items")
    if max_items is not None:
        if isinstance(max_items, bool) or not isinstance(max_items, int) or max_items <= 0:
            raise ConfigError(f"'max_items' must be a positive integer, got {max_items!r}")

    enabled = entry.get("enabled")
    if enabled is not None and not isinstance(enabled, bool):
        raise ConfigError(f"'enabled' must be a boolean, got {enabled!r}")


def _coerce_source(entry: dict) -> FeedSource:
    enabled = entry.get("enabled")
    return FeedSource(
        name=str(entry["name"]).strip(),
        url=str(entry["url"]).strip(),
        type=str(entry["type"]).strip(),
        max_items=entry.get("max_items"),
        enabled=True if enabled is None else enabled,
    )


def _coerce_categories(raw: object) -> Dict[str, List[str]]:
    if not isinstance(raw, dict) or not raw:
        raise ConfigError("'categories' must be a non-empty mapping of category to keyword list")
    categories: Dict[str, List[str]] = {}
    for name, keywords in raw.items():
        if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
            raise ConfigError(f"Keywords for category '{name}' must be a list of strings")
        categories[str(name).strip()] = [k.strip().lower() for k in keywords if k.strip()]
    return categories


def load_sources_config(path: Path | str) -> SourcesConfig:
    """Load ``sources.yaml`` into typed ``FeedSource`` instances.

    YAML structure:
      - Top-level mapping
      - Key ``sources``: list of source mappings with fields
          - name: string (required)
          - url: http/https URL (required)
          - type: 'rss' (required)
          - max_items: int (optional)
          - enabled: bool (optional, default true)
      - Key ``categories`` (optional): mapping of category name to keyword list

    Unknown top-level keys are ignored for forward compatibility.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Top level of the configuration must be a mapping")

    sources_raw: Iterable[dict] = data.get("sources") or []
    if not isinstance(sources_raw, list):
        raise ConfigError("'sources' must be a list in the YAML configuration")

    sources: List[FeedSource] = []
    for item in sources_raw:
        if not isinstance(item, dict):
            raise ConfigError(f"Each source must be a mapping, got: {type(item)}")
        _validate_source_dict(item)
        sources.append(_coerce_source(item))

    categories = None
    if data.get("categories") is not None:
        categories = _coerce_categories(data["categories"])

    return SourcesConfig(sources=sources, categories=categories)
