"""Top-level package for the news enricher.

Fetches RSS feeds, resolves a representative image for every article,
assigns a topic label, and serves the aggregated list over HTTP.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
