"""
Rankings Scraper - yearly ranked listings collected into multi-year series.

Architecture:
- core/: Stable foundation (models, errors, HTTP client, cache, consolidation)
- navigators/: Pagination over year-specific listing pages
- parsers/: Heuristic extraction of ranked entries from listing markup
- config/: YAML-driven settings
- web/: aiohttp API over the pipeline
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
