"""
Data Ingestion - Collectors Package.

This package contains the concrete remote API clients.

Collectors:
- arrowhead: War season artifacts from the ArrowHead game API
"""

from data_ingestion.collectors.arrowhead import ArrowHeadApiClient, DEFAULT_BASE_URL


__all__ = [
    "ArrowHeadApiClient",
    "DEFAULT_BASE_URL",
]
