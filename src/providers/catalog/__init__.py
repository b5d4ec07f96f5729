"""Catalog search provider implementations.

SpotifyCatalogProvider is the secondary source, consulted when
identification fails or is not confident enough.
"""

from src.providers.catalog.spotify_provider import SpotifyCatalogProvider

__all__ = ["SpotifyCatalogProvider"]
