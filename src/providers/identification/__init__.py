"""Identification provider implementations.

ACRCloudIdentificationProvider is the primary source: it maps a fingerprint
ID, ISRC, source URL or hint query to a track with cross-platform links.
"""

from src.providers.identification.acrcloud_provider import ACRCloudIdentificationProvider

__all__ = ["ACRCloudIdentificationProvider"]
