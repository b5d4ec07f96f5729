"""Public interface definitions for all external service providers.

Every external API or store the resolver talks to is accessed through the
abstract base classes defined here.  Concrete adapters live in
``src/providers/`` and are wired together in ``src/main.py``, so tests can
inject mocks and backends can be swapped without touching the pipeline.

CONCRETE PROVIDER MAP:
    Interface                  →  Concrete implementation (in src/providers/)
    ─────────────────────────────────────────────────────────────────────
    IIdentificationProvider    →  ACRCloudIdentificationProvider
    ICatalogSearchProvider     →  SpotifyCatalogProvider
    IResolutionStore           →  SQLiteResolutionStore
    ISmartLinkStore            →  SQLiteSmartLinkStore
    ICacheProvider             →  MemoryCacheProvider
"""

from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.catalog_provider import ICatalogSearchProvider
from src.interfaces.identification_provider import IIdentificationProvider
from src.interfaces.resolution_store import LOOKUP_KEYS, IResolutionStore, ISmartLinkStore

__all__ = [
    "LOOKUP_KEYS",
    "ICacheProvider",
    "ICatalogSearchProvider",
    "IIdentificationProvider",
    "IResolutionStore",
    "ISmartLinkStore",
]
