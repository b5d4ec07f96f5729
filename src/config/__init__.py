"""Configuration module - exports Settings, load_config, ResolverConfig and a module-level singleton."""

from src.config.loader import load_config
from src.config.resolver_config import ResolverConfig
from src.config.settings import Settings

settings = Settings()

__all__ = ["ResolverConfig", "Settings", "load_config", "settings"]
