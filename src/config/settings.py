"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Values are read from (highest priority first):
#
#   1. Environment variables, e.g. ACRCLOUD_BEARER_TOKEN=...
#   2. The .env file in the project root (local development only)
#   3. The defaults below
#
# Field ``acrcloud_bearer_token`` maps to env var ``ACRCLOUD_BEARER_TOKEN``.
# An empty credential means "not configured": the provider reports
# is_available() == False and the pipeline treats that source as absent.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Resolver settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Identification (ACRCloud external metadata) ===
    acrcloud_base_url: str = "https://eu-api-v2.acrcloud.com"
    acrcloud_bearer_token: str = ""

    # === Catalog search (Spotify Web API, client credentials) ===
    spotify_client_id: str = ""
    spotify_client_secret: str = ""

    # === Provider calls ===
    provider_timeout_seconds: float = 12.0

    # === Storage ===
    resolver_db_path: str = "data/resolver.db"

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_available_providers(self) -> list[str]:
        """Return the names of external providers that have credentials configured."""
        providers: list[str] = []
        if self.acrcloud_bearer_token:
            providers.append("acrcloud")
        if self.spotify_client_id and self.spotify_client_secret:
            providers.append("spotify")
        return providers
