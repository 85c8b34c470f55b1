"""Configuration settings for the application."""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Auth0 Configuration (optional, guest user when unset)
    auth0_domain: Optional[str] = None
    auth0_audience: str = "https://towgo-api"

    # Id of the user that unauthenticated requests act as
    guest_user_id: str = "guest"

    # Perplexity API (query enhancement, recommendations, web search)
    perplexity_api_key: Optional[str] = None
    perplexity_model: str = "llama-3.1-sonar-large-128k-online"
    perplexity_search_model: str = "llama-3.1-sonar-small-128k-online"
    perplexity_timeout: float = 30.0

    # Smithery registry
    smithery_api_key: Optional[str] = None

    # Google Maps (geocoding + places text search)
    google_maps_api_key: Optional[str] = None

    # Stripe checkout
    stripe_secret_key: Optional[str] = None

    # Outbound HTTP timeout for everything else
    http_timeout: float = 15.0

    # Web search
    websearch_providers: str = "perplexity,bing,directory"
    websearch_focus_term: str = "tow truck"

    # Redis Configuration
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None

    # Cache TTL for web search results
    cache_ttl_seconds: int = 900
    # Location shares never live longer than a day
    location_share_max_ttl_seconds: int = 86400

    # FastAPI Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = True

    # CORS Configuration
    frontend_url: str = "http://localhost:5173"

    # Environment
    environment: str = "development"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./towgo.db"

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def provider_names(self) -> List[str]:
        """Configured web search providers, in fan-out order."""
        return [
            name.strip().lower()
            for name in self.websearch_providers.split(",")
            if name.strip()
        ]


# Global settings instance
settings = Settings()
