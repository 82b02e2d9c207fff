from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Rio Grande Valley cities ingested when a request does not name its own localities
RGV_LOCALITIES = [
    "Brownsville, TX",
    "Harlingen, TX",
    "McAllen, TX",
    "Edinburg, TX",
    "Weslaco, TX",
    "Mission, TX",
    "San Benito, TX",
    "Pharr, TX",
]


class Settings(BaseSettings):
    database_url: str
    project_name: str = "SipLocal API"
    api_v1_prefix: str = "/api/v1"

    # Supabase authentication configuration
    # SUPABASE_URL: Full Supabase project URL (e.g., https://xxx.supabase.co)
    #   Used to derive JWKS URL and issuer for JWT verification
    supabase_url: str

    # SUPABASE_JWT_AUDIENCE: JWT audience claim to validate (default: "authenticated")
    supabase_jwt_audience: str = "authenticated"

    debug: bool = Field(default=False, alias="DEBUG")

    # Yelp Fusion API (server-side only). Client calls raise UpstreamAPIError(0, ...) if the key is missing.
    yelp_api_key: str | None = None
    yelp_api_base: str = "https://api.yelp.com/v3"
    yelp_search_categories: str = "coffee,cafes"
    # Pause between search pages; Yelp allows 5000 requests/day
    yelp_page_delay_seconds: float = 0.1

    # Ingestion defaults
    ingest_default_localities: list[str] = Field(default_factory=lambda: list(RGV_LOCALITIES))
    ingest_locality_delay_seconds: float = 0.2

    # Gemini is only used to fill businesses.ai_summary out of band (optional)
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"
    # Cooldown in seconds after 429 RESOURCE_EXHAUSTED; used when RetryInfo not present
    gemini_quota_cooldown_seconds: int = 60

    @property
    def supabase_jwks_url(self) -> str:
        """Derive JWKS URL from Supabase URL."""
        return f"{self.supabase_url.rstrip('/')}/auth/v1/.well-known/jwks.json"

    @property
    def supabase_issuer(self) -> str:
        """Derive issuer from Supabase URL."""
        return f"{self.supabase_url.rstrip('/')}/auth/v1"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="forbid"
    )


settings = Settings()
