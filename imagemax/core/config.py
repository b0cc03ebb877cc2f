"""
Application configuration.
All settings are loaded from environment variables (or a local .env file).
"""
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

DEFAULT_AUTH_SECRET = "dev-insecure-secret-change-me"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Defaults are suitable for local development with mock providers;
    production deployments must override the secrets.
    """

    # ===========================================
    # APPLICATION
    # ===========================================
    app_env: str = "local"  # local, production
    # Comma-separated list. Empty = default list in main.py.
    cors_origins: str = ""

    # ===========================================
    # DATABASE
    # ===========================================
    database_url: str = "sqlite:///./imagemax.db"
    # Create tables on startup (local/dev; production uses migrations)
    db_auto_create: bool = True

    # ===========================================
    # IMAGE GENERATION - PROVIDER SELECTION
    # ===========================================
    # Single mode switch: True = simulated providers, no network calls
    mock_images: bool = False
    # Production providers, comma-separated (see ImageProviderFactory.PROVIDERS)
    image_providers: str = "dalle"
    # Optional deadline for a whole batch. None = wait for every provider.
    generation_batch_timeout_seconds: float | None = None
    max_image_size_mb: int = 10

    # ===========================================
    # MOCK PROVIDERS
    # ===========================================
    mock_image_url: str = "https://aaxr3zh5x0.ufs.sh/f/VKo1Weu7HOuKcjeODcnb2YoPNKSWxHC78qjQ4VZF5nRkBDs9"
    mock_failure_rate: float = 0.1

    # ===========================================
    # OPENAI API (Provider: dalle)
    # ===========================================
    openai_api_key: str = ""
    openai_api_base_url: str | None = None
    openai_image_model: str = "dall-e-2"  # dall-e-2, dall-e-3
    openai_image_size: str = "1024x1024"
    openai_request_timeout: float = 120.0

    # ===========================================
    # STORAGE
    # ===========================================
    storage_backend: str = "local"  # local, supabase
    storage_base_path: str = "data/generated_images"
    storage_public_base_url: str = "http://localhost:8000/static/generated"
    supabase_url: str = ""
    supabase_service_key: str = ""
    supabase_bucket_name: str = "imagemax"
    supabase_timeout: float = 30.0

    # ===========================================
    # AUTH (tokens are issued by the identity service)
    # ===========================================
    auth_secret_key: str = DEFAULT_AUTH_SECRET
    auth_token_ttl: int = 86400  # 24 hours

    # ===========================================
    # LOGGING
    # ===========================================
    log_level: str = "INFO"
    log_file: str | None = None
    log_max_bytes: int = 10_000_000
    log_backup_count: int = 5

    @field_validator("storage_backend")
    @classmethod
    def normalize_storage_backend(cls, v: str) -> str:
        value = v.lower().strip()
        if value not in ("local", "supabase"):
            raise ValueError("storage_backend must be 'local' or 'supabase'")
        return value

    @field_validator("mock_failure_rate")
    @classmethod
    def validate_failure_rate(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("mock_failure_rate must be between 0 and 1")
        return v

    @field_validator("generation_batch_timeout_seconds")
    @classmethod
    def validate_batch_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("generation_batch_timeout_seconds must be greater than 0")
        return v

    @model_validator(mode="after")
    def require_secret_in_production(self) -> "Settings":
        if self.app_env == "production" and self.auth_secret_key == DEFAULT_AUTH_SECRET:
            raise ValueError("AUTH_SECRET_KEY must be set when APP_ENV=production")
        return self

    @property
    def image_provider_names(self) -> list[str]:
        """Production provider names in dispatch order."""
        return [name.strip().lower() for name in self.image_providers.split(",") if name.strip()]

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
