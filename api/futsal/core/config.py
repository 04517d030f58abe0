"""Application configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "One Touch Futsal"
    debug: bool = True
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Database
    database_url: str = "postgresql+asyncpg://futsal:futsal@db:5432/futsal"
    database_echo: bool = False

    # Auth (tokens are issued by the identity provider, verified here)
    secret_key: str = "dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Facility
    timezone: str = "Asia/Kuala_Lumpur"
    cancellation_cutoff_hours: int = 2

    # Write-time slot reservation: per-slot claim rows under a unique constraint.
    # When disabled, bookings are best-effort and races are detected by re-scan.
    slot_claims_enabled: bool = True

    model_config = {"env_prefix": "FS_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
