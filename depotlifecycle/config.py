from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000"
    force_https: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./depot_lifecycle.db"

    # Auth / JWT
    secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 7
    # Comma separated; each value is accepted as a bearer token with every role
    static_tokens: str = ""

    # Example data
    seed_on_startup: bool = False

    # Comma separated feature keys answered with 501, e.g. "estimate.photo"
    unsupported_features: str = ""

    # Estimates
    default_inspection_criteria: str = "IICL"
    max_photo_bytes: int = 5 * 1024 * 1024

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def static_token_list(self) -> list[str]:
        return [t.strip() for t in self.static_tokens.split(",") if t.strip()]

    @property
    def unsupported_feature_set(self) -> set[str]:
        return {f.strip() for f in self.unsupported_features.split(",") if f.strip()}


settings = Settings()
