from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    env: str = "development"
    database_url: str = "sqlite+aiosqlite:///./marketplace.db"
    redis_url: str = "redis://localhost:6379/0"
    log_level: str = "INFO"

    # All REST routes are mounted under this prefix; /health and /ws are not.
    api_prefix: str = "/api"

    # Insert the default testimonials/banners/sponsors when their tables are empty
    seed_defaults: bool = True

    # Rate limiting (token buckets in Redis)
    rate_limit_enabled: bool = True
    rate_limit_admin_capacity: int = 100
    rate_limit_admin_refill_per_min: int = 60
    rate_limit_write_capacity: int = 60
    rate_limit_write_refill_per_min: int = 30

    # CORS
    cors_allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Body size limit for POST/PUT/PATCH
    max_body_bytes: int = 1_048_576

    # Seconds a content-change event may take to reach one socket before it is dropped
    broadcast_send_timeout: float = 5.0

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
