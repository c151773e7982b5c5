from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    """Settings for the API client wrappers, read from MARKETPLACE_* variables."""

    api_base_url: str = "http://localhost:3002/api"

    # Per-call timeouts in seconds
    lookup_timeout: float = 3.0
    read_timeout: float = 5.0
    write_timeout: float = 10.0

    # Delay between a chat send and the re-fetch that replaces optimistic entries
    chat_reconcile_delay: float = 0.5

    comment_poll_interval: float = 5.0

    model_config = {
        "env_prefix": "MARKETPLACE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }
