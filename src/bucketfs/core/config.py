"""Configuration management for bucketfs."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    otel_enabled: bool = False
    otel_service_name: str = "bucketfs"
    otel_exporter_endpoint: str = "http://localhost:4317"

    # Listing page size used when a caller asks for "everything"
    list_page_size: int = 1000

    # object_exists waiter used to confirm a rename
    wait_delay_seconds: int = 5
    wait_max_attempts: int = 20

    model_config = {
        "env_prefix": "BUCKETFS_",
        "case_sensitive": False,
    }


settings = Settings()
