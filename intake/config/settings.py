from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "food_vision"
    db_username: str = "food_vision"
    db_password: str = "secret"
    db_pool_timeout_seconds: float = 30.0

    pipeline_concurrency: int = 3
    min_images_per_item: int = 4

    transcoder_engine: str = "pillow"
    compression_max_width: int = 1920
    compression_max_height: int = 1080
    compression_quality: int = 85

    storage_backend: str = "s3"
    storage_bucket: str = "food-vision-images"
    storage_region: str = "us-east-1"
    storage_endpoint_url: str = ""
    storage_access_key: str = ""
    storage_secret_key: str = ""
    storage_public_base_url: str = ""
    storage_local_root: str = "./storage"

    notifier_backend: str = "webhook"
    notifier_webhook_url: str = ""
    notifier_timeout_seconds: int = 10
    notification_source_tag: str = "enhanced-customer-upload-form"

    initial_submission_status: str = "pending"

    @field_validator("compression_quality")
    @classmethod
    def quality_must_be_percentage(cls, v: int) -> int:
        if not 1 <= v <= 100:
            raise ValueError("compression_quality must be between 1 and 100")
        return v

    @field_validator("pipeline_concurrency", "min_images_per_item")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("value must be at least 1")
        return v
