"""Application configuration and settings."""

from pathlib import Path
from typing import Literal, Optional, Set

from pydantic import BaseModel
from pydantic_settings import BaseSettings


class AmsSettings(BaseModel):
    """Media Services account and service-principal credentials."""

    account_name: str = ""
    resource_group: str = ""
    subscription_id: str = ""
    arm_endpoint: str = "https://management.azure.com/"
    aad_tenant_id: str = ""
    aad_client_id: str = ""
    aad_secret: str = ""

    def missing_fields(self) -> list[str]:
        """Names of required fields that are still empty."""
        required = ("account_name", "resource_group", "subscription_id",
                    "aad_tenant_id", "aad_client_id", "aad_secret")
        return [name for name in required if not getattr(self, name)]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Remote backend
    backend: Literal["azure", "memory"] = "azure"
    ams: AmsSettings = AmsSettings()

    # API Configuration
    function_keys: str = ""  # Comma-separated valid function keys
    cors_origins: str = "*"  # Comma-separated allowed origins
    max_file_size_mb: int = 500

    # Results
    output_dir: Path = Path("Output")
    insights_file_name: str = "insights.json"
    adult_score_threshold: float = 0.5

    # Job orchestration
    transform_name: str = "VideoInsightsOnly"
    poll_interval_seconds: float = 2.0
    max_wait_seconds: Optional[float] = None  # None waits forever
    input_sas_hours: int = 4
    output_sas_hours: int = 1
    strict_job_outcome: bool = False

    # Logging
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 7071

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"

    def get_valid_function_keys(self) -> Set[str]:
        """Parse and return valid function keys as a set."""
        if not self.function_keys:
            return set()
        return {key.strip() for key in self.function_keys.split(",") if key.strip()}

    def get_cors_origins(self) -> list[str]:
        """Parse and return CORS origins."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
