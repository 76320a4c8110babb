"""
Runtime settings for demodb, overridable through DEMODB_* environment
variables or a .env file
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DEMODB_", env_file=".env", extra="ignore")

    api_base_url: str = Field(default="http://localhost:3001")
    api_timeout: float = Field(default=5.0, gt=0)
    health_timeout: float = Field(default=1.5, gt=0)

    # Artificial latency (seconds) applied to demo-mode calls
    simulated_latency: float = Field(default=0.3, ge=0)

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001, ge=1, le=65535)
    debug: bool = False
    log_level: str = Field(default="INFO")

settings = Settings()
