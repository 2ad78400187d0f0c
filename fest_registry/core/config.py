from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Final approval: isolation level for the transaction (None leaves the driver default)
    final_approval_isolation_level: Optional[str] = Field("SERIALIZABLE", alias="FINAL_APPROVAL_ISOLATION_LEVEL")
    final_approval_timeout_seconds: float = Field(9.0, alias="FINAL_APPROVAL_TIMEOUT_SECONDS")
    # True: approved students must also be assigned to at least one event to be carried into final approval
    final_approval_require_event_assignment: bool = Field(True, alias="FINAL_APPROVAL_REQUIRE_EVENT_ASSIGNMENT")
    final_approval_max_attempts: int = Field(1, alias="FINAL_APPROVAL_MAX_ATTEMPTS")

    default_college_quota: int = Field(45, alias="DEFAULT_COLLEGE_QUOTA")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
