from pydantic_settings import BaseSettings
from pydantic import Field
import os
from typing import List


class Config(BaseSettings):
    # Database Configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./movex.db", alias="DB_URL"
    )

    # JWT Configuration
    jwt_secret: str = Field(default="", alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24, alias="ACCESS_TOKEN_EXPIRE_MINUTES"
    )

    # Reasoning collaborator (Gemini generateContent REST API)
    google_api_key: str = Field(default="", alias="GOOGLE_API_KEY")
    gemini_model: str = Field(default="gemini-1.5-pro", alias="GEMINI_MODEL")
    gemini_fast_model: str = Field(
        default="gemini-1.5-flash", alias="GEMINI_FAST_MODEL"
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        alias="GEMINI_BASE_URL",
    )
    llm_timeout_s: float = Field(default=60.0, alias="LLM_TIMEOUT_S")

    # Maps / Vision
    google_maps_api_key: str = Field(default="", alias="GOOGLE_MAPS_API_KEY")
    vision_api_key: str = Field(default="", alias="VISION_API_KEY")

    # Google Cloud Storage Configuration
    gcp_project_id: str = Field(default="", alias="GCP_PROJECT_ID")
    gcp_bucket_name: str = Field(default="", alias="GCP_BUCKET_NAME")
    signed_url_expiry_days: int = Field(default=7, alias="SIGNED_URL_EXPIRY_DAYS")

    # Drafts
    draft_retention_hours: int = Field(default=24, alias="DRAFT_RETENTION_HOURS")

    cors_origins: List[str] = Field(
        default=["http://localhost", "http://localhost:5173"],
        alias="CORS_ORIGINS",
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    is_production: bool = (
        os.getenv("ENVIRONMENT", "development").lower() == "production"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Instantiate the settings
config = Config()
