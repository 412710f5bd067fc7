"""Application configuration and settings."""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service Configuration
    service_name: str = "smart-triage"
    smart_triage_port: int = 8010
    environment: str = "development"

    # MongoDB Configuration
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "smart_triage"
    mongodb_collection_patients: str = "patients"
    mongodb_documents_bucket: str = "health-documents"

    # Serverless triage function
    functions_url: str = "http://localhost:54321/functions/v1"
    triage_function_name: str = "triage-ai"
    functions_api_key: Optional[str] = None
    function_timeout_seconds: float = 60.0

    # Document upload
    allowed_document_extensions: List[str] = [".pdf", ".png", ".jpg", ".jpeg"]

    # CORS
    cors_origins: List[str] = ["http://localhost:5173"]

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Dashboard sessions
    dashboard_session_cookie: str = "triage_dashboard_session"
    dashboard_max_sessions: int = 256

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
