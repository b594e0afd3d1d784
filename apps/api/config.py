"""
Application configuration using Pydantic Settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Reverse proxies in front of the API whose X-Forwarded-For entries are trusted
    TRUSTED_PROXY_HOPS: int = 0

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CACHE_MAX_AGE_SECONDS: int = 300

    # Google Sheets store
    CONTENT_SPREADSHEET_ID: str = ""
    RESEARCHERS_SPREADSHEET_ID: str = ""
    GOOGLE_CREDENTIALS: str = ""  # Service account JSON, inline
    GOOGLE_CREDENTIALS_FILE: str = ""

    # Google sign-in
    GOOGLE_CLIENT_ID: str = ""
    ADMIN_EMAILS: List[str] = []

    # Site / RSS
    SITE_URL: str = "http://localhost:8000"
    SITE_TITLE: str = "Tech Policy Wire"
    SITE_DESCRIPTION: str = "Curated tech policy news, ideas, reports and research."
    EXTERNAL_RSS_URL: str = ""
    EXTERNAL_RSS_TIMEOUT_SECONDS: int = 10
    RSS_ITEM_LIMIT: int = 50

    # Submissions
    SUBMISSION_RATE_LIMIT: int = 5
    SUBMISSION_RATE_WINDOW_SECONDS: int = 60

    # Link metadata
    METADATA_TIMEOUT_SECONDS: int = 10
    METADATA_USER_AGENT: str = "Mozilla/5.0 (compatible; PolicyWireBot/1.0)"

    # Security
    JWT_SECRET: str = "change_me_in_production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 24

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()


def is_admin_email(email: str) -> bool:
    """Return True when the e-mail is on the configured admin allowlist."""
    normalized = (email or "").strip().lower()
    if not normalized:
        return False
    return normalized in {entry.strip().lower() for entry in settings.ADMIN_EMAILS}


def validate_security_settings() -> None:
    """Fail fast when insecure default secrets are still configured."""
    insecure_values = {
        "",
        "change_me_in_production",
        "your_jwt_secret_change_in_production",
    }
    jwt_secret = (settings.JWT_SECRET or "").strip()

    if jwt_secret in insecure_values or len(jwt_secret) < 24:
        raise ValueError("JWT_SECRET is insecure. Configure a strong non-default secret (>=24 chars).")
