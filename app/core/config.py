"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "campus_jobs"

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    student_token_expire_days: int = 7
    admin_token_expire_days: int = 1

    # Session cookies
    student_cookie_name: str = "student_token"
    admin_cookie_name: str = "admin_token"
    cookie_secure: bool = False

    # Passwords set through change/reset flows
    min_password_length: int = 6

    # App
    client_origin: str = "http://localhost:3000"
    debug: bool = True
    log_level: str = "INFO"

    @property
    def cors_origins(self) -> list:
        """Comma separated CLIENT_ORIGIN as a list"""
        return [origin.strip() for origin in self.client_origin.split(",") if origin.strip()]

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
