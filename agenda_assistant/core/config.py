"""Configuration module for Agenda Assistant.

This module handles all application configuration using pydantic-settings.
Values come from environment variables and an optional .env file.
"""

import logging
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Explicitly load .env file BEFORE BaseSettings reads environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings class.

    Settings are loaded from environment variables with appropriate defaults.
    Whether the app runs against the live services or the offline fixtures
    is decided by `resolve_demo_mode`, once, when the app context is built.
    """

    # Application settings
    environment: str = "development"
    debug: bool = False
    log_level: str = Field(default="INFO", description="Root log level for the application loggers.")

    # --- Demo / live switch ---
    DEMO_MODE: Optional[bool] = Field(
        default=None,
        description="Force demo (True) or live (False) mode. When unset, demo mode is used if credentials are missing."
    )
    DEMO_LATENCY_SECONDS: float = Field(
        default=0.0,
        description="Artificial delay for demo backends, to make the UI loading states visible."
    )

    # --- Cloud AI API Settings (for structured data extraction) ---
    OPENAI_API_KEY: Optional[str] = Field(
        default=None,
        description="API Key for OpenAI (used to extract events and tasks from text)."
    )
    OPENAI_CHAT_MODEL_NAME: str = Field(
        default="gpt-4o-mini",
        description="OpenAI chat model to use for structured data extraction."
    )

    # --- Google OAuth Settings ---
    GOOGLE_CLIENT_SECRET_JSON_PATH: str = Field(
        default="client_secret.json",
        description="Path to the Google OAuth client_secret.json file (relative to project root)."
    )
    GOOGLE_OAUTH_TOKENS_PATH: str = Field(
        default="data/google_oauth_tokens.json",
        description="Path to store user's Google OAuth tokens (relative to project root)."
    )
    GOOGLE_OAUTH_REDIRECT_URI: str = Field(
        default="http://localhost:8000/auth/google/callback",
        description="OAuth redirect URI. Must match one configured in Google Cloud Console."
    )
    GOOGLE_CALENDAR_API_SCOPES: List[str] = Field(
        default=["https://www.googleapis.com/auth/calendar.events",
                 "https://www.googleapis.com/auth/calendar.readonly"],
        description="Scopes for Google Calendar API access."
    )
    GOOGLE_TASKS_API_SCOPES: List[str] = Field(
        default=["https://www.googleapis.com/auth/tasks"],
        description="Scopes for Google Tasks API access."
    )
    GOOGLE_PROFILE_SCOPES: List[str] = Field(
        default=["openid",
                 "https://www.googleapis.com/auth/userinfo.email",
                 "https://www.googleapis.com/auth/userinfo.profile"],
        description="Scopes needed to read the signed-in user's name and picture."
    )
    CALENDAR_TIMEZONE: str = Field(
        default="Asia/Jerusalem",
        description="Time zone attached to created events and used when displaying times."
    )

    # API Server Configuration (for uvicorn)
    api_host: str = Field(default="0.0.0.0", description="Host for the FastAPI server.")
    api_port: int = Field(default=8000, description="Port for the FastAPI server.")
    api_reload: bool = Field(default=False, description="Enable auto-reload for the FastAPI server (development).")
    api_log_level: str = Field(default="info", description="Log level for the FastAPI server.")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra='ignore'
    )

    @property
    def google_scopes(self) -> List[str]:
        """All OAuth scopes requested in a single consent screen, order preserved."""
        scopes: List[str] = []
        for scope in self.GOOGLE_PROFILE_SCOPES + self.GOOGLE_CALENDAR_API_SCOPES + self.GOOGLE_TASKS_API_SCOPES:
            if scope not in scopes:
                scopes.append(scope)
        return scopes

    def client_secret_path(self) -> Path:
        path = Path(self.GOOGLE_CLIENT_SECRET_JSON_PATH)
        return path if path.is_absolute() else Path.cwd() / path

    def token_path(self) -> Path:
        path = Path(self.GOOGLE_OAUTH_TOKENS_PATH)
        return path if path.is_absolute() else Path.cwd() / path

    def resolve_demo_mode(self) -> bool:
        """Decides between demo and live mode.

        An explicit DEMO_MODE wins. Otherwise the app runs in demo mode when
        either the OpenAI key or the Google client secret file is missing.
        """
        if self.DEMO_MODE is not None:
            logger.info(f"Demo mode explicitly set to {self.DEMO_MODE}.")
            return self.DEMO_MODE
        missing = []
        if not self.OPENAI_API_KEY:
            missing.append("OPENAI_API_KEY")
        if not self.client_secret_path().exists():
            missing.append(self.GOOGLE_CLIENT_SECRET_JSON_PATH)
        if missing:
            logger.warning(f"Running in DEMO MODE, missing credentials: {', '.join(missing)}")
            return True
        return False


def get_settings() -> Settings:
    """Get application settings.

    Returns:
        Settings: The application settings instance loaded from env/.env.
    """
    return Settings()
