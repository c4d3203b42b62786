"""Runtime configuration for the EduAssist API.

Values come from the process environment, optionally seeded from a `.env`
file at the repository root. Google credentials are resolved lazily, the
first time a Gemini model handle is built.
"""
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv
from google.auth import default
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

REPO_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=REPO_ROOT / ".env")

VERTEX_SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


class Settings(BaseSettings):
    """Environment-driven settings. Every field has a usable local default
    except the GCP project, which Gemini cannot run without."""

    # Vertex AI / Gemini
    project_id: str = Field(
        default="",
        validation_alias=AliasChoices("PROJECT_ID", "GOOGLE_CLOUD_PROJECT", "GCP_PROJECT"),
    )
    region: str = Field(
        default="us-central1",
        validation_alias=AliasChoices("REGION", "GOOGLE_CLOUD_REGION", "LOCATION"),
    )
    service_account_file: str = Field(
        default="",
        validation_alias=AliasChoices("GOOGLE_APPLICATION_CREDENTIALS", "SERVICE_ACCOUNT_FILE"),
    )
    gemini_model: str = Field(default="gemini-2.0-flash", alias="GEMINI_MODEL")
    llm_temperature: float = Field(default=0.7, ge=0.0, le=2.0, alias="LLM_TEMPERATURE")
    llm_max_output_tokens: int = Field(default=2048, gt=0, alias="LLM_MAX_OUTPUT_TOKENS")
    llm_timeout_seconds: float = Field(default=30.0, alias="LLM_TIMEOUT_SECONDS")

    # Supabase; the in-memory store is used when either value is missing
    supabase_url: str = Field(default="", alias="SUPABASE_URL")
    supabase_service_key: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_SERVICE_KEY", "SUPABASE_SERVICE_ROLE_KEY"),
    )

    # Assistant-context cache
    redis_enabled: bool = Field(default=True, alias="REDIS_ENABLED")
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_db: int = Field(default=0, alias="REDIS_DB")
    redis_password: Optional[str] = Field(default=None, alias="REDIS_PASSWORD")
    cache_ttl_minutes: int = Field(default=10, gt=0, alias="CACHE_TTL_MINUTES")

    xp_per_message: int = Field(default=10, gt=0, alias="XP_PER_MESSAGE")

    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    api_prefix: str = Field(default="/api/v1", alias="API_PREFIX")
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:8080"],
        alias="CORS_ORIGINS",
    )

    class Config:
        case_sensitive = False
        populate_by_name = True
        extra = "ignore"

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)

    def configuration_problems(self) -> List[str]:
        """Human-readable list of settings that keep the API from working fully."""
        problems = []
        if not self.project_id:
            problems.append("PROJECT_ID is not set; Gemini calls will fail.")
        if self.llm_timeout_seconds <= 0:
            problems.append("LLM_TIMEOUT_SECONDS must be positive.")
        if self.environment == "production" and not self.supabase_configured:
            problems.append("SUPABASE_URL and SUPABASE_SERVICE_KEY are required in production.")
        return problems


settings = Settings()

PROJECT_ID = settings.project_id
REGION = settings.region


def get_vertex_credentials():
    """Service-account credentials when a key file is configured, ADC otherwise."""
    if settings.service_account_file:
        return service_account.Credentials.from_service_account_file(
            settings.service_account_file,
            scopes=VERTEX_SCOPES,
        )

    credentials, _project = default(scopes=VERTEX_SCOPES)
    credentials.refresh(Request())
    return credentials


if settings.environment != "test":
    for problem in settings.configuration_problems():
        print(f"Configuration Error: {problem}")
    if settings.environment == "production" and settings.configuration_problems():
        raise ValueError("Invalid production configuration")
