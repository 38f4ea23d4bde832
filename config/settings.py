from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from dotenv import load_dotenv

# Load .env file into os.environ BEFORE pydantic reads it so that
# alembic, scripts and the API all see the same values
load_dotenv()


class Settings(BaseSettings):
    # Database
    DATABASE_URL: Optional[str] = None

    # Server
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8000
    ALLOWED_ORIGINS: str = "*"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Nomination quotas
    # A customized (non-system) step-grouped definition gets the smaller quota
    DEFAULT_NOMINATION_QUOTA: int = 10
    CUSTOM_PULSE_NOMINATION_QUOTA: int = 3

    # External reviewers
    # When enabled, external emails must belong to "<client subdomain>.<suffix>"
    EXTERNAL_REVIEWER_DOMAIN_CHECK: bool = False
    EXTERNAL_REVIEWER_DOMAIN_SUFFIX: str = "com"

    # Invitation dispatch (email delivery lives behind this webhook)
    INVITATION_WEBHOOK_URL: Optional[str] = None
    INVITATION_TIMEOUT_SECONDS: float = 5.0

    # Report regeneration side effect
    AUTO_REGENERATE_REPORTS: bool = True
    REPORT_STORAGE_PREFIX: str = "pulse"

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",  # ignore unknown env vars instead of raising errors
    )


settings = Settings()
