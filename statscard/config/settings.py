"""Application settings and configuration"""

from pydantic_settings import BaseSettings
from typing import Literal, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Combined Stats Card"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"
    PORT: int = 3000

    # Card subjects
    DEFAULT_USER: str = "aligheshlaghi97"
    DEFAULT_ORG: str = "Finance-Insight-Lab"

    # GitHub API
    GITHUB_TOKEN: Optional[str] = None
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_GRAPHQL_URL: str = "https://api.github.com/graphql"
    GITHUB_MAX_ATTEMPTS: int = 2
    GITHUB_BACKOFF_SECONDS: float = 1.0
    USER_AGENT: str = "github-stats-aggregator/1.0"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # Public star-count service
    STAR_SERVICE_URL: str = "https://api.github-star-counter.workers.dev/user/{account}"
    STAR_FETCH_MAX_ATTEMPTS: int = 3
    STAR_FETCH_BACKOFF_SECONDS: float = 1.0

    # What gets counted
    STAR_SOURCE: Literal["service", "rest"] = "service"
    USER_STAR_DEFINITION: Literal["owned", "starred"] = "owned"
    CONTRIBUTION_WINDOW: Literal["trailing_365", "calendar_year"] = "trailing_365"

    # REST pagination limits
    REST_MAX_PAGES: int = 5
    REST_PAGE_DELAY_SECONDS: float = 0.5

    # Highest-stars cache
    CACHE_KEY_SEPARATOR: str = "__"
    HIGHEST_STARS_ENV_PREFIX: str = "HIGHEST_STARS_"

    # Response caching
    CACHE_MAX_AGE_SECONDS: int = 14400
    STALE_WHILE_REVALIDATE_SECONDS: int = 86400

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


settings = Settings()
