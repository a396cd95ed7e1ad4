"""Runtime settings read from the environment."""
import os
from dataclasses import dataclass, field

_DEFAULT_DATABASE_URL = "sqlite:///./household_networth.db"
_DEFAULT_ALPHA_VANTAGE_URL = "https://www.alphavantage.co"


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def parse_email_list(raw: str | None) -> frozenset[str]:
    """Split a comma-separated allow-list into lower-cased addresses."""
    if not raw:
        return frozenset()
    return frozenset(e.strip().lower() for e in raw.split(",") if e.strip())


@dataclass(frozen=True)
class Settings:
    """Process configuration.

    Build with Settings.from_env() in production; tests construct it directly.
    """

    environment: str = "development"
    skip_auth: bool = False
    allowed_emails: frozenset[str] = field(default_factory=frozenset)
    cron_secret: str | None = None

    database_url: str = _DEFAULT_DATABASE_URL
    sql_echo: bool = False

    price_provider: str = "alphavantage"  # alphavantage | yfinance
    price_api_base_url: str = _DEFAULT_ALPHA_VANTAGE_URL
    price_api_key: str | None = None
    auth_userinfo_url: str | None = None

    quote_ttl_seconds: int = 6 * 60 * 60
    search_ttl_seconds: int = 5 * 60
    price_max_concurrency: int = 5
    snapshot_timeout_seconds: int = 300

    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def dev_auth_enabled(self) -> bool:
        """Auth bypass is honoured only outside production."""
        return self.skip_auth and not self.is_production

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            environment=os.getenv("APP_ENV", "development"),
            skip_auth=_env_bool("SKIP_AUTH"),
            allowed_emails=parse_email_list(os.getenv("ALLOWED_EMAILS")),
            cron_secret=os.getenv("CRON_SECRET") or None,
            database_url=os.getenv("DATABASE_URL", _DEFAULT_DATABASE_URL),
            sql_echo=os.getenv("SQL_ECHO", "0") == "1",
            price_provider=os.getenv("PRICE_PROVIDER", "alphavantage").lower(),
            price_api_base_url=os.getenv(
                "PRICE_PROVIDER_BASE_URL", _DEFAULT_ALPHA_VANTAGE_URL
            ),
            price_api_key=os.getenv("ALPHA_VANTAGE_API_KEY") or None,
            auth_userinfo_url=os.getenv("AUTH_USERINFO_URL") or None,
            quote_ttl_seconds=_env_int("QUOTE_CACHE_TTL_SECONDS", 6 * 60 * 60),
            search_ttl_seconds=_env_int("SEARCH_CACHE_TTL_SECONDS", 5 * 60),
            price_max_concurrency=_env_int("PRICE_MAX_CONCURRENCY", 5),
            snapshot_timeout_seconds=_env_int("SNAPSHOT_TIMEOUT_SECONDS", 300),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
