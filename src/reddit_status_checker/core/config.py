"""
Purpose: Load environment configuration for the status checker.
Constraints: Pure config I/O only; no network or checker side effects.
"""

# Imports
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from reddit_status_checker.core.config_models import (
    AirtableSettings,
    ProxySettings,
    ServerSettings,
    StalenessSettings,
)

_TRUTHY = ("true", "1", "yes", "y", "on")

REQUIRED_CREDENTIALS = {
    "AIRTABLE_TOKEN": ("airtable", "token"),
    "PROXY_USERNAME": ("proxy", "username"),
    "PROXY_PASSWORD": ("proxy", "password"),
}


# Public API
class ConfigError(ValueError):
    """Raised when configuration is incomplete or invalid."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("Configuration errors: " + "; ".join(self.problems))


class ConfigManager:
    """Configuration for the checker, sourced from the environment."""

    def __init__(self, env_files: Optional[List[Path]] = None):
        self.config_dir = Path.cwd() / "config"
        self.env_files = env_files if env_files is not None else [
            self.config_dir / "credentials.env",
            Path.cwd() / ".env",
            Path.home() / ".reddit_status_checker.env",
        ]
        self.loaded_env_file: Optional[Path] = None
        self.problems: List[str] = []

        self.airtable = AirtableSettings()
        self.proxy = ProxySettings()
        self.staleness = StalenessSettings()
        self.server = ServerSettings()

    def load_env(self):
        """Load the first .env file found, then build the settings models."""
        for env_file in self.env_files:
            if env_file.exists():
                load_dotenv(env_file)
                self.loaded_env_file = env_file
                break

        self.problems = []
        self.airtable = self._build(
            AirtableSettings,
            "Airtable",
            token=os.getenv("AIRTABLE_TOKEN", ""),
            base_id=os.getenv("AIRTABLE_BASE_ID") or AirtableSettings().base_id,
            table_id=os.getenv("AIRTABLE_TABLE_ID") or AirtableSettings().table_id,
        )
        self.proxy = self._build(
            ProxySettings,
            "Proxy",
            host=os.getenv("PROXY_HOST") or ProxySettings().host,
            port=os.getenv("PROXY_PORT") or ProxySettings().port,
            username=os.getenv("PROXY_USERNAME", ""),
            password=os.getenv("PROXY_PASSWORD", ""),
        )
        self.staleness = self._build(
            StalenessSettings,
            "Staleness",
            live_stale_after_hours=os.getenv("LIVE_STALE_AFTER_HOURS") or 12,
            not_found_stale_after_hours=os.getenv("NOT_FOUND_STALE_AFTER_HOURS") or 24,
            recheck_removed=_env_flag("RECHECK_REMOVED"),
        )
        self.server = self._build(
            ServerSettings,
            "Server",
            check_interval_minutes=os.getenv("CHECK_INTERVAL_MINUTES") or 30,
            delay_between_posts_ms=os.getenv("DELAY_BETWEEN_POSTS_MS") or 2000,
            failure_cooldown_minutes=os.getenv("FAILURE_COOLDOWN_MINUTES") or 5,
            max_records_to_check=os.getenv("MAX_RECORDS_TO_CHECK") or 0,
            request_timeout_seconds=os.getenv("REQUEST_TIMEOUT_SECONDS") or 30,
            run_once=_env_flag("RUN_ONCE"),
        )
        return self

    def _build(self, model, section: str, **values):
        try:
            return model(**values)
        except ValidationError as exc:
            for err in exc.errors():
                location = ".".join(str(part) for part in err.get("loc", ()))
                self.problems.append(f"{section} {location}: {err.get('msg')}")
            return model()

    def missing_credentials(self) -> List[str]:
        missing = []
        for env_name, (section, attr) in REQUIRED_CREDENTIALS.items():
            if not getattr(getattr(self, section), attr):
                missing.append(env_name)
        return missing

    def validate(self):
        """Raise ConfigError listing every missing credential and invalid value."""
        problems = [f"{name} is required" for name in self.missing_credentials()]
        problems.extend(self.problems)
        if problems:
            raise ConfigError(problems)
        return self

    def print_summary(self, logger) -> None:
        """Log a configuration summary with credentials masked."""
        logger.info("=" * 50)
        logger.info("Configuration Summary")
        logger.info("=" * 50)
        logger.info("Env file: %s", self.loaded_env_file or "(none)")
        logger.info("Airtable base/table: %s / %s", self.airtable.base_id, self.airtable.table_id)
        logger.info("Airtable token: %s", _mask(self.airtable.token))
        logger.info("Proxy: %s:%s (user %s)", self.proxy.host, self.proxy.port, _mask(self.proxy.username))
        logger.info(
            "Staleness: live=%sh, not found=%sh, recheck removed=%s",
            self.staleness.live_stale_after_hours,
            self.staleness.not_found_stale_after_hours,
            self.staleness.recheck_removed,
        )
        logger.info(
            "Server: interval=%smin, delay=%sms, max records=%s, run once=%s",
            self.server.check_interval_minutes,
            self.server.delay_between_posts_ms,
            self.server.max_records_to_check or "unlimited",
            self.server.run_once,
        )
        logger.info("=" * 50)


# Helpers
def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _mask(value: str) -> str:
    if not value:
        return "(empty)"
    return "***" + value[-3:] if len(value) > 3 else "***"
