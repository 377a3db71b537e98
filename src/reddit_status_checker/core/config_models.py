"""
Purpose: Typed configuration models with validation.
Constraints: Pure models; no file I/O or side effects.
"""

from __future__ import annotations

from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field


class AirtableSettings(BaseModel):
    model_config = ConfigDict(extra="allow")
    token: str = ""
    base_id: str = "appHLVZ9IBCVeqhkR"
    table_id: str = "tblOpYVCHE8F4ivTa"
    api_base: str = "https://api.airtable.com/v0"

    @property
    def table_url(self) -> str:
        return f"{self.api_base.rstrip('/')}/{self.base_id}/{self.table_id}"


class ProxySettings(BaseModel):
    model_config = ConfigDict(extra="allow")
    host: str = "proxy.anyip.io"
    port: int = Field(default=8080, gt=0, le=65535)
    username: str = ""
    password: str = ""

    @property
    def url(self) -> str:
        user = quote(self.username, safe="")
        password = quote(self.password, safe="")
        return f"http://{user}:{password}@{self.host}:{self.port}"

    def as_requests_proxies(self) -> dict:
        return {"http": self.url, "https": self.url}


class StalenessSettings(BaseModel):
    model_config = ConfigDict(extra="allow")
    live_stale_after_hours: int = Field(default=12, ge=0)
    not_found_stale_after_hours: int = Field(default=24, ge=0)
    recheck_removed: bool = False


class ServerSettings(BaseModel):
    model_config = ConfigDict(extra="allow")
    check_interval_minutes: int = Field(default=30, ge=0)
    delay_between_posts_ms: int = Field(default=2000, ge=0)
    failure_cooldown_minutes: int = Field(default=5, ge=0)
    max_records_to_check: int = Field(default=0, ge=0)
    request_timeout_seconds: int = Field(default=30, gt=0)
    run_once: bool = False
