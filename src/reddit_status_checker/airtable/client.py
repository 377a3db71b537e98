"""
Purpose: Airtable REST client for listing tracked posts and patching checker fields.
Constraints: Store access only; no status decisions.
"""

# Imports
import logging
from typing import Any, Dict, List, Optional

import requests

from reddit_status_checker.airtable.fields import record_from_api, update_payload
from reddit_status_checker.core.config_models import AirtableSettings
from reddit_status_checker.core.models import CheckerUpdate, TrackedRecord
from reddit_status_checker.core.utils.http import get_with_retry, patch_with_retry

logger = logging.getLogger(__name__)


class AirtableError(RuntimeError):
    """Airtable answered with a non-success status or an unreadable body."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


# Public API
class AirtableStore:
    """Tracking table client; pagination is handled internally."""

    def __init__(self, settings: AirtableSettings, *, timeout: int = 30, session: Optional[requests.Session] = None):
        self.settings = settings
        self.timeout = timeout
        self.session = session

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.token}",
            "Content-Type": "application/json",
        }

    def list_all(self) -> List[TrackedRecord]:
        """Fetch every record of the table, following `offset` continuation tokens."""
        url = self.settings.table_url
        records: List[TrackedRecord] = []
        offset: Optional[str] = None
        pages = 0
        while True:
            params = {"offset": offset} if offset else {}
            try:
                resp = get_with_retry(
                    url,
                    session=self.session,
                    headers=self._headers(),
                    params=params,
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                raise AirtableError(f"Airtable list request failed: {exc}") from exc
            payload = self._json_or_raise(resp, "list")
            pages += 1
            records.extend(record_from_api(raw) for raw in payload.get("records") or [])
            offset = payload.get("offset")
            if not offset:
                break
        logger.debug("Fetched %s records in %s page(s)", len(records), pages)
        return records

    def update_fields(self, record_id: str, update: CheckerUpdate) -> None:
        """Patch the checker fields of one record."""
        url = f"{self.settings.table_url}/{record_id}"
        try:
            resp = patch_with_retry(
                url,
                session=self.session,
                headers=self._headers(),
                json=update_payload(update),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise AirtableError(f"Airtable update of {record_id} failed: {exc}") from exc
        self._json_or_raise(resp, f"update {record_id}")
        logger.debug("Updated record %s", record_id)

    @staticmethod
    def _json_or_raise(resp: requests.Response, action: str) -> Dict[str, Any]:
        if resp.status_code >= 300:
            try:
                body = resp.json()
            except ValueError:
                body = resp.text
            raise AirtableError(
                f"Airtable {action} failed: HTTP {resp.status_code}: {body}",
                status_code=resp.status_code,
                body=body,
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise AirtableError(f"Airtable {action} returned invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise AirtableError(f"Airtable {action} returned unexpected payload")
        return data
