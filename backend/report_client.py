"""
Dashboard report REST client
─────────────────────────────────────────────────────────────────────────────
Fetches the gamification report from a fixed public URL:

    GET <endpoint>
    Response: { "total_students": N, "avatar_selection_count": N,
                "stage_completion_counts": [...], "daily_login_completions": [...],
                "evidence_mission_completion_counts": [...],
                "school_user_counts": [...], "new_registrations_counts": [...] }

No auth, no caching (no-store). Any transport error, non-2xx status or
non-JSON body is raised as ReportFetchError; the poller decides what to do.
The bundled example payload is loaded with load_fallback_report().
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
DEFAULT_MAX_RETRIES = 2
DEFAULT_BACKOFF = 0.5

ROOT = Path(__file__).parent.parent
DEFAULT_FALLBACK_PATH = ROOT / "data" / "dashboard-payload-example.json"


class ReportFetchError(Exception):
    """The live report could not be fetched or decoded."""


class ReportClient:
    """
    Thin requests wrapper around the public dashboard endpoint.
    Retries 429/5xx with backoff at the adapter level, then gives up.
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF,
    ):
        self.endpoint = endpoint
        self.timeout = timeout

        self.session = requests.Session()
        retry = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
            respect_retry_after_header=True,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)
        self.session.headers.update({
            "Accept": "application/json",
            "Cache-Control": "no-store",
            "Pragma": "no-cache",
        })

    def fetch_report(self) -> Dict[str, Any]:
        logger.info(f"Fetching report from {self.endpoint}")
        try:
            resp = self.session.get(self.endpoint, timeout=self.timeout)
            logger.debug(f"Response status: {resp.status_code}")
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise ReportFetchError(f"Error fetching report: HTTP {e.response.status_code}") from e
        except requests.exceptions.RequestException as e:
            raise ReportFetchError(f"Error fetching report: {e}") from e

        try:
            body = resp.json()
        except ValueError as e:
            raise ReportFetchError("Error fetching report: response is not valid JSON") from e

        if not isinstance(body, dict):
            raise ReportFetchError(f"Error fetching report: expected a JSON object, got {type(body).__name__}")
        return body


def load_fallback_report(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Read the bundled example payload served when the live fetch fails."""
    fallback_path = Path(path) if path else DEFAULT_FALLBACK_PATH
    with open(fallback_path, "r", encoding="utf-8") as f:
        report = json.load(f)
    logger.debug(f"Loaded fallback report from {fallback_path}")
    return report
