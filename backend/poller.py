"""
Poll-and-derive step: fetch the live report (or fall back to the bundled
payload), rebuild the derived view from scratch and record the outcome on
the owned DashboardState. This is the only place that mutates the state.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from backend.calculator import build_derived_view
from backend.report_client import ReportClient, ReportFetchError, load_fallback_report
from backend.state import DashboardState

logger = logging.getLogger(__name__)


class ReportPoller:

    def __init__(
        self,
        client: ReportClient,
        state: Optional[DashboardState] = None,
        fallback_loader: Callable[[], Dict[str, Any]] = load_fallback_report,
    ):
        self.client = client
        self.state = state if state is not None else DashboardState()
        self.fallback_loader = fallback_loader

    def poll(self) -> DashboardState:
        """
        One timer tick. Never raises for fetch failures: the fallback report
        is used and the error is kept on the state for the banner.
        """
        state = self.state
        try:
            report = self.client.fetch_report()
            state.is_fallback = False
            state.last_error = None
        except ReportFetchError as e:
            logger.warning(f"Live fetch failed, using example payload: {e}")
            report = self.fallback_loader()
            state.is_fallback = True
            state.last_error = str(e)

        state.current_report = report
        state.derived = build_derived_view(report)
        state.last_fetch_timestamp = datetime.now(timezone.utc)
        return state
