"""
Dashboard polling state.
Kept per browser session in Streamlit session_state; falls back to an
in-memory dict outside Streamlit (tests, scripts).
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from backend.models import DerivedView

logger = logging.getLogger(__name__)

STATE_KEY = "_dashboard_state"


@dataclass
class DashboardState:
    """Everything the presentation layer needs from the last poll."""

    current_report: Optional[Dict[str, Any]] = None
    derived: Optional[DerivedView] = None
    last_fetch_timestamp: Optional[datetime] = None
    is_fallback: bool = False
    last_error: Optional[str] = None

    @property
    def loaded(self) -> bool:
        return self.derived is not None


class StateStore:
    """One DashboardState per browser session, created on first access."""

    def __init__(self, key: str = STATE_KEY):
        self.key = key
        self._memory: dict = {}  # used when no Streamlit runtime is running

    def _store(self) -> dict:
        try:
            import streamlit as st
            from streamlit.runtime import exists
            if exists():
                return st.session_state
        except ImportError:
            pass
        return self._memory

    def get(self) -> DashboardState:
        store = self._store()
        if self.key not in store:
            store[self.key] = DashboardState()
            logger.debug(f"State created: {self.key}")
        return store[self.key]
