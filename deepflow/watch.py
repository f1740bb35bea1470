"""Periodic reminders about the state of the current session."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .config import Config
from .session import ZERO_TIME, Session, load_session, session_exists
from .ui import format_duration


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _since(moment: datetime | None) -> timedelta:
    moment = moment or ZERO_TIME
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return _now() - moment


def _print_nudge(message: str) -> None:
    print(f"[{datetime.now():%I:%M %p}] {message}", file=sys.stderr)


@dataclass
class Watcher:
    """Remembers when it last nudged so reminders are not repeated too often."""

    no_session_since: datetime | None = None
    last_active_nudge_time: datetime | None = None
    last_paused_nudge_time: datetime | None = None

    def check_session_and_nudge(self, cfg: Config) -> bool:
        """Inspect the session and print a reminder if one is due.

        Returns whether a reminder was printed.
        """
        if session_exists():
            self.no_session_since = None
            try:
                session = load_session()
            except (OSError, ValueError):
                return False
            if session.is_paused:
                return self.handle_paused_session(session, cfg)
            return self.handle_active_session(session, cfg)

        self.last_active_nudge_time = None
        self.last_paused_nudge_time = None
        return self.handle_no_session(cfg)

    def handle_active_session(self, session: Session, cfg: Config) -> bool:
        """Suggest a break once a session has run longer than configured."""
        limit = cfg.watch.remind_after_active
        if _since(session.start_time) <= limit:
            return False
        if self.last_active_nudge_time is not None and _since(self.last_active_nudge_time) <= limit:
            return False
        _print_nudge(f"🏃 Session active for over {format_duration(limit)}. Time for a break?")
        self.last_active_nudge_time = _now()
        return True

    def handle_paused_session(self, session: Session, cfg: Config) -> bool:
        """Suggest resuming once a session has been paused longer than configured."""
        limit = cfg.watch.remind_after_pause
        if _since(session.paused_at) <= limit:
            return False
        if self.last_paused_nudge_time is not None and _since(self.last_paused_nudge_time) <= limit:
            return False
        _print_nudge(f"🤔 Session paused for over {format_duration(limit)}. Ready to resume?")
        self.last_paused_nudge_time = _now()
        return True

    def handle_no_session(self, cfg: Config) -> bool:
        """Suggest starting a session after a configured idle period."""
        if self.no_session_since is None:
            self.no_session_since = _now()
            return False
        limit = cfg.watch.remind_after_idle
        if _since(self.no_session_since) <= limit:
            return False
        _print_nudge(f"💡 No active session for over {format_duration(limit)}. Ready to start one?")
        self.no_session_since = _now()
        return True