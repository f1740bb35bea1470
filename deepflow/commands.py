"""The session commands: start, pause, resume, end, status, recent and goal."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta

import yaml

from .config import ConfigError, get_config_path, load_config
from .durations import parse_duration
from .hooks import run_hook
from .logs import LogReader
from .session import (
    LogEntry,
    Session,
    get_session_path,
    load_session,
    log_session,
    save_session,
    session_exists,
)
from .ui import DIM, GRAY, RESET, format_duration

DEFAULT_TAG = "Deep Work"
_RECENT_LIMIT = 100
_GOAL_LIMIT = 1000


class CommandError(Exception):
    """A command failed; the message is meant for the user."""


def _now() -> datetime:
    return datetime.now().astimezone()


def _load_or_fail(prefix: str) -> Session:
    try:
        return load_session()
    except (OSError, ValueError) as exc:
        raise CommandError(f"{prefix}: {exc}") from exc


def _save_or_fail(session: Session, prefix: str) -> None:
    try:
        save_session(session)
    except OSError as exc:
        raise CommandError(f"{prefix}: {exc}") from exc


def start_session(tag: str = DEFAULT_TAG, target: str = "") -> Session | None:
    """Begin a session, or report the one already running.

    Returns the new session, or None when one was already in progress.
    """
    if session_exists():
        try:
            existing = load_session()
        except (OSError, ValueError):
            existing = None
        if existing is not None:
            if existing.is_paused:
                print(f"🌊 You have a paused session: {existing.tag}")
                print("Use 'flow resume' to continue or 'flow end' to finish.")
            else:
                worked = _now() - existing.start_time - existing.total_paused
                print(f"🌊 Already in deep work: {existing.tag}")
                print(f"Working for {format_duration(worked)}. Use 'flow end' to complete.")
            print(f"\n{DIM}One thing at a time.{RESET}")
            return None

    target_duration = timedelta(0)
    if target:
        try:
            target_duration = parse_duration(target)
        except ValueError as exc:
            raise CommandError(f"Error: Invalid duration format for --target: {exc}") from exc

    session = Session(tag=tag, start_time=_now(), is_paused=False, target_duration=target_duration)
    _save_or_fail(session, "Error starting session")

    print(f"\n🌊 Starting deep work: {tag}")
    print(f"\n{DIM}   Clear your mind{RESET}")
    print(f"{DIM}   Focus on what matters{RESET}")
    print(f"{DIM}   Let distractions pass{RESET}")
    print("\nDeep work session initiated.")
    print(f"{GRAY}Use 'flow status' to check, 'flow end' to complete.{RESET}\n")

    run_hook("on_start", session.tag)
    return session


def pause_session() -> None:
    """Freeze the timer of the active session."""
    if not session_exists():
        print("No active session to pause. Use 'flow start' to begin.")
        return

    session = _load_or_fail("Error loading session")
    if session.is_paused:
        print(f"Session '{session.tag}' is already paused.")
        return

    session.is_paused = True
    session.paused_at = _now()
    _save_or_fail(session, "Error pausing session")

    print(f"⏸️  Paused session: {session.tag}")
    run_hook("on_pause", session.tag)


def resume_session() -> None:
    """Restart the timer of a paused session, counting the time spent paused."""
    if not session_exists():
        print("🌊 No session to resume.")
        return

    session = _load_or_fail("Error reading session")
    if not session.is_paused:
        print(f"🌊 Session already active: {session.tag}")
        return

    if session.paused_at is not None:
        session.total_paused += _now() - session.paused_at
    session.is_paused = False
    session.paused_at = None
    _save_or_fail(session, "Error resuming session")

    print(f"🌊 Resumed: {session.tag}")
    print("Continue your deep work.")
    run_hook("on_resume", session.tag)


def end_session() -> LogEntry | None:
    """Complete the session, log it and remove the session file.

    Returns the logged entry, or None when there was no session.
    """
    if not session_exists():
        print("🌊 No active session to end.")
        return None

    session = _load_or_fail("Error reading session")

    end_time = _now()
    if session.is_paused and session.paused_at is not None:
        end_time = session.paused_at
    total = end_time - session.start_time - session.total_paused

    entry = LogEntry(
        tag=session.tag,
        start_time=session.start_time,
        end_time=end_time,
        duration=total,
        total_paused=session.total_paused,
    )
    try:
        log_session(entry)
    except OSError as exc:
        print(f"Warning: failed to log session: {exc}", file=sys.stderr)

    try:
        path = get_session_path()
    except OSError as exc:
        raise CommandError(f"Error determining session path: {exc}") from exc
    try:
        path.unlink()
    except OSError as exc:
        print(f"Warning: could not remove session file: {exc}", file=sys.stderr)

    print(f"✨ Session complete: {session.tag}")
    print(f"Total focus time: {format_duration(total)}")
    print(f"\n{DIM}Carry this focus forward.{RESET}")
    run_hook("on_end", session.tag)
    return entry


def show_status(raw: bool = False) -> None:
    """Print the state of the current session; with ``raw`` only its tag."""
    if not session_exists():
        if raw:
            return
        print("🌊 No active session.")
        print("Use 'flow start' to begin deep work.")
        return

    session = _load_or_fail("Error reading session")
    if raw:
        print(session.tag, end="")
        return

    now = _now()
    if session.is_paused:
        paused_for = now - session.paused_at if session.paused_at is not None else timedelta(0)
        print(f"⏸️  Session paused: {session.tag}")
        print(f"Paused for {format_duration(paused_for)}. Use 'flow resume' to continue.")
        return

    worked = now - session.start_time - session.total_paused
    base = f"🌊 Deep work: {session.tag} (Active for {format_duration(worked)})"
    if session.target_duration > timedelta(0):
        effective_end = session.start_time + session.target_duration + session.total_paused
        remaining = max(effective_end - now, timedelta(0))
        print(
            f"{base} / {format_duration(session.target_duration)} "
            f"({format_duration(remaining)} remaining)"
        )
    else:
        print(base)


def show_recent() -> None:
    """Print today's completed sessions and their total."""
    try:
        reader = LogReader.from_environment()
    except OSError as exc:
        print(f"Error creating log reader: {exc}", file=sys.stderr)
        return
    try:
        entries = reader.read_recent_entries(_RECENT_LIMIT, True, False)
    except OSError as exc:
        print(f"Error reading log entries: {exc}", file=sys.stderr)
        return

    if not entries:
        print("No sessions completed today. Keep up the focus!")
        return

    print("✨ Today's Completed Sessions ✨\n")
    for entry in entries:
        print(f"  - {entry.tag} ({format_duration(entry.duration)})")
    total = sum((entry.duration for entry in entries), timedelta(0))
    print(f"\nTotal focus time today: {format_duration(total)}")


def set_goal(goal: str) -> None:
    """Store ``goal`` as the daily focus goal in the configuration file."""
    try:
        parse_duration(goal)
    except ValueError as exc:
        raise CommandError(f"Error: Invalid duration format for goal: {exc}") from exc

    try:
        path = get_config_path()
    except ConfigError as exc:
        raise CommandError(f"Error getting config path: {exc}") from exc

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        config_data: dict = {}
    except OSError as exc:
        raise CommandError(f"Error reading config file: {exc}") from exc
    else:
        try:
            loaded = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise CommandError(f"Error parsing existing config file: {exc}") from exc
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise CommandError("Error parsing existing config file: expected a mapping")
        config_data = loaded

    config_data["daily_goal"] = goal
    try:
        updated = yaml.safe_dump(config_data, allow_unicode=True, default_flow_style=False)
    except yaml.YAMLError as exc:
        raise CommandError(f"Error marshalling config data: {exc}") from exc
    try:
        path.write_text(updated, encoding="utf-8")
    except OSError as exc:
        raise CommandError(f"Error writing config file: {exc}") from exc

    print(f"✅ Daily focus goal set to: {goal}")


def view_goal() -> None:
    """Print the daily goal and how much of it today's sessions cover."""
    try:
        cfg = load_config()
    except ConfigError as exc:
        print(f"Error loading config: {exc}", file=sys.stderr)
        return

    goal = cfg.parsed_daily_goal()
    if not goal:
        print("No daily goal set. Use 'flow goal --set <duration>' to set one.")
        return

    try:
        reader = LogReader.from_environment()
    except OSError as exc:
        print(f"Error creating log reader: {exc}", file=sys.stderr)
        return
    try:
        entries = reader.read_recent_entries(_GOAL_LIMIT, True, False)
    except OSError as exc:
        print(f"Error reading entries: {exc}", file=sys.stderr)
        return

    total = sum((entry.duration for entry in entries), timedelta(0))
    percentage = total / goal * 100 if goal > timedelta(0) else 0.0
    print(
        f"🎯 Daily Goal: {format_duration(total)} / {format_duration(goal)} "
        f"({int(percentage)}%)"
    )