"""Command-line interface for the deep work tracker."""

from __future__ import annotations

import argparse
import sys
import time
from datetime import datetime
from typing import Callable, Sequence

from .commands import (
    DEFAULT_TAG,
    CommandError,
    end_session,
    pause_session,
    resume_session,
    set_goal,
    show_recent,
    show_status,
    start_session,
    view_goal,
)
from .config import Config, ConfigError, get_config_path, load_config
from .dashboard import handle_dashboard
from .durations import format_go_duration
from .export import handle_export
from .insights import show_insights
from .logs import handle_log
from .session import get_log_dir, get_session_path, load_session, session_exists
from .ui import show_version
from .watch import Watcher

VERSION = "dev"
COMMIT = "none"
DATE = "unknown"

SHELLS = ("bash", "zsh", "fish", "powershell")

_COMMANDS = {
    "completion": "Generate completion script",
    "dashboard": "Show a yearly contribution graph of your focus sessions",
    "doctor": "Run a diagnostic check on your Flow setup",
    "end": "Complete the session and log it",
    "export": "Export session data to CSV or JSON",
    "goal": "Set or view your daily focus goal",
    "insights": "Show insights about your work patterns",
    "log": "View completed session history",
    "pause": "Pause the active session",
    "recent": "Show today's completed sessions",
    "resume": "Resume a paused session",
    "start": "Begin a deep work session",
    "status": "Check the current session status",
    "version": "Print the version number of Flow",
    "watch": "Watch the current session and provide gentle reminders",
}

# Words offered after each command by the completion scripts.
_COMPLETION_WORDS = {
    "completion": list(SHELLS),
    "export": ["--format", "--output", "--today", "--week", "--month", "--all"],
    "goal": ["--set"],
    "log": ["--today", "--week", "--month", "--stats", "--all"],
    "start": ["--tag", "-t", "--target"],
    "status": ["--raw"],
}

_ROOT_DESCRIPTION = (
    "A minimalist command-line tool for focused, single-tasking work sessions.\n"
    "It protects your attention, helps you build a deep work habit, and provides\n"
    "powerful insights into your focus patterns, all without leaving your terminal."
)


def _start(args: argparse.Namespace) -> None:
    start_session(args.tag, args.target)


def _goal(args: argparse.Namespace) -> None:
    if args.set:
        set_goal(args.set)
    else:
        view_goal()


def _log(args: argparse.Namespace) -> None:
    handle_log(args.stats, args.today, args.week, args.month, args.all, args.month_str or "")


def _export(args: argparse.Namespace) -> None:
    words = [f"--{name}" for name in ("today", "week", "month", "all") if getattr(args, name)]
    words += ["--format", args.format]
    if args.output:
        words += ["--output", args.output]
    words += args.months
    handle_export(words)


def _completion(args: argparse.Namespace) -> None:
    print(completion_script(args.shell), end="")


def _version(args: argparse.Namespace) -> None:
    show_version(VERSION, COMMIT, DATE)


def build_parser() -> argparse.ArgumentParser:
    """The argument parser for the ``flow`` command and its subcommands."""
    parser = argparse.ArgumentParser(
        prog="flow",
        description=_ROOT_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--version", action="version", version=f"Flow {VERSION}")
    sub = parser.add_subparsers(dest="command", metavar="<command>")

    def add(name: str, handler: Callable[[argparse.Namespace], None]) -> argparse.ArgumentParser:
        command = sub.add_parser(name, help=_COMMANDS[name], description=_COMMANDS[name])
        command.set_defaults(handler=handler)
        return command

    start = add("start", _start)
    start.add_argument("-t", "--tag", default=DEFAULT_TAG, help="A description of the work session")
    start.add_argument(
        "--target",
        default="",
        help="Set a target duration for the session (e.g., '1h30m', '2h')",
    )

    add("pause", lambda args: pause_session())
    add("resume", lambda args: resume_session())
    add("end", lambda args: end_session())

    status = add("status", lambda args: show_status(args.raw))
    status.add_argument("--raw", action="store_true", help="Output only the session tag for scripting")

    add("recent", lambda args: show_recent())

    goal = add("goal", _goal)
    goal.add_argument("--set", default="", help="Set your daily focus goal (e.g., '4h', '3h30m')")

    add("insights", lambda args: show_insights())
    add("dashboard", lambda args: handle_dashboard())

    log = add("log", _log)
    log.add_argument("month_str", nargs="?", metavar="YYYY-MM", help="Month to show")
    log.add_argument("--today", action="store_true", help="Show sessions from today")
    log.add_argument("--week", action="store_true", help="Show sessions from this week")
    log.add_argument("--month", action="store_true", help="Show sessions from this month")
    log.add_argument("--stats", action="store_true", help="Show summary statistics")
    log.add_argument("--all", action="store_true", help="Show all session history")

    export = add("export", _export)
    export.add_argument("months", nargs="*", metavar="YYYY-MM", help="Month to export")
    export.add_argument("--format", default="csv", help="Export format (csv or json)")
    export.add_argument("--output", default="", help="Output file path (default is stdout)")
    export.add_argument("--today", action="store_true", help="Export sessions from today")
    export.add_argument("--week", action="store_true", help="Export sessions from this week")
    export.add_argument("--month", action="store_true", help="Export sessions from this month")
    export.add_argument("--all", action="store_true", help="Export all session history")

    add("doctor", lambda args: run_doctor())

    watch = add("watch", lambda args: run_watch(args.test_run_once))
    watch.add_argument(
        "--_test_run_once", dest="test_run_once", action="store_true", help=argparse.SUPPRESS
    )

    completion = add("completion", _completion)
    completion.add_argument("shell", choices=SHELLS)

    add("version", _version)
    return parser


def _bash_script() -> str:
    names = " ".join(sorted(_COMMANDS))
    cases = "".join(
        f'        {name}) COMPREPLY=( $(compgen -W "{" ".join(words)}" -- "$cur") ) ;;\n'
        for name, words in sorted(_COMPLETION_WORDS.items())
    )
    return (
        "# bash completion for flow\n"
        "_flow_completions() {\n"
        '    local cur="${COMP_WORDS[COMP_CWORD]}"\n'
        '    if [ "$COMP_CWORD" -eq 1 ]; then\n'
        f'        COMPREPLY=( $(compgen -W "{names}" -- "$cur") )\n'
        "        return 0\n"
        "    fi\n"
        '    case "${COMP_WORDS[1]}" in\n'
        f"{cases}"
        "        *) COMPREPLY=() ;;\n"
        "    esac\n"
        "}\n"
        "complete -F _flow_completions flow\n"
    )


def _zsh_script() -> str:
    commands = "".join(
        f"    '{name}:{text.replace(chr(39), '')}'\n" for name, text in sorted(_COMMANDS.items())
    )
    cases = "".join(
        f"    {name}) compadd -- {' '.join(words)} ;;\n"
        for name, words in sorted(_COMPLETION_WORDS.items())
    )
    return (
        "#compdef flow\n"
        "_flow() {\n"
        "  local -a commands\n"
        "  commands=(\n"
        f"{commands}"
        "  )\n"
        "  if (( CURRENT == 2 )); then\n"
        "    _describe 'command' commands\n"
        "    return\n"
        "  fi\n"
        '  case "$words[2]" in\n'
        f"{cases}"
        "  esac\n"
        "}\n"
        'if [ "$funcstack[1]" = "_flow" ]; then\n'
        '  _flow "$@"\n'
        "else\n"
        "  compdef _flow flow\n"
        "fi\n"
    )


def _fish_script() -> str:
    lines = ["# fish completion for flow", "complete -c flow -f"]
    for name, text in sorted(_COMMANDS.items()):
        description = text.replace("'", "\\'")
        lines.append(f"complete -c flow -n '__fish_use_subcommand' -a {name} -d '{description}'")
    for name, words in sorted(_COMPLETION_WORDS.items()):
        condition = f"'__fish_seen_subcommand_from {name}'"
        for word in words:
            if word.startswith("--"):
                lines.append(f"complete -c flow -n {condition} -l {word[2:]}")
            elif word.startswith("-"):
                lines.append(f"complete -c flow -n {condition} -s {word[1:]}")
            else:
                lines.append(f"complete -c flow -n {condition} -a {word}")
    return "\n".join(lines) + "\n"


def _powershell_script() -> str:
    def quote(text: str) -> str:
        return "'" + text.replace("'", "''") + "'"

    commands = "; ".join(f"{quote(name)} = {quote(text)}" for name, text in sorted(_COMMANDS.items()))
    flags = "; ".join(
        f"{quote(name)} = @({', '.join(quote(word) for word in words)})"
        for name, words in sorted(_COMPLETION_WORDS.items())
    )
    return (
        "# powershell completion for flow\n"
        "Register-ArgumentCompleter -Native -CommandName flow -ScriptBlock {\n"
        "    param($wordToComplete, $commandAst, $cursorPosition)\n"
        f"    $commands = @{{ {commands} }}\n"
        f"    $flags = @{{ {flags} }}\n"
        "    $words = @($commandAst.CommandElements | ForEach-Object { $_.ToString() })\n"
        "    if ($words.Count -lt 2 -or ($words.Count -eq 2 -and $wordToComplete)) {\n"
        "        $candidates = $commands.Keys\n"
        "    } else {\n"
        "        $candidates = $flags[$words[1]]\n"
        "    }\n"
        '    $candidates | Where-Object { $_ -like "$wordToComplete*" } | Sort-Object | ForEach-Object {\n'
        "        $tip = if ($commands.ContainsKey($_)) { $commands[$_] } else { $_ }\n"
        "        [System.Management.Automation.CompletionResult]::new($_, $_, 'ParameterValue', $tip)\n"
        "    }\n"
        "}\n"
    )


def completion_script(shell: str) -> str:
    """A shell completion script for ``flow``; raises ValueError for unknown shells."""
    generators = {
        "bash": _bash_script,
        "zsh": _zsh_script,
        "fish": _fish_script,
        "powershell": _powershell_script,
    }
    try:
        return generators[shell]()
    except KeyError:
        raise ValueError(f"unsupported shell {shell!r}; choose one of {', '.join(SHELLS)}") from None


def run_doctor() -> bool:
    """Check configuration, session and log locations; returns whether all is well."""
    print("🩺 Running diagnostics...")
    all_good = True

    try:
        config_path = get_config_path()
    except ConfigError:
        print("❌ Config Path: Could not determine config path.")
        all_good = False
    else:
        try:
            config_path.stat()
        except FileNotFoundError:
            print("✅ Config File: OK (No config file found, using defaults).")
        except OSError as exc:
            print(f"❌ Config File: Error checking config at {config_path}: {exc}")
            all_good = False
        else:
            try:
                load_config()
            except ConfigError as exc:
                print(f"❌ Config File: Found at {config_path}, but could not parse: {exc}")
                all_good = False
            else:
                print(f"✅ Config File: OK (Loaded successfully from {config_path}).")

    try:
        session_path = get_session_path()
    except OSError:
        print("❌ Session Path: Could not determine session path.")
        all_good = False
    else:
        if session_exists():
            try:
                load_session()
            except (OSError, ValueError) as exc:
                print(f"❌ Session File: Corrupted or unreadable at {session_path}: {exc}")
                all_good = False
            else:
                print(f"✅ Session File: OK (Readable at {session_path}).")
        else:
            print("✅ Session File: OK (No active session).")

    try:
        log_dir = get_log_dir()
    except OSError:
        print("❌ Log Directory: Could not determine log directory.")
        all_good = False
    else:
        if not log_dir.exists():
            print(f"✅ Log Directory: OK (Will be created at {log_dir}).")
        elif not log_dir.is_dir():
            print(f"❌ Log Directory: Path at {log_dir} is not a valid directory.")
            all_good = False
        else:
            print(f"✅ Log Directory: OK (Exists at {log_dir}).")

    print()
    if all_good:
        print("✨ Your Flow setup looks healthy! ✨")
    else:
        print("⚠️  Found issues with your setup. Please review the messages above.")
    return all_good


def run_watch(run_once: bool = False) -> None:
    """Check the session periodically and print gentle reminders."""
    try:
        cfg = load_config()
    except ConfigError as exc:
        print(f"Warning: could not load config file: {exc}", file=sys.stderr)
        cfg = Config()

    interval = cfg.watch.interval
    print(
        f"[{datetime.now():%I:%M %p}] 🌊 Flow Watcher started. "
        f"Checking every {format_go_duration(interval)}.",
        flush=True,
    )
    watcher = Watcher()
    try:
        while True:
            watcher.check_session_and_nudge(cfg)
            if run_once:
                break
            time.sleep(max(interval.total_seconds(), 0))
    except KeyboardInterrupt:
        return


def main(argv: Sequence[str] | None = None) -> int:
    """Run the ``flow`` command; returns the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    try:
        args.handler(args)
    except CommandError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())