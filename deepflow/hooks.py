"""User-supplied scripts run on session events."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path


def hook_script_path(event: str) -> Path:
    """Where the script for ``event`` is expected to live."""
    config_dir = os.environ.get("XDG_CONFIG_HOME")
    if config_dir:
        base = Path(config_dir)
    else:
        home = os.environ.get("HOME")
        base = (Path(home) if home else Path.home()) / ".config"
    return base / "flow" / "hooks" / event


def run_hook(event: str, *args: str) -> int | None:
    """Run the hook for ``event`` if an executable one exists.

    Hooks are best effort: failures are ignored. Returns the script's exit
    status, or None when no hook was run.
    """
    try:
        path = hook_script_path(event)
        info = path.stat()
    except (OSError, RuntimeError):
        return None
    if not path.is_file() or not info.st_mode & 0o111:
        return None

    sys.stdout.flush()
    sys.stderr.flush()
    try:
        completed = subprocess.run([str(path), *args], check=False)
    except OSError:
        return None
    return completed.returncode