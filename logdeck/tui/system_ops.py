from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

CLIPBOARD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
    ("pbcopy",),
    ("clip.exe",),
)


class ClipboardError(RuntimeError):
    pass


def have_cmd(name: str) -> bool:
    return shutil.which(name) is not None


def copy_to_clipboard(text: str, timeout: float = 2.0) -> None:
    """Pipe ``text`` into the first clipboard tool found on PATH."""
    for cmd in CLIPBOARD_COMMANDS:
        if not have_cmd(cmd[0]):
            continue
        try:
            proc = subprocess.run(
                list(cmd),
                input=text,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise ClipboardError(f"{cmd[0]} failed: {exc}") from exc
        if proc.returncode != 0:
            raise ClipboardError(f"{cmd[0]} exited with code {proc.returncode}: {proc.stderr.strip()}")
        return
    raise ClipboardError("no clipboard command available")


def config_dir() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / "logdeck"


def cache_dir() -> Path:
    return Path.home() / ".cache" / "logdeck"
