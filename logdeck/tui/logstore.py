from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path

LEVELS = ("debug", "info", "warn", "error")


@dataclass
class LogEntry:
    ts: float
    level: str
    page: str
    category: str
    message: str

    def format_line(self) -> str:
        stamp = time.strftime("%H:%M:%S", time.localtime(self.ts))
        page = self.page or "-"
        category = self.category or "ui"
        return f"{stamp} [{self.level.upper():5}] [{category}] [{page}] {self.message}"


class LogStore:
    def __init__(self, max_entries: int = 5000, log_dir: Path | None = None, min_level: str = "debug") -> None:
        self.entries: deque[LogEntry] = deque(maxlen=max_entries)
        self.min_level = min_level if min_level in LEVELS else "debug"
        self.log_dir, fallback_reason = self._resolve_log_dir(log_dir)
        ts = time.strftime("%Y%m%d-%H%M%S", time.localtime())
        self.log_path = self.log_dir / f"tui-{ts}.log"
        self.append(
            "info",
            "startup",
            f"log_path={self.log_path}{f' (fallback: {fallback_reason})' if fallback_reason else ''}",
        )

    @staticmethod
    def _resolve_log_dir(log_dir: Path | None) -> tuple[Path, str]:
        fallback = Path.home() / ".cache" / "logdeck" / "logs"
        candidates: list[Path] = []
        if log_dir is not None:
            candidates.append(log_dir)
        candidates.append(fallback)

        last_err = ""
        for candidate in candidates:
            try:
                candidate.mkdir(parents=True, exist_ok=True)
                # Explicit writability probe.
                probe = candidate / ".write-test"
                with probe.open("w", encoding="utf-8") as fh:
                    fh.write("ok\n")
                probe.unlink(missing_ok=True)
                return candidate, last_err
            except PermissionError as exc:
                last_err = f"permission denied for {candidate}: {exc}"
            except OSError as exc:
                last_err = f"cannot use {candidate}: {exc}"

        fallback.mkdir(parents=True, exist_ok=True)
        return fallback, last_err or "using fallback log directory"

    def enabled(self, level: str) -> bool:
        if level not in LEVELS:
            return True
        return LEVELS.index(level) >= LEVELS.index(self.min_level)

    def append(
        self,
        level: str,
        page: str,
        message: str,
        ts: float | None = None,
        category: str = "ui",
    ) -> LogEntry | None:
        if not self.enabled(level):
            return None
        entry = LogEntry(ts=ts or time.time(), level=level, page=page, category=category, message=message)
        self.entries.append(entry)
        with self.log_path.open("a", encoding="utf-8") as fh:
            fh.write(entry.format_line())
            fh.write("\n")
        return entry

    def debug(self, page: str, message: str, category: str = "ui") -> None:
        self.append("debug", page, message, category=category)

    def info(self, page: str, message: str, category: str = "ui") -> None:
        self.append("info", page, message, category=category)

    def error(self, page: str, message: str, category: str = "ui") -> None:
        self.append("error", page, message, category=category)
