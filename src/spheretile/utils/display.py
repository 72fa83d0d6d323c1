"""
Console output for spheretile: status lines, key/value tables, progress and
board rendering.
"""

import time
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional


STATUS_ICONS = {
    "info": "ℹ️",
    "success": "✅",
    "warning": "⚠️",
    "error": "❌",
    "loading": "⏳",
    "processing": "🔄",
}


def format_duration(seconds: float) -> str:
    """1.5s, 3m 20s or 2h 5m"""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    if minutes < 60:
        return f"{minutes}m {secs}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m"


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return f"{'✅' if value else '❌'} {value}"
    if isinstance(value, float):
        return f"{value:.3f}"
    return str(value)


class ProgressDisplay:
    """Single-line progress bar for benchmark runs."""

    def __init__(self, total_steps: int = 100, bar_length: int = 30):
        self.total_steps = max(total_steps, 1)
        self.bar_length = bar_length
        self.start_time = time.time()

    def _bar(self, fraction: float) -> str:
        filled = int(self.bar_length * fraction)
        return "█" * filled + "░" * (self.bar_length - filled)

    def update(self, step: int, description: str = ""):
        fraction = min(step / self.total_steps, 1.0)
        elapsed = time.time() - self.start_time
        remaining = elapsed / step * (self.total_steps - step) if step > 0 else 0

        parts = [
            f"\r⏳ Progress: [{self._bar(fraction)}] {fraction:.1%} ({step}/{self.total_steps})",
            f"Elapsed: {format_duration(elapsed)}",
            f"ETA: {format_duration(remaining)}",
        ]
        if description:
            parts.append(description)
        print(" | ".join(parts), end="", flush=True)

    def finish(self, success: bool = True):
        total = format_duration(time.time() - self.start_time)
        print(f"\n{'✅ Complete' if success else '❌ Failed'}! Total time: {total}")


class StatusDisplay:
    """Headers, sections and key/value tables."""

    @staticmethod
    def print_header(title: str, width: int = 60):
        print("\n" + "=" * width)
        print(f"{title:^{width}}")
        print("=" * width)

    @staticmethod
    def print_section(title: str, width: int = 60):
        print(f"\n📋 {title}")
        print("-" * width)

    @staticmethod
    def print_rows(rows: Dict[str, Any], title: str):
        StatusDisplay.print_section(title)
        for key, value in rows.items():
            print(f"  {key:<20} : {_format_value(value)}")

    @staticmethod
    def print_config(config_dict: Dict[str, Any], title: str = "Configuration"):
        StatusDisplay.print_rows(config_dict, title)

    @staticmethod
    def print_results(results: Dict[str, Any], title: str = "Results"):
        StatusDisplay.print_rows(results, title)

    @staticmethod
    def print_status(message: str, status: str = "info"):
        """Timestamped status line"""
        icon = STATUS_ICONS.get(status, STATUS_ICONS["info"])
        print(f"{icon} [{datetime.now():%H:%M:%S}] {message}")

    @staticmethod
    def ask_confirmation(message: str) -> bool:
        return input(f"❓ {message} (y/N): ").strip().lower() in ("y", "yes")


class LiveLogger:
    """
    Status-line logger used by the CLI, the level generator and the challenge
    service. Only errors are shown when not verbose.
    """

    def __init__(self, verbose: bool = True):
        self.verbose = verbose

    def _emit(self, message: str, status: str, always: bool = False):
        if self.verbose or always:
            StatusDisplay.print_status(message, status)

    def log_action(self, action_name: str, details: str = ""):
        self._emit(f"Executing: {action_name}" + (f" - {details}" if details else ""), "processing")

    def log_result(self, message: str, success: bool = True):
        self._emit(message, "success" if success else "error")

    def log_info(self, message: str):
        self._emit(message, "info")

    def log_warning(self, message: str):
        self._emit(message, "warning")

    def log_error(self, message: str):
        self._emit(message, "error", always=True)


def _cell_label(cell: Optional[str], locked: Iterable[str]) -> str:
    if cell is None:
        return " ."
    return f"{cell.lower() if cell in locked else cell:>2}"


def render_board(board: List[List[Optional[str]]], locked: Optional[set] = None) -> str:
    """
    Text view of an occupancy grid, one row per line.
    Locked pieces are shown in lower case.
    """
    locked = locked or set()
    return "\n".join("".join(_cell_label(cell, locked) for cell in row) for row in board)
