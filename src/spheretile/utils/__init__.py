"""Utility modules for spheretile."""

from spheretile.utils.logger import SessionLogger, save_results_to_csv, summarize_results
from spheretile.utils.display import ProgressDisplay, StatusDisplay, LiveLogger, render_board

__all__ = [
    "SessionLogger",
    "save_results_to_csv",
    "summarize_results",
    "ProgressDisplay",
    "StatusDisplay",
    "LiveLogger",
    "render_board",
]
