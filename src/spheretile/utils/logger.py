import os
import json
import pandas as pd
from datetime import datetime
from typing import Any, Dict, List


class SessionLogger:
    def __init__(self, log_dir: str, session_name: str):
        """
        Initializes the logger for a play or benchmark session.

        Args:
            log_dir (str): The base directory for logs.
            session_name (str): A name for the session.
        """
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.session_name = f"{session_name}_{self.timestamp}"
        self.run_dir = os.path.join(log_dir, self.session_name)
        self.logs = []

        os.makedirs(self.run_dir, exist_ok=True)

    def log_event(self, step: int, data: Dict[str, Any], verbose: bool = False):
        """
        Logs a single game event.

        Args:
            step (int): The current step number.
            data (Dict[str, Any]): Event data; "event" names the event type.
            verbose (bool): Whether to print the event to console.
        """
        log_entry = {"step": step, "timestamp": datetime.now().isoformat(), **data}

        if verbose:
            event = data.get("event", "unknown")
            if event == "level":
                print(f"🚀 Step {step}: Level {data.get('level')} loaded ({data.get('mode')})")
            elif event == "command":
                icon = "✓" if data.get("success") else "✗"
                print(f"⚡ Step {step}: {data.get('command')} {icon} {data.get('message', '')}")
            elif event == "complete":
                print(f"🎉 Step {step}: Board complete")
            elif event == "error":
                print(f"❌ Step {step}: Error occurred")
                print(f"  🔍 Details: {data.get('error', 'Unknown error')}")

        self.logs.append(log_entry)

    def save_logs(self) -> str:
        """Saves all collected events to a JSON file and writes a summary."""
        log_file = os.path.join(self.run_dir, "session_log.json")
        with open(log_file, "w") as f:
            json.dump(self.logs, f, indent=2, default=str)

        summary_file = os.path.join(self.run_dir, "summary.txt")
        self._create_summary_file(summary_file)
        return log_file

    def _create_summary_file(self, summary_file: str):
        """Create a human-readable summary file."""
        commands = [log for log in self.logs if log.get("event") == "command"]
        accepted = [log for log in commands if log.get("success")]
        levels = [log for log in self.logs if log.get("event") == "level"]
        completed = [log for log in self.logs if log.get("event") == "complete"]

        with open(summary_file, "w") as f:
            f.write(f"Session Summary: {self.session_name}\n")
            f.write("=" * 60 + "\n")
            f.write(f"Levels Loaded: {len(levels)}\n")
            f.write(f"Commands: {len(commands)}\n")
            f.write(f"Commands Accepted: {len(accepted)}\n")
            f.write(f"Boards Completed: {len(completed)}\n")
            f.write("\nStep-by-step breakdown:\n")
            f.write("-" * 30 + "\n")

            for log in self.logs:
                step = log.get("step", "?")
                event = log.get("event", "unknown")
                if event == "level":
                    f.write(f"Step {step}: Level {log.get('level')} ({log.get('mode')})\n")
                elif event == "command":
                    f.write(f"Step {step}: {log.get('command')} -> {log.get('error', 'OK')}\n")
                elif event == "complete":
                    f.write(f"Step {step}: Board complete\n")
                elif event == "error":
                    f.write(f"Step {step}: ERROR - {log.get('error', 'Unknown')}\n")


def save_results_to_csv(results: List[Dict[str, Any]], csv_path: str) -> pd.DataFrame:
    """
    Saves benchmark rows to a CSV file.
    If the file exists, the new rows are appended.

    Args:
        results: One dictionary per benchmark run.
        csv_path: The path to the output CSV file.

    Returns:
        The full table written to disk.
    """
    results_df = pd.DataFrame(results)

    if os.path.exists(csv_path):
        try:
            existing_df = pd.read_csv(csv_path)
            updated_df = pd.concat([existing_df, results_df], ignore_index=True)
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            print(f"Could not read existing results file: {e}. Creating a new one.")
            updated_df = results_df
    else:
        updated_df = results_df

    updated_df.to_csv(csv_path, index=False)
    return updated_df


def summarize_results(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Aggregate statistics over benchmark rows."""
    df = pd.DataFrame(results)
    if df.empty:
        return {"runs": 0}
    summary = {
        "runs": int(len(df)),
        "success_rate": float(df["success"].mean()),
    }
    solved = df[df["success"]]
    if not solved.empty:
        summary.update({
            "mean_time_s": float(solved["time_s"].mean()),
            "max_time_s": float(solved["time_s"].max()),
            "mean_attempts": float(solved["attempts"].mean()),
            "max_attempts": int(solved["attempts"].max()),
        })
    return summary
