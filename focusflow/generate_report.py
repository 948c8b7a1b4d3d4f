"""
Rebuild a finished monitoring session from its CSV log and write the session
summary (leaderboard, distraction events, headline numbers) to Excel.

    python -m focusflow.generate_report focus_log.csv --out focus_summary.xlsx
"""

import argparse
import os

from focusflow.core.aggregator import format_time
from focusflow.core.logger import events_path_for, read_session_log
from focusflow.core.report import ReportGenerator


def main(argv=None):
    parser = argparse.ArgumentParser(description="Export the summary of a logged focus session to Excel.")
    parser.add_argument("log", help="Samples CSV written by the pipeline (events are read from <log>_events.csv)")
    parser.add_argument("--out", default=None, help="Excel output path (default: <log>_summary.xlsx)")
    parser.add_argument("--history-limit", type=int, default=200, help="Samples kept per person in the rebuilt history")
    args = parser.parse_args(argv)

    log_path = os.path.abspath(args.log)
    if not os.path.exists(log_path):
        raise SystemExit(f"Session log not found: {log_path}")
    out_path = os.path.abspath(args.out or os.path.splitext(log_path)[0] + "_summary.xlsx")

    samples, events = read_session_log(log_path)
    if samples.empty:
        print(f"Warning: {os.path.basename(log_path)} has no samples, summary will be empty.")
    if not os.path.exists(events_path_for(log_path)):
        print("Warning: no events file next to the log; the event list will be empty.")

    report = ReportGenerator(samples, events, history_limit=args.history_limit)
    summary = report.summarize()
    report.export_excel(out_path)

    print(
        f"Session {format_time(summary.duration)}: {len(summary.persons)} person(s), "
        f"overall average {summary.overall_average}, {len(summary.events)} distraction event(s)"
    )
    print(f"Summary written to: {out_path}")


if __name__ == "__main__":
    main()
