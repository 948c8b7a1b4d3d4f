"""
Per-session CSV log of what the pipeline applied: one focus sample row per
tracked person per tick, and one row per distraction event in a sibling
`<name>_events.csv`. A finished session can be rebuilt from these two files.
"""
import csv
import os
from typing import Iterable, List, Tuple

import pandas as pd

from .types import DistractionEvent, TrackedPerson


SAMPLE_FIELDS = ["tick", "session_time", "person_id", "score", "average_focus", "eyes_closed_ms", "face_bbox"]
EVENT_FIELDS = ["tick", "session_time", "person_id", "label"]


def events_path_for(samples_path: str) -> str:
    return os.path.splitext(samples_path)[0] + "_events.csv"


class FocusLogger:
    """
    Writes one session's samples and events. Opening a logger starts a fresh
    log at that path. A write failure is reported once and turns logging off
    for the rest of the session; it never reaches the pipeline.
    """

    def __init__(self, csv_path: str):
        self.samples_path = csv_path
        self.events_path = events_path_for(csv_path)
        self.enabled = True
        self._tick = 0

        os.makedirs(os.path.dirname(os.path.abspath(csv_path)), exist_ok=True)
        for path, fields in ((self.samples_path, SAMPLE_FIELDS), (self.events_path, EVENT_FIELDS)):
            with open(path, "w", newline="", encoding="utf-8") as handle:
                csv.DictWriter(handle, fieldnames=fields).writeheader()

    def log_tick(self, session_time: int, persons: Iterable[TrackedPerson], events: Iterable[DistractionEvent]):
        if not self.enabled:
            return
        self._tick += 1
        samples = [self._sample_row(person, session_time) for person in persons]
        event_rows = [
            {"tick": self._tick, "session_time": e.time, "person_id": e.person_id, "label": e.label}
            for e in events
        ]
        try:
            self._append(self.samples_path, SAMPLE_FIELDS, samples)
            self._append(self.events_path, EVENT_FIELDS, event_rows)
        except OSError as exc:
            print(f"[FocusFlow] Logging error, disabling log for this session: {exc}")
            self.enabled = False

    def _sample_row(self, person: TrackedPerson, session_time: int) -> dict:
        bbox = ""
        if person.last_bbox:
            bbox = " ".join(f"{v:.0f}" for v in person.last_bbox)
        return {
            "tick": self._tick,
            "session_time": session_time,
            "person_id": person.id,
            "score": person.focus_score,
            "average_focus": person.average_focus,
            "eyes_closed_ms": f"{person.eyes_closed_duration:.0f}",
            "face_bbox": bbox,
        }

    @staticmethod
    def _append(path: str, fields: List[str], rows: List[dict]):
        if not rows:
            return
        with open(path, "a", newline="", encoding="utf-8") as handle:
            csv.DictWriter(handle, fieldnames=fields).writerows(rows)


def _read_csv(path: str, fields: List[str]) -> pd.DataFrame:
    if not os.path.exists(path):
        return pd.DataFrame(columns=fields)
    try:
        df = pd.read_csv(path, on_bad_lines="skip", encoding="utf-8")
    except (OSError, ValueError) as exc:
        print(f"[FocusFlow] CSV read warning for {os.path.basename(path)}: {exc}")
        return pd.DataFrame(columns=fields)
    missing = [f for f in fields if f not in df.columns]
    if missing:
        print(f"[FocusFlow] {os.path.basename(path)} is missing columns {missing}; ignoring it")
        return pd.DataFrame(columns=fields)
    return df[fields]


def read_session_log(csv_path: str) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Samples and events of a logged session, as DataFrames."""
    return (
        _read_csv(csv_path, SAMPLE_FIELDS),
        _read_csv(events_path_for(csv_path), EVENT_FIELDS),
    )
