from collections import deque
from typing import Dict

import pandas as pd

from .aggregator import format_time
from .config import HISTORY_LIMIT
from .geometry import round_half_up
from .scoring import focus_band
from .types import DistractionEvent, FocusSample, SessionSummary, TrackedPerson


class ReportGenerator:
    """
    Rebuilds a finished session from its CSV log (see `logger.read_session_log`).

    The persons in the summary are those present in the last logged tick that
    had any detections. Ids are positional, so a person's rows are the
    unbroken run of ticks ending there; an earlier run under the same id was
    a different person.
    """

    def __init__(self, samples: pd.DataFrame, events: pd.DataFrame, history_limit: int = HISTORY_LIMIT):
        self.samples = samples
        self.events = events
        self.history_limit = history_limit

    def summarize(self) -> SessionSummary:
        if self.samples.empty:
            return SessionSummary(duration=0, overall_average=0, persons=(), events=self._events())

        samples = self.samples.sort_values(["tick", "person_id"])
        last_tick = int(samples["tick"].max())
        final_ids = samples.loc[samples["tick"] == last_tick, "person_id"].tolist()
        persons = tuple(self._rebuild(samples[samples["person_id"] == pid], last_tick) for pid in final_ids)
        overall = round_half_up(sum(p.average_focus for p in persons) / len(persons)) if persons else 0
        return SessionSummary(
            duration=int(samples["session_time"].max()),
            overall_average=overall,
            persons=persons,
            events=self._events(),
        )

    def _rebuild(self, rows: pd.DataFrame, last_tick: int) -> TrackedPerson:
        ticks = rows["tick"].tolist()
        start = len(ticks) - 1
        expected = last_tick
        while start >= 0 and ticks[start] == expected:
            start -= 1
            expected -= 1
        run = rows.iloc[start + 1:]
        last = run.iloc[-1]
        person = TrackedPerson(
            id=int(last["person_id"]),
            focus_score=int(last["score"]),
            eyes_closed_duration=float(last["eyes_closed_ms"]),
            focus_history=deque(
                (FocusSample(int(t), int(s)) for t, s in zip(run["session_time"], run["score"])),
                maxlen=self.history_limit,
            ),
            average_focus=int(last["average_focus"]),
        )
        person.score_sum = int(run["score"].sum())
        person.sample_count = len(run)
        return person

    def _events(self):
        return tuple(
            DistractionEvent(time=int(t), person_id=int(pid), label=str(label))
            for t, pid, label in zip(self.events["session_time"], self.events["person_id"], self.events["label"])
        )

    def export_excel(self, path: str):
        summary = self.summarize()
        with pd.ExcelWriter(path) as writer:
            for sheet, table in summary_tables(summary).items():
                table.to_excel(writer, sheet_name=sheet, index=False)
            self.samples.to_excel(writer, sheet_name="Raw Samples", index=False)


def summary_tables(summary: SessionSummary) -> Dict[str, pd.DataFrame]:
    """Leaderboard, event log and headline numbers of a finished session as DataFrames."""
    leaderboard = pd.DataFrame(
        [
            {
                "rank": rank,
                "person": person.label,
                "average_focus": person.average_focus,
                "band": focus_band(person.average_focus),
                "samples": person.sample_count,
            }
            for rank, person in enumerate(summary.leaderboard(), start=1)
        ],
        columns=["rank", "person", "average_focus", "band", "samples"],
    )
    events = pd.DataFrame(
        [{"time": format_time(e.time), "person": e.label} for e in summary.events],
        columns=["time", "person"],
    )
    meta = pd.DataFrame(
        [
            {"metric": "duration", "value": format_time(summary.duration)},
            {"metric": "overall_average", "value": summary.overall_average},
            {"metric": "persons_tracked", "value": len(summary.persons)},
            {"metric": "distraction_events", "value": len(summary.events)},
        ]
    )
    return {"Leaderboard": leaderboard, "Events": events, "Summary": meta}


def export_session_summary(summary: SessionSummary, path: str):
    with pd.ExcelWriter(path) as writer:
        for sheet, table in summary_tables(summary).items():
            table.to_excel(writer, sheet_name=sheet, index=False)
