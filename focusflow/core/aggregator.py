"""
Class-wide views derived from the tracked persons. Nothing here mutates the
session state; every call recomputes from the current persons.
"""
from typing import List

import pandas as pd

from .geometry import round_half_up
from .types import DisplayData, FocusSample, SessionState, SessionSummary, person_label


def class_average_score(state: SessionState) -> int:
    """Mean of every tracked person's current score, 0 when nobody is tracked."""
    if not state.persons:
        return 0
    scores = [p.focus_score for p in state.persons.values()]
    return round_half_up(sum(scores) / len(scores))


def session_class_average(state: SessionState) -> int:
    """Mean of every tracked person's session average, 0 when nobody is tracked."""
    if not state.persons:
        return 0
    averages = [p.average_focus for p in state.persons.values()]
    return round_half_up(sum(averages) / len(averages))


def combined_history(state: SessionState) -> List[FocusSample]:
    """
    One class-wide trend line: samples from every person grouped by their
    session time, averaged per time and ordered by time.
    """
    rows = [
        {"time": sample.time, "score": sample.score}
        for person in state.persons.values()
        for sample in person.focus_history
    ]
    if not rows:
        return []
    df = pd.DataFrame(rows)
    grouped = df.groupby("time")["score"].mean().sort_index()
    return [FocusSample(int(t), round_half_up(score)) for t, score in grouped.items()]


def display_label(state: SessionState) -> str:
    """
    Heading for the current view. A selected id keeps its "Student <id>" label
    even while that slot is missing and the numbers fall back to the class.
    """
    if state.selected_id is not None:
        return person_label(state.selected_id)
    return "Class" if len(state.persons) > 1 else "Your"


def display_data(state: SessionState) -> DisplayData:
    """The selected person's own numbers, or the class aggregate when nobody is selected."""
    selected = state.persons.get(state.selected_id) if state.selected_id is not None else None
    if selected is not None:
        return DisplayData(
            label=selected.label,
            score=selected.focus_score,
            average=selected.average_focus,
            history=tuple(selected.focus_history),
        )
    return DisplayData(
        label=display_label(state),
        score=class_average_score(state),
        average=session_class_average(state),
        history=tuple(combined_history(state)),
    )


def build_summary(state: SessionState) -> SessionSummary:
    return SessionSummary(
        duration=state.elapsed_seconds,
        overall_average=session_class_average(state),
        persons=tuple(p.snapshot() for p in state.persons.values()),
        events=tuple(state.events),
    )


def format_time(seconds: int) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"

