from abc import ABC, abstractmethod
from collections import deque
from typing import List, Sequence, Tuple

from .config import DEFAULT_CONFIG, EngineConfig
from .scoring import focus_score
from .types import Detection, DistractionEvent, SessionState, TrackedPerson


class IdentityStrategy(ABC):
    """Decides which person id each detection in a batch belongs to."""

    @abstractmethod
    def assign(self, detections: Sequence[Detection]) -> List[Tuple[int, Detection]]:
        ...


class PositionalIdentityStrategy(IdentityStrategy):
    """
    Uses the 1-based position of a detection in its batch as the person id.

    This is not re-identification: two people swapping places in the
    detector's output silently swap histories.
    """

    def assign(self, detections: Sequence[Detection]) -> List[Tuple[int, Detection]]:
        return [(index + 1, detection) for index, detection in enumerate(detections)]


class IdentityTracker:
    """
    Merges one tick's detections into the session's tracked persons.

    Scores every detection, appends it to that person's history, fires a
    distraction event when a score drops below the threshold, and drops
    every person whose id is missing from the batch.
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG, strategy: IdentityStrategy | None = None):
        self.config = config
        self.strategy = strategy or PositionalIdentityStrategy()

    def update(self, state: SessionState, detections: Sequence[Detection]) -> List[DistractionEvent]:
        now = state.elapsed_seconds
        new_events: List[DistractionEvent] = []
        assigned = self.strategy.assign(detections)

        for pid, detection in assigned:
            person = state.persons.get(pid)
            previous_score = None
            if person is None:
                person = self._register(state, pid)
            else:
                previous_score = person.focus_score

            result = focus_score(
                detection.landmarks,
                person.eyes_closed_duration,
                self.config.detection_interval_ms,
                self.config,
            )
            person.focus_score = result.score
            person.eyes_closed_duration = result.eyes_closed_duration
            person.last_bbox = detection.box
            person.add_sample(now, result.score)

            threshold = self.config.distraction_threshold
            if previous_score is not None and previous_score >= threshold and result.score < threshold:
                event = DistractionEvent(time=now, person_id=pid, label=person.label)
                state.events.append(event)
                new_events.append(event)

        # Ids absent from this batch are gone for good; no grace period
        seen = {pid for pid, _ in assigned}
        for pid in list(state.persons.keys()):
            if pid not in seen:
                state.persons.pop(pid, None)

        return new_events

    def _register(self, state: SessionState, pid: int) -> TrackedPerson:
        person = TrackedPerson(id=pid, focus_history=deque(maxlen=self.config.history_limit))
        state.persons[pid] = person
        return person
