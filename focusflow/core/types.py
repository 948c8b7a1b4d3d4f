from collections import deque
from dataclasses import dataclass, field, replace
from typing import Deque, Dict, List, NamedTuple, Optional, Sequence, Tuple

from .config import HISTORY_LIMIT
from .geometry import round_half_up


Point = Tuple[float, float]
BBox = Tuple[float, float, float, float]


def _points(raw: Sequence[Sequence[float]]) -> Tuple[Point, ...]:
    return tuple((float(p[0]), float(p[1])) for p in raw)


@dataclass(frozen=True)
class LandmarkSet:
    """
    Facial landmarks for one detected face, in frame pixel coordinates.

    Eyes are expected to carry 6 points each (corners at index 0 and 3),
    the jaw outline at least 3 and the nose at least 4. Shorter sequences
    are accepted; the metrics that need them report "undefined" instead.
    """

    left_eye: Tuple[Point, ...]
    right_eye: Tuple[Point, ...]
    jaw: Tuple[Point, ...]
    nose: Tuple[Point, ...]

    def get_left_eye(self) -> Tuple[Point, ...]:
        return self.left_eye

    def get_right_eye(self) -> Tuple[Point, ...]:
        return self.right_eye

    def get_jaw_outline(self) -> Tuple[Point, ...]:
        return self.jaw

    def get_nose(self) -> Tuple[Point, ...]:
        return self.nose

    @classmethod
    def from_points(
        cls,
        left_eye: Sequence[Sequence[float]],
        right_eye: Sequence[Sequence[float]],
        jaw: Sequence[Sequence[float]],
        nose: Sequence[Sequence[float]],
    ) -> "LandmarkSet":
        return cls(_points(left_eye), _points(right_eye), _points(jaw), _points(nose))

    @classmethod
    def from_68_points(cls, points: Sequence[Sequence[float]]) -> "LandmarkSet":
        """Slice a 68-point (iBUG layout) landmark list into its regions."""
        if len(points) != 68:
            raise ValueError(f"Expected 68 landmark points, got {len(points)}")
        return cls.from_points(
            left_eye=points[36:42],
            right_eye=points[42:48],
            jaw=points[0:17],
            nose=points[27:36],
        )


@dataclass(frozen=True)
class Detection:
    box: BBox
    landmarks: Optional[LandmarkSet] = None


class FocusSample(NamedTuple):
    time: int
    score: int


@dataclass(frozen=True)
class DistractionEvent:
    time: int
    person_id: int
    label: str


def person_label(person_id: int) -> str:
    return f"Student {person_id}"


@dataclass
class TrackedPerson:
    id: int
    focus_score: int = 0
    eyes_closed_duration: float = 0.0
    focus_history: Deque[FocusSample] = field(default_factory=lambda: deque(maxlen=HISTORY_LIMIT))
    average_focus: int = 0
    last_bbox: Optional[BBox] = None
    # Running totals over every sample ever recorded, independent of the capped history
    score_sum: int = 0
    sample_count: int = 0

    @property
    def label(self) -> str:
        return person_label(self.id)

    def add_sample(self, time: int, score: int) -> None:
        self.focus_history.append(FocusSample(time, score))
        self.score_sum += score
        self.sample_count += 1
        self.average_focus = round_half_up(self.score_sum / self.sample_count)

    def snapshot(self) -> "TrackedPerson":
        return replace(
            self,
            focus_history=deque(self.focus_history, maxlen=self.focus_history.maxlen),
        )


@dataclass
class SessionState:
    elapsed_seconds: int = 0
    persons: Dict[int, TrackedPerson] = field(default_factory=dict)
    events: List[DistractionEvent] = field(default_factory=list)
    selected_id: Optional[int] = None

    def reset(self) -> None:
        self.elapsed_seconds = 0
        self.persons.clear()
        self.events.clear()
        self.selected_id = None


@dataclass(frozen=True)
class DisplayData:
    label: str
    score: int
    average: int
    history: Tuple[FocusSample, ...]


@dataclass(frozen=True)
class SessionSummary:
    duration: int
    overall_average: int
    persons: Tuple[TrackedPerson, ...]
    events: Tuple[DistractionEvent, ...]

    def leaderboard(self) -> List[TrackedPerson]:
        return sorted(self.persons, key=lambda p: p.average_focus, reverse=True)
