from typing import Literal, NamedTuple, Optional, Tuple

from .config import DEFAULT_CONFIG, EngineConfig
from .geometry import (
    clamp,
    eye_aspect_ratio,
    head_roll_degrees,
    head_yaw_ratio,
    round_half_up,
)
from .types import LandmarkSet


FocusBand = Literal["high", "medium", "low"]


class FocusResult(NamedTuple):
    score: int
    eyes_closed_duration: float


def drowsiness_penalty(
    landmarks: LandmarkSet,
    eyes_closed_duration: float,
    tick_interval_ms: float,
    config: EngineConfig = DEFAULT_CONFIG,
) -> Tuple[float, float]:
    """
    Penalty for closed eyes, plus the updated closed-eye duration.

    Closure shorter than the grace window costs nothing; after that the
    penalty ramps one point per `closed_ms_per_point` ms. If either eye
    cannot be resolved a flat penalty applies and the duration is carried
    through untouched.
    """
    left_ear = eye_aspect_ratio(landmarks.get_left_eye())
    right_ear = eye_aspect_ratio(landmarks.get_right_eye())
    if left_ear is None or right_ear is None:
        return config.unresolved_eyes_penalty, eyes_closed_duration

    avg_ear = (left_ear + right_ear) / 2.0
    if avg_ear >= config.eye_ar_thresh:
        return 0.0, 0.0

    duration = eyes_closed_duration + tick_interval_ms
    if duration <= config.eye_closed_grace_ms:
        return 0.0, duration
    penalty = min(
        config.max_drowsiness_penalty,
        (duration - config.eye_closed_grace_ms) / config.closed_ms_per_point,
    )
    return penalty, duration


def tilt_penalty(landmarks: LandmarkSet, config: EngineConfig = DEFAULT_CONFIG) -> float:
    angle = head_roll_degrees(landmarks.get_left_eye(), landmarks.get_right_eye())
    if angle is None or abs(angle) <= config.tilt_thresh_deg:
        return 0.0
    return min(config.max_tilt_penalty, (abs(angle) - config.tilt_thresh_deg) * config.tilt_penalty_per_deg)


def yaw_penalty(landmarks: LandmarkSet, config: EngineConfig = DEFAULT_CONFIG) -> float:
    ratio = head_yaw_ratio(landmarks.get_jaw_outline(), landmarks.get_nose())
    if ratio is None or ratio <= config.yaw_thresh:
        return 0.0
    return min(config.max_yaw_penalty, (ratio - config.yaw_thresh) * config.yaw_penalty_per_unit)


def focus_score(
    landmarks: Optional[LandmarkSet],
    eyes_closed_duration: float,
    tick_interval_ms: float | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> FocusResult:
    """
    Score one face from 0 (distracted) to 100 (focused).

    Starts at 100 and subtracts the drowsiness, tilt and yaw penalties.
    Missing landmarks score 0 and leave the closed-eye duration as it was.
    """
    if landmarks is None:
        return FocusResult(0, eyes_closed_duration)
    if tick_interval_ms is None:
        tick_interval_ms = config.detection_interval_ms

    drowsiness, new_duration = drowsiness_penalty(landmarks, eyes_closed_duration, tick_interval_ms, config)
    tilt = tilt_penalty(landmarks, config)
    yaw = yaw_penalty(landmarks, config)

    score = 100.0 - drowsiness - tilt - yaw
    return FocusResult(round_half_up(clamp(score, 0.0, 100.0)), new_duration)


def focus_band(score: int) -> FocusBand:
    """Colour band used by overlays and summary rows."""
    if score > 70:
        return "high"
    if score > 40:
        return "medium"
    return "low"
