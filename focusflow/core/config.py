from dataclasses import dataclass


DETECTION_INTERVAL_MS = 500
CLOCK_INTERVAL_MS = 1000

EYE_AR_THRESH = 0.21  # average EAR below this counts as closed
EYE_AR_CLOSED_DURATION_MS = 600  # closure shorter than this is treated as a blink
CLOSED_MS_PER_POINT = 40.0
MAX_DROWSINESS_PENALTY = 100.0
UNRESOLVED_EYES_PENALTY = 25.0

TILT_THRESH_DEG = 15.0
TILT_PENALTY_PER_DEG = 2.0
MAX_TILT_PENALTY = 50.0

YAW_THRESH = 1.7  # one jaw side 70% wider than the other
YAW_PENALTY_PER_UNIT = 50.0
MAX_YAW_PENALTY = 80.0

DISTRACTION_THRESHOLD = 40
HISTORY_LIMIT = 200


@dataclass(frozen=True)
class EngineConfig:
    detection_interval_ms: int = DETECTION_INTERVAL_MS
    clock_interval_ms: int = CLOCK_INTERVAL_MS
    eye_ar_thresh: float = EYE_AR_THRESH
    eye_closed_grace_ms: int = EYE_AR_CLOSED_DURATION_MS
    closed_ms_per_point: float = CLOSED_MS_PER_POINT
    max_drowsiness_penalty: float = MAX_DROWSINESS_PENALTY
    unresolved_eyes_penalty: float = UNRESOLVED_EYES_PENALTY
    tilt_thresh_deg: float = TILT_THRESH_DEG
    tilt_penalty_per_deg: float = TILT_PENALTY_PER_DEG
    max_tilt_penalty: float = MAX_TILT_PENALTY
    yaw_thresh: float = YAW_THRESH
    yaw_penalty_per_unit: float = YAW_PENALTY_PER_UNIT
    max_yaw_penalty: float = MAX_YAW_PENALTY
    distraction_threshold: int = DISTRACTION_THRESHOLD
    history_limit: int = HISTORY_LIMIT

    def __post_init__(self):
        if self.detection_interval_ms <= 0 or self.clock_interval_ms <= 0:
            raise ValueError("Tick intervals must be positive milliseconds")
        if self.history_limit <= 0:
            raise ValueError(f"history_limit must be positive, got {self.history_limit}")
        if self.closed_ms_per_point <= 0:
            raise ValueError(f"closed_ms_per_point must be positive, got {self.closed_ms_per_point}")


DEFAULT_CONFIG = EngineConfig()
