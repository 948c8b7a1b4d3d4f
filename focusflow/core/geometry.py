"""
Landmark geometry used by the focus scorer: eye openness, head roll and head yaw.

All metrics return None when the landmarks are too short or degenerate so the
scorer can pick its fallback branch instead of failing.
"""
from typing import Optional, Sequence

import numpy as np


PointSeq = Sequence[Sequence[float]]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (77.5 -> 78, -0.5 -> 0)."""
    return int(np.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _distance(a: Sequence[float], b: Sequence[float]) -> float:
    return float(np.linalg.norm(np.array(a[:2], dtype=np.float64) - np.array(b[:2], dtype=np.float64)))


def eye_aspect_ratio(eye_points: PointSeq) -> Optional[float]:
    """Calculate Eye Aspect Ratio (EAR) from the 6 canonical eye points."""
    if eye_points is None or len(eye_points) != 6:
        return None
    # Vertical distances
    v1 = _distance(eye_points[1], eye_points[5])
    v2 = _distance(eye_points[2], eye_points[4])
    # Horizontal distance
    h = _distance(eye_points[0], eye_points[3])
    if h == 0:
        return None
    return (v1 + v2) / (2.0 * h)


def head_roll_degrees(left_eye: PointSeq, right_eye: PointSeq) -> Optional[float]:
    """Signed angle of the line from the left eye's outer corner to the right eye's outer corner."""
    if left_eye is None or right_eye is None:
        return None
    if len(left_eye) != 6 or len(right_eye) != 6:
        return None
    dx = right_eye[3][0] - left_eye[0][0]
    dy = right_eye[3][1] - left_eye[0][1]
    return float(np.degrees(np.arctan2(dy, dx)))


def head_yaw_ratio(jaw: PointSeq, nose: PointSeq) -> Optional[float]:
    """
    Asymmetry between the horizontal jaw-to-nose-tip distances on each side.
    A frontal face gives ~1.0; the ratio grows as the head turns.
    """
    if jaw is None or nose is None:
        return None
    if len(jaw) < 3 or len(nose) < 4:
        return None
    nose_tip_x = nose[3][0]
    dist_left = abs(jaw[0][0] - nose_tip_x)
    dist_right = abs(jaw[-1][0] - nose_tip_x)
    if dist_left == 0 or dist_right == 0:
        return None
    return max(dist_left, dist_right) / min(dist_left, dist_right)
