import pytest

from builders import eye_points, make_landmarks
from focusflow.core.geometry import (
    clamp,
    eye_aspect_ratio,
    head_roll_degrees,
    head_yaw_ratio,
    round_half_up,
)
from focusflow.core.types import LandmarkSet


def test_eye_aspect_ratio_open_and_closed():
    assert eye_aspect_ratio(eye_points(0.0, 0.0, 0.3)) == pytest.approx(0.3)
    assert eye_aspect_ratio(eye_points(0.0, 0.0, 0.15)) == pytest.approx(0.15)


def test_eye_aspect_ratio_requires_six_points():
    assert eye_aspect_ratio(eye_points(0.0, 0.0, 0.3)[:4]) is None
    assert eye_aspect_ratio([]) is None


def test_eye_aspect_ratio_zero_width_eye():
    collapsed = [(5.0, 5.0), (5.0, 4.0), (5.0, 4.0), (5.0, 5.0), (5.0, 6.0), (5.0, 6.0)]
    assert eye_aspect_ratio(collapsed) is None


def test_head_roll_level_and_tilted():
    level = make_landmarks()
    assert head_roll_degrees(level.left_eye, level.right_eye) == pytest.approx(0.0)

    tilted = make_landmarks(roll_dy=80.0)
    assert head_roll_degrees(tilted.left_eye, tilted.right_eye) == pytest.approx(45.0)

    other_way = make_landmarks(roll_dy=-80.0)
    assert head_roll_degrees(other_way.left_eye, other_way.right_eye) == pytest.approx(-45.0)


def test_head_roll_undefined_for_short_eye():
    face = make_landmarks()
    assert head_roll_degrees(face.left_eye[:5], face.right_eye) is None


def test_head_yaw_ratio_frontal_and_turned():
    frontal = make_landmarks()
    assert head_yaw_ratio(frontal.jaw, frontal.nose) == pytest.approx(1.0)

    turned = make_landmarks(yaw_ratio=2.0)
    assert head_yaw_ratio(turned.jaw, turned.nose) == pytest.approx(2.0)


def test_head_yaw_ratio_is_symmetric():
    jaw = [(0.0, 0.0), (50.0, 50.0), (120.0, 0.0)]
    nose_right = [(0.0, 0.0)] * 3 + [(80.0, 10.0)]
    nose_left = [(0.0, 0.0)] * 3 + [(40.0, 10.0)]
    assert head_yaw_ratio(jaw, nose_right) == pytest.approx(2.0)
    assert head_yaw_ratio(jaw, nose_left) == pytest.approx(2.0)


def test_head_yaw_ratio_degenerate():
    face = make_landmarks()
    assert head_yaw_ratio(face.jaw[:2], face.nose) is None
    assert head_yaw_ratio(face.jaw, face.nose[:3]) is None
    # Nose tip directly above the first jaw point
    nose = list(face.nose[:3]) + [(face.jaw[0][0], 140.0)]
    assert head_yaw_ratio(face.jaw, nose) is None


def test_round_half_up():
    assert round_half_up(77.5) == 78
    assert round_half_up(76.5) == 77
    assert round_half_up(2.4) == 2
    assert round_half_up(0.0) == 0


def test_clamp():
    assert clamp(120.0, 0.0, 100.0) == 100.0
    assert clamp(-3.0, 0.0, 100.0) == 0.0
    assert clamp(42.0, 0.0, 100.0) == 42.0


def test_from_68_points_slices_regions():
    points = [(float(i), float(i)) for i in range(68)]
    face = LandmarkSet.from_68_points(points)
    assert len(face.get_jaw_outline()) == 17
    assert len(face.get_nose()) == 9
    assert face.get_left_eye()[0] == (36.0, 36.0)
    assert face.get_right_eye()[3] == (45.0, 45.0)


def test_from_68_points_rejects_other_layouts():
    with pytest.raises(ValueError):
        LandmarkSet.from_68_points([(0.0, 0.0)] * 5)
