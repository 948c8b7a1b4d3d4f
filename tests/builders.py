from focusflow.core.types import Detection, LandmarkSet


EYE_WIDTH = 30.0
JAW_LEFT_X = 80.0
JAW_RIGHT_X = 200.0


def eye_points(x0, y, ear):
    # Vertical lid gaps of 2h on both pairs give EAR = 4h / (2 * width)
    h = ear * EYE_WIDTH / 2.0
    w = EYE_WIDTH
    return [
        (x0, y),
        (x0 + w / 3, y - h),
        (x0 + 2 * w / 3, y - h),
        (x0 + w, y),
        (x0 + 2 * w / 3, y + h),
        (x0 + w / 3, y + h),
    ]


def nose_x_for_ratio(ratio):
    return (JAW_LEFT_X + JAW_RIGHT_X * ratio) / (1.0 + ratio)


def make_landmarks(ear=0.3, left_ear=None, right_ear=None, roll_dy=0.0, yaw_ratio=1.0):
    left = eye_points(100.0, 100.0, ear if left_ear is None else left_ear)
    right = [(x, y + roll_dy) for x, y in eye_points(150.0, 100.0, ear if right_ear is None else right_ear)]
    jaw = [(JAW_LEFT_X, 150.0), (140.0, 220.0), (JAW_RIGHT_X, 150.0)]
    tip = nose_x_for_ratio(yaw_ratio)
    nose = [(140.0, 100.0), (140.0, 115.0), (140.0, 130.0), (tip, 140.0)]
    return LandmarkSet.from_points(left, right, jaw, nose)


def landmarks_for_score(score):
    """Frontal open-eyed face whose only penalty is yaw, tuned to land on `score` (20..100)."""
    if score >= 100:
        return make_landmarks()
    return make_landmarks(yaw_ratio=1.7 + (100 - score) / 50.0)


def detection(landmarks=None, box=(10.0, 20.0, 120.0, 140.0)):
    return Detection(box=box, landmarks=landmarks)

