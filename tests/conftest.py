import pytest

from builders import make_landmarks


@pytest.fixture
def open_face():
    return make_landmarks()


@pytest.fixture
def closed_face():
    return make_landmarks(ear=0.15)
