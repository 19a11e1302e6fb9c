import pytest

from exercise_registry import (
    DETECTORS,
    ExerciseType,
    UnknownExerciseError,
    create_detector,
    get_exercise_entries,
)
from exercises import AlternatingBicepCurlDetector, BicepCurlDetector, PushupDetector, SquatDetector
from thresholds import CurlThresholds, SquatDifficulty


@pytest.mark.parametrize(
    "name, detector_cls",
    [
        ("pushup", PushupDetector),
        ("bicep-curl", BicepCurlDetector),
        ("alternating-bicep-curl", AlternatingBicepCurlDetector),
        ("squat", SquatDetector),
    ],
)
def test_create_detector(name, detector_cls):
    detector = create_detector(name)
    assert type(detector) is detector_cls
    assert detector.name == name
    assert detector.current_count() == 0


def test_every_type_registered():
    assert set(DETECTORS) == set(ExerciseType)
    assert {entry.exercise_type for entry in get_exercise_entries()} == set(ExerciseType)


def test_fresh_instances():
    assert create_detector(ExerciseType.PUSHUP) is not create_detector(ExerciseType.PUSHUP)


def test_unknown_exercise():
    with pytest.raises(UnknownExerciseError):
        create_detector("burpee")
    with pytest.raises(ValueError):
        ExerciseType.parse("burpee")


def test_options_reach_the_detector():
    squat = create_detector("squat", difficulty="easy", cooldown_ms=300)
    assert squat.difficulty == SquatDifficulty.EASY
    assert squat.thresholds.cooldown_ms == 300

    custom = CurlThresholds(max_sync_diff=30.0)
    curl = create_detector("bicep-curl", thresholds=custom)
    assert curl.thresholds is custom


def test_invalid_options():
    with pytest.raises(ValueError):
        create_detector("squat", difficulty="bottomless")
    with pytest.raises(ValueError):
        create_detector("pushup", elbow_angle_top=100.0)
    with pytest.raises(TypeError):
        create_detector("pushup", no_such_threshold=1)
