from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Type, Union

from exercises import (
    AlternatingBicepCurlDetector,
    BicepCurlDetector,
    Detector,
    PushupDetector,
    SquatDetector,
)


class UnknownExerciseError(ValueError):
    pass


class ExerciseType(str, Enum):
    PUSHUP = "pushup"
    BICEP_CURL = "bicep-curl"
    ALTERNATING_BICEP_CURL = "alternating-bicep-curl"
    SQUAT = "squat"

    @classmethod
    def parse(cls, value: Union["ExerciseType", str]) -> "ExerciseType":
        try:
            return cls(value)
        except ValueError:
            known = ", ".join(t.value for t in cls)
            raise UnknownExerciseError(f"unknown exercise type {value!r} (expected one of: {known})") from None


DETECTORS: Dict[ExerciseType, Type[Detector]] = {
    ExerciseType.PUSHUP: PushupDetector,
    ExerciseType.BICEP_CURL: BicepCurlDetector,
    ExerciseType.ALTERNATING_BICEP_CURL: AlternatingBicepCurlDetector,
    ExerciseType.SQUAT: SquatDetector,
}


def create_detector(exercise_type: Union[ExerciseType, str], **options) -> Detector:
    """Build a fresh detector for ``exercise_type``.

    ``options`` go to the detector constructor: ``thresholds``, ``clock``,
    individual threshold overrides, and ``difficulty`` for squats.
    """
    detector_cls = DETECTORS[ExerciseType.parse(exercise_type)]
    return detector_cls(**options)


@dataclass
class ExerciseEntry:
    name: str
    exercise_type: ExerciseType
    view_hint: str
    description: str = ""


def get_exercise_entries() -> List[ExerciseEntry]:
    return [
        ExerciseEntry(
            "Push-ups",
            ExerciseType.PUSHUP,
            "Side",
            "Classic push-up targeting chest, triceps and shoulders.",
        ),
        ExerciseEntry(
            "Bicep Curls (Both Arms)",
            ExerciseType.BICEP_CURL,
            "Front",
            "Both arms curl together; a rep counts when both complete the curl.",
        ),
        ExerciseEntry(
            "Alternating Bicep Curls",
            ExerciseType.ALTERNATING_BICEP_CURL,
            "Front",
            "Each arm curls on its own; left and right reps are tracked separately.",
        ),
        ExerciseEntry(
            "Squats",
            ExerciseType.SQUAT,
            "Front or Side",
            "Bodyweight squat with selectable depth.",
        ),
    ]
