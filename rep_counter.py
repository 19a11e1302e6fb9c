import logging
from typing import List, Union

from exercise_registry import ExerciseType, create_detector
from exercises import Detector
from pose_types import PoseFrame, RepCountResult, RepPhase, RepRecord

logger = logging.getLogger(__name__)


class RepCounter:
    """Owns the one active detector of a session and forwards frames to it.

    Changing exercise always builds a new detector; instances are never
    reused across exercise types.
    """

    def __init__(self, exercise_type: Union[ExerciseType, str], **options):
        self._exercise_type = ExerciseType.parse(exercise_type)
        self._detector = create_detector(self._exercise_type, **options)

    @property
    def exercise_type(self) -> ExerciseType:
        return self._exercise_type

    @property
    def detector(self) -> Detector:
        return self._detector

    def switch_exercise(self, exercise_type: Union[ExerciseType, str], **options) -> None:
        new_type = ExerciseType.parse(exercise_type)
        logger.info("switching exercise %s -> %s", self._exercise_type.value, new_type.value)
        self._detector = create_detector(new_type, **options)
        self._exercise_type = new_type

    def process_frame(self, pose: PoseFrame) -> RepCountResult:
        return self._detector.process_frame(pose)

    def reset(self) -> None:
        self._detector.reset()

    def current_count(self) -> int:
        return self._detector.current_count()

    def rep_history(self) -> List[RepRecord]:
        return self._detector.rep_history()

    def rejected_count(self) -> int:
        return self._detector.rejected_count()

    def primary_angle(self) -> float:
        return self._detector.primary_angle()

    @property
    def phase(self) -> RepPhase:
        return self._detector.phase
