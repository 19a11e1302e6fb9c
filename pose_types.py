from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple


@dataclass
class Landmark:
    x: float
    y: float
    z: float
    visibility: float


@dataclass
class PoseFrame:
    keypoints: List[Landmark]
    timestamp: int

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]], timestamp: int) -> "PoseFrame":
        # Accepts (x, y, z, visibility) tuples in canonical landmark order.
        keypoints = [Landmark(float(x), float(y), float(z), float(v)) for x, y, z, v in points]
        return cls(keypoints=keypoints, timestamp=int(timestamp))


class RepPhase(str, Enum):
    START = "start"
    TOP = "top"
    ECCENTRIC = "eccentric"
    BOTTOM = "bottom"
    CONCENTRIC = "concentric"


class RepQuality(str, Enum):
    GOOD = "good"
    PARTIAL = "partial"
    POOR = "poor"


@dataclass(frozen=True)
class RepRecord:
    number: int
    start_time: int
    end_time: int
    duration: int
    quality: RepQuality
    form_score: int
    feedback: Tuple[str, ...]


@dataclass
class RepCountResult:
    count: int
    phase: RepPhase
    quality: RepQuality
    feedback: List[str] = field(default_factory=list)
    left_arm_count: Optional[int] = None
    right_arm_count: Optional[int] = None
