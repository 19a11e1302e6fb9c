import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pytest

from landmarks import LANDMARK_INDEX, NUM_LANDMARKS
from pose_types import Landmark, PoseFrame

FRAME_MS = 33
ARM_LENGTH = 0.15
SHIN_LENGTH = 0.2
THIGH_LENGTH = 0.2


def make_pose(points: Dict[str, Sequence[float]], timestamp: int = 0, visibility: float = 0.95) -> PoseFrame:
    """Build a frame from ``{"LEFT_ELBOW": (x, y[, visibility])}``; the rest stay invisible."""
    keypoints = [Landmark(0.0, 0.0, 0.0, 0.0) for _ in range(NUM_LANDMARKS)]
    for name, value in points.items():
        vis = value[2] if len(value) > 2 else visibility
        keypoints[LANDMARK_INDEX[name]] = Landmark(value[0], value[1], 0.0, vis)
    return PoseFrame(keypoints, timestamp)


def blank_pose(timestamp: int = 0) -> PoseFrame:
    """Nobody in view: every keypoint zeroed, as the live pose provider reports it."""
    return make_pose({}, timestamp)


def hanging_arm(shoulder: Tuple[float, float], elbow_angle: float, mirror: bool = False):
    """Shoulder, elbow and wrist for an upper arm pointing down with the given elbow angle."""
    sx, sy = shoulder
    elbow = (sx, sy + ARM_LENGTH)
    rad = math.radians(elbow_angle)
    dx = -math.sin(rad) if mirror else math.sin(rad)
    wrist = (elbow[0] + ARM_LENGTH * dx, elbow[1] - ARM_LENGTH * math.cos(rad))
    return (sx, sy), elbow, wrist


def plank_pose(
    elbow_angle: float,
    right_angle: Optional[float] = None,
    timestamp: int = 0,
    hip_y: float = 0.52,
) -> PoseFrame:
    """Side-view plank, head to the left; both arms share one angle unless ``right_angle`` is given."""
    points = {}
    for side, angle in (("LEFT", elbow_angle), ("RIGHT", elbow_angle if right_angle is None else right_angle)):
        shoulder, elbow, wrist = hanging_arm((0.30, 0.50), angle)
        points[f"{side}_SHOULDER"] = shoulder
        points[f"{side}_ELBOW"] = elbow
        points[f"{side}_WRIST"] = wrist
        points[f"{side}_HIP"] = (0.55, hip_y)
        points[f"{side}_KNEE"] = (0.72, 0.535)
        points[f"{side}_ANKLE"] = (0.90, 0.55)
    return make_pose(points, timestamp)


def standing_pose(timestamp: int = 0) -> PoseFrame:
    points = {}
    for side, x in (("LEFT", 0.45), ("RIGHT", 0.55)):
        points[f"{side}_SHOULDER"] = (x, 0.30)
        points[f"{side}_ELBOW"] = (x, 0.45)
        points[f"{side}_WRIST"] = (x, 0.60)
        points[f"{side}_HIP"] = (x, 0.60)
        points[f"{side}_KNEE"] = (x, 0.75)
        points[f"{side}_ANKLE"] = (x, 0.90)
    return make_pose(points, timestamp)


def curl_pose(
    left_angle: float,
    right_angle: float,
    timestamp: int = 0,
    left_visibility: float = 0.9,
    right_visibility: float = 0.9,
) -> PoseFrame:
    points = {}
    for side, x, angle, vis, mirror in (
        ("LEFT", 0.40, left_angle, left_visibility, False),
        ("RIGHT", 0.60, right_angle, right_visibility, True),
    ):
        shoulder, elbow, wrist = hanging_arm((x, 0.30), angle, mirror=mirror)
        points[f"{side}_SHOULDER"] = shoulder + (vis,)
        points[f"{side}_ELBOW"] = elbow + (vis,)
        points[f"{side}_WRIST"] = wrist + (vis,)
    return make_pose(points, timestamp)


def front_squat_pose(hip_drop: float, timestamp: int = 0, hip_half_width: float = 0.05) -> PoseFrame:
    points = {}
    for side, sign in (("LEFT", -1), ("RIGHT", 1)):
        x = 0.5 + sign * hip_half_width
        points[f"{side}_SHOULDER"] = (0.5 + sign * 0.08, 0.30)
        points[f"{side}_HIP"] = (x, 0.50 + hip_drop)
        points[f"{side}_KNEE"] = (x, 0.65)
        points[f"{side}_ANKLE"] = (x, 0.85)
    return make_pose(points, timestamp)


def side_squat_pose(knee_angle: float, timestamp: int = 0) -> PoseFrame:
    points = {}
    rad = math.radians(knee_angle)
    for side, offset in (("LEFT", 0.0), ("RIGHT", 0.005)):
        knee = (0.50 + offset, 0.70)
        hip = (knee[0] + THIGH_LENGTH * math.sin(rad), knee[1] + THIGH_LENGTH * math.cos(rad))
        points[f"{side}_ANKLE"] = (0.50 + offset, 0.70 + SHIN_LENGTH)
        points[f"{side}_KNEE"] = knee
        points[f"{side}_HIP"] = hip
        points[f"{side}_SHOULDER"] = (hip[0] - 0.05, hip[1] - 0.25)
    return make_pose(points, timestamp)


def hold(values: Iterable, frames: int = 5) -> List:
    out = []
    for value in values:
        out.extend([value] * frames)
    return out


def feed(detector, builder, values, start: int = 0, frame_ms: int = FRAME_MS):
    """Feed one frame per value; returns the results and the next free timestamp."""
    results = []
    timestamp = start
    for value in values:
        args = value if isinstance(value, tuple) else (value,)
        results.append(detector.process_frame(builder(*args, timestamp=timestamp)))
        timestamp += frame_ms
    return results, timestamp


@pytest.fixture
def fake_clock():
    class FakeClock:
        def __init__(self):
            self.now = 0

        def __call__(self):
            return self.now

        def advance(self, ms: int) -> None:
            self.now += ms

    return FakeClock()
