from typing import Dict, Iterable

from pose_types import Landmark, PoseFrame

# Canonical 33-point body layout emitted by MediaPipe Pose.
LANDMARK_INDEX: Dict[str, int] = {
    "NOSE": 0,
    "LEFT_EYE_INNER": 1,
    "LEFT_EYE": 2,
    "LEFT_EYE_OUTER": 3,
    "RIGHT_EYE_INNER": 4,
    "RIGHT_EYE": 5,
    "RIGHT_EYE_OUTER": 6,
    "LEFT_EAR": 7,
    "RIGHT_EAR": 8,
    "MOUTH_LEFT": 9,
    "MOUTH_RIGHT": 10,
    "LEFT_SHOULDER": 11,
    "RIGHT_SHOULDER": 12,
    "LEFT_ELBOW": 13,
    "RIGHT_ELBOW": 14,
    "LEFT_WRIST": 15,
    "RIGHT_WRIST": 16,
    "LEFT_PINKY": 17,
    "RIGHT_PINKY": 18,
    "LEFT_INDEX": 19,
    "RIGHT_INDEX": 20,
    "LEFT_THUMB": 21,
    "RIGHT_THUMB": 22,
    "LEFT_HIP": 23,
    "RIGHT_HIP": 24,
    "LEFT_KNEE": 25,
    "RIGHT_KNEE": 26,
    "LEFT_ANKLE": 27,
    "RIGHT_ANKLE": 28,
    "LEFT_HEEL": 29,
    "RIGHT_HEEL": 30,
    "LEFT_FOOT_INDEX": 31,
    "RIGHT_FOOT_INDEX": 32,
}

NUM_LANDMARKS = len(LANDMARK_INDEX)


def get_landmark(pose: PoseFrame, name: str) -> Landmark:
    """Return the keypoint for ``name`` or a zero-visibility placeholder.

    Unknown names and short frames both yield the placeholder, so callers only
    ever need to look at ``visibility``.
    """
    index = LANDMARK_INDEX.get(name)
    if index is None or index >= len(pose.keypoints):
        return Landmark(0.0, 0.0, 0.0, 0.0)
    landmark = pose.keypoints[index]
    if landmark is None:
        return Landmark(0.0, 0.0, 0.0, 0.0)
    return landmark


def side_landmarks(pose: PoseFrame, side: str, *joints: str):
    prefix = side.upper()
    return tuple(get_landmark(pose, f"{prefix}_{joint}") for joint in joints)


def mean_visibility(landmarks: Iterable[Landmark]) -> float:
    values = [lm.visibility for lm in landmarks]
    if not values:
        return 0.0
    return sum(values) / len(values)


def are_landmarks_visible(pose: PoseFrame, names: Iterable[str], threshold: float = 0.5) -> bool:
    return all(get_landmark(pose, name).visibility >= threshold for name in names)


def best_side(pose: PoseFrame, joints=("SHOULDER", "ELBOW")) -> str:
    # Ties go to the left side.
    left = mean_visibility(side_landmarks(pose, "left", *joints))
    right = mean_visibility(side_landmarks(pose, "right", *joints))
    return "left" if left >= right else "right"
