from typing import List

import cv2
import mediapipe as mp

from landmarks import NUM_LANDMARKS
from pose_types import Landmark, PoseFrame


def empty_pose(timestamp: int) -> PoseFrame:
    # No person in view: every keypoint present but untrusted.
    return PoseFrame([Landmark(0.0, 0.0, 0.0, 0.0) for _ in range(NUM_LANDMARKS)], timestamp)


def landmarks_to_pose(landmarks, timestamp: int) -> PoseFrame:
    keypoints: List[Landmark] = [
        Landmark(float(lm.x), float(lm.y), float(lm.z), float(lm.visibility)) for lm in landmarks
    ]
    # Pad short results so the canonical index layout always holds.
    while len(keypoints) < NUM_LANDMARKS:
        keypoints.append(Landmark(0.0, 0.0, 0.0, 0.0))
    return PoseFrame(keypoints=keypoints, timestamp=int(timestamp))


class PoseDetector:
    """Single-person MediaPipe Pose wrapper producing one PoseFrame per video frame."""

    def __init__(
        self,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        model_complexity: int = 1,
    ):
        self._mp_pose = mp.solutions.pose
        self._pose = self._mp_pose.Pose(
            static_image_mode=False,
            model_complexity=model_complexity,
            smooth_landmarks=True,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )

    @property
    def connections(self):
        return self._mp_pose.POSE_CONNECTIONS

    def process(self, frame_bgr, timestamp: int) -> PoseFrame:
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        results = self._pose.process(frame_rgb)
        if results.pose_landmarks is None:
            return empty_pose(timestamp)
        return landmarks_to_pose(results.pose_landmarks.landmark, timestamp)

    def close(self) -> None:
        self._pose.close()
