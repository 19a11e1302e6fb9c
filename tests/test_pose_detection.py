from types import SimpleNamespace

import pytest

pytest.importorskip("cv2")
pytest.importorskip("mediapipe")

from landmarks import NUM_LANDMARKS  # noqa: E402
from pose_detection import empty_pose, landmarks_to_pose  # noqa: E402


def test_empty_pose_is_untrusted():
    pose = empty_pose(120)
    assert pose.timestamp == 120
    assert len(pose.keypoints) == NUM_LANDMARKS
    assert all(lm.visibility == 0.0 for lm in pose.keypoints)


def test_landmarks_to_pose_pads_short_results():
    raw = [SimpleNamespace(x=0.1, y=0.2, z=0.3, visibility=0.9)] * 10
    pose = landmarks_to_pose(raw, 450)
    assert pose.timestamp == 450
    assert len(pose.keypoints) == NUM_LANDMARKS
    assert pose.keypoints[9].visibility == pytest.approx(0.9)
    assert pose.keypoints[10].visibility == 0.0
