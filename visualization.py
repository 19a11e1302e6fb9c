from typing import Dict, Iterable, Optional, Tuple

import cv2

from pose_types import Landmark, PoseFrame, RepCountResult

VISIBILITY_THRESHOLD = 0.5


def _to_pixel(lm: Landmark, image_size: Tuple[int, int]) -> Tuple[int, int]:
    width, height = image_size
    return int(lm.x * width), int(lm.y * height)


def draw_pose(
    frame,
    pose: PoseFrame,
    connections: Iterable[Tuple[int, int]],
    highlight: Optional[Dict[int, Tuple[int, int, int]]] = None,
) -> None:
    highlight = highlight or {}
    height, width = frame.shape[:2]
    keypoints = pose.keypoints

    for a, b in connections:
        if a >= len(keypoints) or b >= len(keypoints):
            continue
        lm_a, lm_b = keypoints[a], keypoints[b]
        if lm_a.visibility < VISIBILITY_THRESHOLD or lm_b.visibility < VISIBILITY_THRESHOLD:
            continue
        cv2.line(frame, _to_pixel(lm_a, (width, height)), _to_pixel(lm_b, (width, height)), (0, 255, 0), 2)

    for idx, lm in enumerate(keypoints):
        if lm.visibility < VISIBILITY_THRESHOLD:
            continue
        color = highlight.get(idx, (0, 255, 255))
        cv2.circle(frame, _to_pixel(lm, (width, height)), 5, color, -1)


def draw_status_panel(frame, lines, origin=(10, 30)) -> None:
    x, y = origin
    for line in lines:
        cv2.putText(frame, line, (x, y), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
        y += 28


def status_lines(exercise_name: str, result: RepCountResult, angle: float):
    lines = [
        f"Exercise: {exercise_name}",
        f"Reps: {result.count}",
        f"Phase: {result.phase.value}  Quality: {result.quality.value}",
        f"Angle: {angle:.0f}",
    ]
    if result.left_arm_count is not None:
        lines.append(f"Left: {result.left_arm_count}  Right: {result.right_arm_count}")
    for message in result.feedback[:3]:
        lines.append(message)
    lines.append("Keys: R reset, Q quit")
    return lines
