import argparse
import logging

import cv2
import numpy as np

from camera import CameraStream
from exercise_registry import ExerciseType, get_exercise_entries
from landmarks import LANDMARK_INDEX
from pose_detection import PoseDetector
from rep_counter import RepCounter
from thresholds import SquatDifficulty
from visualization import draw_pose, draw_status_panel, status_lines

logger = logging.getLogger("app")

HIGHLIGHT = {
    LANDMARK_INDEX["LEFT_SHOULDER"]: (255, 0, 0),
    LANDMARK_INDEX["RIGHT_SHOULDER"]: (255, 0, 0),
    LANDMARK_INDEX["LEFT_WRIST"]: (0, 255, 255),
    LANDMARK_INDEX["RIGHT_WRIST"]: (0, 255, 255),
    LANDMARK_INDEX["LEFT_HIP"]: (255, 255, 0),
    LANDMARK_INDEX["RIGHT_HIP"]: (255, 255, 0),
    LANDMARK_INDEX["LEFT_KNEE"]: (0, 165, 255),
    LANDMARK_INDEX["RIGHT_KNEE"]: (0, 165, 255),
}


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Count exercise reps from a webcam or a recorded video.")
    parser.add_argument(
        "--exercise",
        choices=[t.value for t in ExerciseType],
        default=ExerciseType.PUSHUP.value,
    )
    parser.add_argument(
        "--difficulty",
        choices=[d.value for d in SquatDifficulty],
        default=SquatDifficulty.NINETY_DEGREE.value,
        help="squat depth mode",
    )
    parser.add_argument("--camera", type=int, default=0)
    parser.add_argument("--video", help="replay a recorded video file instead of the camera")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def detector_options(exercise_type: ExerciseType, difficulty: str) -> dict:
    if exercise_type == ExerciseType.SQUAT:
        return {"difficulty": SquatDifficulty(difficulty)}
    return {}


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    exercise_type = ExerciseType.parse(args.exercise)
    names = {entry.exercise_type: entry.name for entry in get_exercise_entries()}
    counter = RepCounter(exercise_type, **detector_options(exercise_type, args.difficulty))

    window_name = "Rep Counter"
    source = args.video if args.video else args.camera
    camera = CameraStream(source=source, width=1280, height=720, target_fps=30)
    if not camera.open():
        logger.error("could not open video source %s", source)
        return 1

    detector = PoseDetector()
    cv2.namedWindow(window_name, cv2.WINDOW_NORMAL)
    try:
        while True:
            if cv2.getWindowProperty(window_name, cv2.WND_PROP_VISIBLE) < 1:
                break
            cam_frame = camera.read()
            if not cam_frame.ok:
                if camera.is_file:
                    logger.info("end of video")
                    break
                blank = np.zeros((480, 640, 3), dtype=np.uint8)
                draw_status_panel(blank, ["Camera error"], origin=(10, 30))
                cv2.imshow(window_name, blank)
                if cv2.waitKey(1) & 0xFF == ord("q"):
                    break
                continue

            frame = cam_frame.frame
            pose = detector.process(frame, cam_frame.timestamp)
            result = counter.process_frame(pose)

            draw_pose(frame, pose, detector.connections, highlight=HIGHLIGHT)
            lines = status_lines(names[exercise_type], result, counter.primary_angle())
            draw_status_panel(frame, lines, origin=(10, 30))
            cv2.imshow(window_name, frame)

            key = cv2.waitKey(1) & 0xFF
            if key == ord("q"):
                break
            if key == ord("r"):
                counter.reset()
                logger.info("counter reset")
    finally:
        logger.info("session finished: %d reps", counter.current_count())
        detector.close()
        camera.release()
        cv2.destroyAllWindows()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
