import time
from dataclasses import dataclass
from typing import Optional, Union

import cv2
import numpy as np


def now_ms() -> int:
    return int(time.monotonic() * 1000)


@dataclass
class CameraFrame:
    frame: Optional[np.ndarray]
    timestamp: int
    ok: bool


class CameraStream:
    """Frames from a webcam index or a recorded video file.

    Live sources are paced to ``target_fps`` and stamped with a monotonic
    clock. Files are stamped with their own playback position, so replaying a
    recording gives the same timestamps on every run. Either way timestamps
    never go backwards.
    """

    def __init__(
        self,
        source: Union[int, str] = 0,
        width: int = 1280,
        height: int = 720,
        target_fps: int = 30,
    ):
        self.source = source
        self.width = width
        self.height = height
        self.target_fps = target_fps
        self._capture: Optional[cv2.VideoCapture] = None
        self._last_time: Optional[int] = None
        self._start = 0

    @property
    def is_file(self) -> bool:
        return isinstance(self.source, str)

    def open(self) -> bool:
        capture = cv2.VideoCapture(self.source)
        if not capture.isOpened():
            capture.release()
            return False
        if not self.is_file:
            capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
            capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
            capture.set(cv2.CAP_PROP_FPS, self.target_fps)
        self._capture = capture
        self._start = now_ms()
        self._last_time = None
        return True

    def read(self) -> CameraFrame:
        if self._capture is None:
            return CameraFrame(None, self._stamp(now_ms() - self._start), False)

        ok, frame = self._capture.read()
        if self.is_file:
            timestamp = int(self._capture.get(cv2.CAP_PROP_POS_MSEC))
        else:
            timestamp = self._pace(now_ms() - self._start)
        return CameraFrame(frame if ok else None, self._stamp(timestamp), ok)

    def _pace(self, timestamp: int) -> int:
        if self.target_fps <= 0 or self._last_time is None:
            return timestamp
        frame_ms = 1000 // self.target_fps
        wait = self._last_time + frame_ms - timestamp
        if wait > 0:
            time.sleep(wait / 1000.0)
            timestamp += wait
        return timestamp

    def _stamp(self, timestamp: int) -> int:
        if self._last_time is not None:
            timestamp = max(timestamp, self._last_time)
        self._last_time = timestamp
        return timestamp

    def release(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
