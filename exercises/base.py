import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from pose_types import PoseFrame, RepCountResult, RepPhase, RepQuality, RepRecord

logger = logging.getLogger(__name__)

GOOD_FORM = "Good form!"
INACTIVITY_LOG_INTERVAL_MS = 2000


def quality_from_score(score: float) -> RepQuality:
    if score >= 70:
        return RepQuality.GOOD
    if score >= 40:
        return RepQuality.PARTIAL
    return RepQuality.POOR


@dataclass
class FormCheck:
    score: int = 100
    feedback: List[str] = field(default_factory=list)

    def penalize(self, points: int, message: str) -> None:
        if self.feedback == [GOOD_FORM]:
            self.feedback.clear()
        self.score = max(0, self.score - points)
        self.feedback.append(message)

    def finalize(self) -> "FormCheck":
        if not self.feedback:
            self.feedback.append(GOOD_FORM)
        return self

    @property
    def quality(self) -> RepQuality:
        return quality_from_score(self.score)


@dataclass
class DetectorState:
    phase: RepPhase = RepPhase.START
    rep_count: int = 0
    rejected_count: int = 0
    history: List[RepRecord] = field(default_factory=list)
    frame_count: int = 0
    started_at: Optional[int] = None
    last_rep_start_time: Optional[int] = None
    last_activity_time: Optional[int] = None
    last_inactivity_log: Optional[int] = None


class Cooldown:
    def __init__(self, period_ms: int):
        self.period_ms = period_ms
        self._last: Optional[int] = None

    def ready(self, now: int) -> bool:
        return self._last is None or now - self._last > self.period_ms

    def elapsed(self, now: int) -> Optional[int]:
        return None if self._last is None else now - self._last

    def mark(self, now: int) -> None:
        self._last = now

    def reset(self) -> None:
        self._last = None


class Detector(ABC):
    """Per-exercise repetition state machine.

    ``process_frame`` must be called with frames in non-decreasing timestamp
    order. ``clock`` returns milliseconds and drives the cooldown; without one
    the frame timestamp is used, which keeps replays deterministic.
    """

    name = "base"
    key_landmarks: List[str] = []

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self._clock = clock
        self.state = DetectorState()

    def process_frame(self, pose: PoseFrame) -> RepCountResult:
        state = self.state
        state.frame_count += 1
        now = self._now(pose)
        if state.started_at is None:
            state.started_at = pose.timestamp
        if state.last_rep_start_time is None:
            state.last_rep_start_time = pose.timestamp
        if state.last_activity_time is None:
            state.last_activity_time = now
        return self._detect(pose, now)

    @abstractmethod
    def _detect(self, pose: PoseFrame, now: int) -> RepCountResult:
        """Advance the state machine by one frame."""

    @abstractmethod
    def validate_form(self, pose: PoseFrame) -> FormCheck:
        """Score the current frame's form without touching the count."""

    def reset(self) -> None:
        self.state = DetectorState()

    def current_count(self) -> int:
        return self.state.rep_count

    def rep_history(self) -> List[RepRecord]:
        return list(self.state.history)

    def rejected_count(self) -> int:
        return self.state.rejected_count

    @property
    def phase(self) -> RepPhase:
        return self.state.phase

    def primary_angle(self) -> float:
        return 0.0

    def _now(self, pose: PoseFrame) -> int:
        if self._clock is not None:
            return int(self._clock())
        return pose.timestamp

    def _result(self, form: FormCheck, feedback: Optional[Sequence[str]] = None, **extra) -> RepCountResult:
        return RepCountResult(
            count=self.state.rep_count,
            phase=self.state.phase,
            quality=form.quality,
            feedback=list(form.feedback if feedback is None else feedback),
            **extra,
        )

    def _record_rep(
        self,
        pose: PoseFrame,
        now: int,
        form: FormCheck,
        feedback: Optional[Sequence[str]] = None,
        start_time: Optional[int] = None,
    ) -> RepRecord:
        state = self.state
        start = state.last_rep_start_time if start_time is None else start_time
        if start is None:
            start = pose.timestamp
        record = RepRecord(
            number=state.rep_count,
            start_time=start,
            end_time=pose.timestamp,
            duration=pose.timestamp - start,
            quality=form.quality,
            form_score=form.score,
            feedback=tuple(form.feedback if feedback is None else feedback),
        )
        state.history.append(record)
        state.last_rep_start_time = pose.timestamp
        state.last_activity_time = now
        return record

    def _reject(self, reason: str) -> None:
        self.state.rejected_count += 1
        logger.info("%s rep rejected: %s", self.name, reason)

    def _trace_inactivity(self, now: int, limit_ms: int, signal: float) -> None:
        state = self.state
        if state.rep_count or state.last_activity_time is None:
            return
        idle = now - state.last_activity_time
        if idle <= limit_ms:
            return
        if state.last_inactivity_log is not None and now - state.last_inactivity_log <= INACTIVITY_LOG_INTERVAL_MS:
            return
        state.last_inactivity_log = now
        logger.debug("%s: no reps for %ds, signal %.0f", self.name, idle // 1000, signal)
