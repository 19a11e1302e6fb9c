import logging
from typing import List, Optional

from exercises.base import Cooldown, Detector, FormCheck
from exercises.bicep_curl import arm_angle, arm_visibility
from history import SignalWindow
from pose_types import PoseFrame, RepCountResult, RepPhase, RepRecord
from thresholds import CurlThresholds, with_overrides

logger = logging.getLogger(__name__)

SIDES = ("left", "right")


class ArmTracker:
    """Stage, cooldown and rep history for one arm."""

    def __init__(self, side: str, thresholds: CurlThresholds):
        self.side = side
        self.thresholds = thresholds
        self.angles = SignalWindow(thresholds.smoothing_window)
        self.cooldown = Cooldown(thresholds.cooldown_ms)
        self.reset()

    def reset(self) -> None:
        self.angles.clear()
        self.cooldown.reset()
        self.stage: Optional[str] = None
        self.angle = 0.0
        self.count = 0
        self.history: List[RepRecord] = []
        self.last_rep_time: Optional[int] = None

    @property
    def label(self) -> str:
        return f"{self.side.capitalize()} arm"

    @property
    def extended(self) -> bool:
        return self.angle > self.thresholds.elbow_angle_extended

    @property
    def curled(self) -> bool:
        return self.angle < self.thresholds.elbow_angle_curled

    def update(self, raw_angle: float, visibility: float, now: int) -> bool:
        """Feed one raw elbow angle; returns True when this arm completes a rep.

        An arm below ``min_arm_visibility`` is untracked: its angle is ignored
        and its stage is held until it is seen again.
        """
        if visibility < self.thresholds.min_arm_visibility:
            return False
        self.angle = self.angles.push(raw_angle)
        completed = False
        if self.extended and self.cooldown.ready(now):
            if self.stage == "up":
                self.count += 1
                self.cooldown.mark(now)
                completed = True
            self.stage = "down"
        elif self.curled:
            if self.stage != "up":
                logger.debug("%s curled (%.1f)", self.label, self.angle)
            self.stage = "up"
        return completed


class AlternatingBicepCurlDetector(Detector):
    """Alternating curls: each arm counts on its own, the total is the sum."""

    name = "alternating-bicep-curl"
    key_landmarks = [
        "LEFT_SHOULDER",
        "RIGHT_SHOULDER",
        "LEFT_ELBOW",
        "RIGHT_ELBOW",
        "LEFT_WRIST",
        "RIGHT_WRIST",
    ]

    def __init__(self, thresholds: Optional[CurlThresholds] = None, clock=None, **overrides):
        super().__init__(clock=clock)
        self.thresholds = with_overrides(CurlThresholds(), thresholds, **overrides)
        self._arms = {side: ArmTracker(side, self.thresholds) for side in SIDES}

    def reset(self) -> None:
        super().reset()
        for arm in self._arms.values():
            arm.reset()

    def current_count(self) -> int:
        return sum(arm.count for arm in self._arms.values())

    def limb_count(self, side: str) -> int:
        return self._arm(side).count

    def limb_history(self, side: str) -> List[RepRecord]:
        return list(self._arm(side).history)

    def primary_angle(self) -> float:
        return (self._arms["left"].angle + self._arms["right"].angle) / 2.0

    def _arm(self, side: str) -> ArmTracker:
        try:
            return self._arms[side]
        except KeyError:
            raise ValueError(f"unknown arm {side!r}, expected one of {SIDES}") from None

    def _detect(self, pose: PoseFrame, now: int) -> RepCountResult:
        state = self.state
        form = self.validate_form(pose)

        for side in SIDES:
            arm = self._arms[side]
            if not arm.update(arm_angle(pose, side), arm_visibility(pose, side), now):
                continue
            state.rep_count = self.current_count()
            start = arm.last_rep_time if arm.last_rep_time is not None else state.started_at
            record = self._record_rep(pose, now, form, feedback=[f"{arm.label} - {form.feedback[0]}"], start_time=start)
            arm.history.append(record)
            arm.last_rep_time = pose.timestamp
            logger.info("%s rep %d (total %d)", arm.label, arm.count, state.rep_count)

        self._trace_inactivity(now, self.thresholds.inactivity_warning_ms, self.primary_angle())

        left, right = self._arms["left"], self._arms["right"]
        # Display-only summary; counting never reads it.
        if left.curled and right.curled:
            state.phase = RepPhase.TOP
        elif left.extended and right.extended:
            state.phase = RepPhase.BOTTOM
        else:
            state.phase = RepPhase.CONCENTRIC

        return self._result(form, left_arm_count=left.count, right_arm_count=right.count)

    def validate_form(self, pose: PoseFrame) -> FormCheck:
        form = FormCheck()
        for side in SIDES:
            if arm_visibility(pose, side) < self.thresholds.min_arm_visibility:
                form.penalize(20, f"Keep your {side} arm in frame")
        return form.finalize()
