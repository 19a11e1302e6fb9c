import logging
from typing import List, Optional, Tuple

from exercises.base import Cooldown, Detector, FormCheck
from geometry import angle_degrees, offset_from_line
from history import SignalWindow
from landmarks import get_landmark, mean_visibility, side_landmarks
from pose_types import PoseFrame, RepCountResult, RepPhase, RepQuality
from thresholds import PushupThresholds, with_overrides

logger = logging.getLogger(__name__)


class PushupDetector(Detector):
    """Side-view push-up counter driven by the elbow angle of the visible arm.

    Phases run start -> top -> eccentric -> bottom -> concentric -> top, with
    the rep counted on the return to top. Reversing before the bottom goes
    straight back to top without counting.
    """

    name = "pushup"
    key_landmarks = [
        "LEFT_SHOULDER",
        "RIGHT_SHOULDER",
        "LEFT_ELBOW",
        "RIGHT_ELBOW",
        "LEFT_WRIST",
        "RIGHT_WRIST",
        "LEFT_HIP",
        "RIGHT_HIP",
    ]

    def __init__(self, thresholds: Optional[PushupThresholds] = None, clock=None, **overrides):
        super().__init__(clock=clock)
        self.thresholds = with_overrides(PushupThresholds(), thresholds, **overrides)
        self._angles = SignalWindow(self.thresholds.smoothing_window)
        self._cooldown = Cooldown(self.thresholds.cooldown_ms)
        self._reset_tracking()

    def _reset_tracking(self) -> None:
        self._stage: Optional[str] = None
        self._elbow_angle = 0.0
        self._side = "left"
        self._shoulder_y_top: Optional[float] = None
        self._shoulder_y_bottom: Optional[float] = None
        self._in_position = False
        self._position_failures = 0

    def reset(self) -> None:
        super().reset()
        self._angles.clear()
        self._cooldown.reset()
        self._reset_tracking()

    def primary_angle(self) -> float:
        return self._elbow_angle

    @property
    def side(self) -> str:
        return self._side

    def _select_arm(self, pose: PoseFrame) -> Tuple[str, float, float]:
        left = side_landmarks(pose, "left", "SHOULDER", "ELBOW", "WRIST")
        right = side_landmarks(pose, "right", "SHOULDER", "ELBOW", "WRIST")
        left_visibility, right_visibility = mean_visibility(left), mean_visibility(right)
        if left_visibility >= right_visibility:
            return "left", angle_degrees(*left), left_visibility
        return "right", angle_degrees(*right), right_visibility

    def _arms_synchronized(self, pose: PoseFrame) -> bool:
        left = side_landmarks(pose, "left", "SHOULDER", "ELBOW", "WRIST")
        right = side_landmarks(pose, "right", "SHOULDER", "ELBOW", "WRIST")
        # The far arm is mostly occluded in a side view; only compare when both are tracked.
        limit = self.thresholds.min_arm_visibility
        if mean_visibility(left) < limit or mean_visibility(right) < limit:
            return True
        return abs(angle_degrees(*left) - angle_degrees(*right)) < self.thresholds.max_elbow_angle_diff

    def _validate_position(self, pose: PoseFrame) -> List[str]:
        t = self.thresholds
        reasons: List[str] = []
        left_shoulder, left_hip, left_knee, left_ankle, left_wrist = side_landmarks(
            pose, "left", "SHOULDER", "HIP", "KNEE", "ANKLE", "WRIST"
        )
        right_shoulder, right_hip, right_knee, right_ankle, right_wrist = side_landmarks(
            pose, "right", "SHOULDER", "HIP", "KNEE", "ANKLE", "WRIST"
        )

        wrist_visibility = max(left_wrist.visibility, right_wrist.visibility)
        shoulder_y = (left_shoulder.y + right_shoulder.y) / 2.0
        hip_y = (left_hip.y + right_hip.y) / 2.0
        knee_angle = max(
            angle_degrees(left_hip, left_knee, left_ankle),
            angle_degrees(right_hip, right_knee, right_ankle),
        )

        if wrist_visibility < t.min_wrist_visibility:
            reasons.append("Keep hands visible in frame")
        if abs(shoulder_y - hip_y) > t.max_shoulder_hip_y_diff:
            reasons.append("Get into horizontal plank position")
        if knee_angle < t.min_knee_angle:
            reasons.append("Straighten your legs - no knee push-ups")
        return reasons

    def _update_position(self, pose: PoseFrame) -> List[str]:
        reasons = self._validate_position(pose)
        if reasons:
            self._position_failures += 1
            if self._position_failures >= self.thresholds.max_position_failures:
                self._in_position = False
        else:
            self._position_failures = 0
            self._in_position = True
        return reasons

    def _in_setup(self, now: int) -> bool:
        state = self.state
        return state.rep_count == 0 and now - state.last_activity_time < self.thresholds.setup_grace_ms

    def _detect(self, pose: PoseFrame, now: int) -> RepCountResult:
        t = self.thresholds
        state = self.state

        reasons = self._update_position(pose)
        blocked = (
            not self._in_position
            and self._position_failures >= t.max_position_failures
            and not self._in_setup(now)
        )
        if blocked:
            state.phase = RepPhase.START
            logger.debug("pushup: out of position (%s)", ", ".join(reasons))
            return RepCountResult(
                count=state.rep_count,
                phase=RepPhase.START,
                quality=RepQuality.POOR,
                feedback=["Get into push-up position:"] + reasons,
            )

        side, raw_angle, arm_visibility = self._select_arm(pose)
        if arm_visibility < t.min_arm_visibility:
            # Untracked arm: the stage is held.
            logger.debug("pushup: arm not tracked (visibility %.2f)", arm_visibility)
            return self._result(FormCheck().finalize(), ["Keep your arms in frame"])
        self._side = side
        angle = self._angles.push(raw_angle)
        self._elbow_angle = angle
        self._trace_inactivity(now, t.inactivity_warning_ms, angle)

        form = self.validate_form(pose)
        shoulder_y = (get_landmark(pose, "LEFT_SHOULDER").y + get_landmark(pose, "RIGHT_SHOULDER").y) / 2.0

        up_enter = t.elbow_angle_top
        up_exit = t.elbow_angle_top - t.hysteresis
        down_enter = t.elbow_angle_bottom
        down_exit = t.elbow_angle_bottom + t.hysteresis

        if angle > up_enter:
            if self._stage == "down":
                if self._cooldown.ready(now):
                    self._complete_rep(pose, now, form)
                else:
                    logger.debug(
                        "pushup: cooldown active (%sms / %sms)", self._cooldown.elapsed(now), t.cooldown_ms
                    )
            self._shoulder_y_top = shoulder_y
            self._stage = "up"
            state.phase = RepPhase.TOP
        elif self._stage == "up" and angle < up_exit:
            state.phase = RepPhase.ECCENTRIC

        # Bottom is only reachable once the top has been seen.
        if angle < down_enter and self._stage is not None:
            self._shoulder_y_bottom = shoulder_y
            if self._stage != "down":
                logger.debug("pushup: bottom reached (%.1f < %.1f)", angle, down_enter)
            self._stage = "down"
            state.phase = RepPhase.BOTTOM
        elif self._stage == "down" and angle > down_exit:
            state.phase = RepPhase.CONCENTRIC

        return self._result(form)

    def _complete_rep(self, pose: PoseFrame, now: int, form: FormCheck) -> None:
        t = self.thresholds
        if not self._arms_synchronized(pose):
            self._reject("arms not synchronized")
            return
        if not self._in_position:
            self._reject("not in push-up position")
            return

        if self._shoulder_y_top is not None and self._shoulder_y_bottom is not None:
            travel = abs(self._shoulder_y_bottom - self._shoulder_y_top)
            if travel < t.min_shoulder_vertical_movement:
                form.penalize(20, "Lower your chest, not just your arms")

        self.state.rep_count += 1
        self._cooldown.mark(now)
        self._record_rep(pose, now, form)
        logger.info("pushup: rep %d (elbow %.1f, score %d)", self.state.rep_count, self._elbow_angle, form.score)

    def validate_form(self, pose: PoseFrame) -> FormCheck:
        t = self.thresholds
        form = FormCheck()
        shoulder, hip, knee = side_landmarks(pose, self._side, "SHOULDER", "HIP", "KNEE")
        if min(shoulder.visibility, hip.visibility, knee.visibility) < 0.3:
            return form.finalize()

        alignment = angle_degrees(shoulder, hip, knee)
        if alignment < t.body_alignment_good:
            sagging = offset_from_line(hip, shoulder, knee) >= 0
            if sagging and alignment < t.body_alignment_warning:
                form.penalize(60, "Hips sagging - engage your core")
            elif sagging:
                form.penalize(30, "Keep your body straighter")
            elif alignment < t.body_alignment_warning:
                form.penalize(40, "Hips too high - lower them")
            else:
                form.penalize(20, "Lower your hips slightly")
        return form.finalize()
