import logging
from typing import List, Optional, Tuple

from calibration import StandingCalibrator
from exercises.base import GOOD_FORM, Cooldown, Detector, FormCheck
from geometry import angle_degrees
from history import SignalWindow
from landmarks import best_side, get_landmark, side_landmarks
from pose_types import PoseFrame, RepCountResult, RepPhase
from thresholds import SquatDifficulty, SquatThresholds, with_overrides

logger = logging.getLogger(__name__)

FRONT = "front"
SIDE = "side"


class SquatDetector(Detector):
    """View-adaptive squat counter.

    Front view follows how far the hips drop below the calibrated standing
    height; side view follows the knee angle. Any excursion away from standing
    is a candidate rep that is judged on its deepest point when the subject
    stands back up: deep enough counts, otherwise it is rejected.

    The view is re-evaluated while standing until the first counted rep, then
    locked for the rest of the set.
    """

    name = "squat"
    key_landmarks = [
        "LEFT_HIP",
        "RIGHT_HIP",
        "LEFT_KNEE",
        "RIGHT_KNEE",
        "LEFT_ANKLE",
        "RIGHT_ANKLE",
        "LEFT_SHOULDER",
        "RIGHT_SHOULDER",
    ]

    def __init__(
        self,
        difficulty: SquatDifficulty = SquatDifficulty.NINETY_DEGREE,
        thresholds: Optional[SquatThresholds] = None,
        clock=None,
        **overrides,
    ):
        super().__init__(clock=clock)
        self.thresholds = with_overrides(SquatThresholds(), thresholds, **overrides)
        self.difficulty = SquatDifficulty(difficulty)
        self.depth = self.thresholds.depth_for(self.difficulty)
        self._knee_angles = SignalWindow(self.thresholds.smoothing_window)
        self._calibrator = StandingCalibrator(self.thresholds.calibration_frames)
        self._cooldown = Cooldown(self.thresholds.cooldown_ms)
        self._reset_tracking()

    def _reset_tracking(self) -> None:
        self._stage: Optional[str] = None
        self._view: Optional[str] = None
        self._view_locked = False
        self._knee_angle = 0.0
        self._hip_drop = 0.0
        self._attempt_start: Optional[int] = None
        self._deepest_knee: Optional[float] = None
        self._deepest_drop: Optional[float] = None
        self._worst_form: Optional[FormCheck] = None
        self._carry_feedback: List[str] = []

    def reset(self) -> None:
        super().reset()
        self._knee_angles.clear()
        self._calibrator.reset()
        self._cooldown.reset()
        self._reset_tracking()

    def primary_angle(self) -> float:
        return self._knee_angle

    def hip_drop(self) -> float:
        return self._hip_drop

    def view(self) -> Optional[str]:
        return self._view

    @property
    def view_locked(self) -> bool:
        return self._view_locked

    @property
    def calibrated(self) -> bool:
        return self._calibrator.complete

    def finish_calibration(self) -> None:
        self._calibrator.mark_complete()

    def _leg_angle(self, pose: PoseFrame) -> Tuple[str, float]:
        left = side_landmarks(pose, "left", "HIP", "KNEE", "ANKLE")
        right = side_landmarks(pose, "right", "HIP", "KNEE", "ANKLE")
        left_visibility = min(lm.visibility for lm in left)
        right_visibility = min(lm.visibility for lm in right)
        if left_visibility >= right_visibility:
            return "left", angle_degrees(*left)
        return "right", angle_degrees(*right)

    def _leg_visibility(self, pose: PoseFrame) -> float:
        return max(
            min(lm.visibility for lm in side_landmarks(pose, side, "HIP", "KNEE", "ANKLE"))
            for side in ("left", "right")
        )

    def _detect_view(self, pose: PoseFrame) -> str:
        hip_width = abs(get_landmark(pose, "LEFT_HIP").x - get_landmark(pose, "RIGHT_HIP").x)
        return FRONT if hip_width > self.thresholds.min_hip_width_front else SIDE

    def _detect(self, pose: PoseFrame, now: int) -> RepCountResult:
        t = self.thresholds
        depth = self.depth
        state = self.state

        # Nobody in view (or legs out of frame): keep baseline, window and stage untouched.
        leg_visibility = self._leg_visibility(pose)
        if leg_visibility < t.min_knee_visibility:
            logger.debug("squat: legs not tracked (visibility %.2f)", leg_visibility)
            return self._result(FormCheck(), self._carry_feedback + ["Keep knees visible in frame"])

        hip_y = (get_landmark(pose, "LEFT_HIP").y + get_landmark(pose, "RIGHT_HIP").y) / 2.0
        _, raw_knee = self._leg_angle(pose)
        knee = self._knee_angles.push(raw_knee)
        self._knee_angle = knee

        baseline = self._calibrator.update(hip_y, knee)
        self._hip_drop = hip_y - baseline.hip_y_standing if baseline is not None else 0.0

        if not self._view_locked and self._stage in (None, "up"):
            view = self._detect_view(pose)
            if view != self._view:
                logger.debug("squat: view %s -> %s", self._view, view)
            self._view = view

        if self._view == FRONT:
            drop = self._hip_drop
            standing = drop < t.standing_hip_drop
            leaving_standing = drop > t.standing_hip_drop_exit
            deep = drop > depth.min_hip_drop
            leaving_deep = drop < depth.hip_drop_exit
        else:
            standing = knee > t.knee_angle_standing
            leaving_standing = knee < t.knee_angle_standing_exit
            deep = knee < depth.knee_angle_down
            leaving_deep = knee > depth.knee_angle_down_exit

        self._trace_inactivity(now, t.inactivity_warning_ms, knee)

        if self._stage is None:
            if standing:
                self._stage = "up"
                state.phase = RepPhase.TOP
        elif self._stage == "up":
            if leaving_standing:
                self._begin_attempt(pose)
                state.phase = RepPhase.ECCENTRIC
        else:
            self._track_depth()
            if deep:
                if self._stage != "down":
                    logger.debug("squat: down [%s] knee %.1f drop %.3f", self._view, knee, self._hip_drop)
                self._stage = "down"
                state.phase = RepPhase.BOTTOM
            elif self._stage == "down" and leaving_deep:
                state.phase = RepPhase.CONCENTRIC

        form = self.validate_form(pose) if self._stage == "down" else FormCheck().finalize()
        if self._stage == "down" and (self._worst_form is None or form.score < self._worst_form.score):
            self._worst_form = form

        if self._stage in ("descending", "down") and standing:
            self._finish_attempt(pose, now)
            self._stage = "up"
            state.phase = RepPhase.TOP

        feedback = list(form.feedback)
        if self._carry_feedback:
            feedback = self._carry_feedback + [msg for msg in feedback if msg != GOOD_FORM]
        return self._result(form, feedback)

    def _begin_attempt(self, pose: PoseFrame) -> None:
        self._stage = "descending"
        self._attempt_start = pose.timestamp
        self._deepest_knee = None
        self._deepest_drop = None
        self._worst_form = None
        self._carry_feedback = []
        self._track_depth()

    def _track_depth(self) -> None:
        if self._deepest_knee is None or self._knee_angle < self._deepest_knee:
            self._deepest_knee = self._knee_angle
        if self._deepest_drop is None or self._hip_drop > self._deepest_drop:
            self._deepest_drop = self._hip_drop

    def _depth_reached(self) -> bool:
        if self._view == FRONT:
            return self._deepest_drop is not None and self._deepest_drop >= self.depth.min_hip_drop
        limit = self.depth.knee_angle_down + self.thresholds.depth_tolerance
        return self._deepest_knee is not None and self._deepest_knee <= limit

    def _finish_attempt(self, pose: PoseFrame, now: int) -> None:
        state = self.state
        if not self._cooldown.ready(now):
            logger.debug(
                "squat: cooldown active (%sms / %sms)", self._cooldown.elapsed(now), self.thresholds.cooldown_ms
            )
        elif self._depth_reached():
            form = self._worst_form or FormCheck().finalize()
            state.rep_count += 1
            self._cooldown.mark(now)
            if not self._view_locked:
                self._view_locked = True
                logger.debug("squat: view locked to %s", self._view)
            self._record_rep(pose, now, form, start_time=self._attempt_start)
            logger.info(
                "squat: rep %d [%s] deepest knee %.1f, drop %.3f, score %d",
                state.rep_count,
                self._view,
                self._deepest_knee,
                self._deepest_drop,
                form.score,
            )
        else:
            if self._view == FRONT:
                self._reject(
                    f"hip drop {self._deepest_drop:.3f} < {self.depth.min_hip_drop:.3f} ({self.difficulty.value})"
                )
            else:
                limit = self.depth.knee_angle_down + self.thresholds.depth_tolerance
                self._reject(f"knee angle {self._deepest_knee:.1f} > {limit:.1f} ({self.difficulty.value})")
            self._carry_feedback = ["Squat deeper - rep not counted"]

        self._deepest_knee = None
        self._deepest_drop = None
        self._worst_form = None
        self._attempt_start = None

    def validate_form(self, pose: PoseFrame) -> FormCheck:
        t = self.thresholds
        form = FormCheck()

        side = best_side(pose, ("SHOULDER", "HIP", "KNEE"))
        shoulder, hip, knee = side_landmarks(pose, side, "SHOULDER", "HIP", "KNEE")
        if angle_degrees(shoulder, hip, knee) < t.max_torso_lean:
            form.penalize(40, "Keep chest up - don't lean too far forward")

        left = side_landmarks(pose, "left", "HIP", "KNEE", "ANKLE")
        right = side_landmarks(pose, "right", "HIP", "KNEE", "ANKLE")
        both_tracked = min(lm.visibility for lm in left + right) >= t.symmetry_min_visibility
        if both_tracked and abs(angle_degrees(*left) - angle_degrees(*right)) >= t.max_knee_angle_diff:
            form.penalize(30, "Squat with both legs evenly")

        return form.finalize()
