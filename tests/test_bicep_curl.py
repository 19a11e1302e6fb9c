from conftest import blank_pose, curl_pose, feed, hold

from exercises import BicepCurlDetector
from pose_types import RepPhase, RepQuality


def test_both_arms_rep():
    detector = BicepCurlDetector()
    results, _ = feed(detector, curl_pose, hold([(170, 170), (40, 40), (170, 170)]))
    assert detector.current_count() == 1
    assert results[-1].phase == RepPhase.BOTTOM
    assert RepPhase.TOP in [r.phase for r in results]
    (record,) = detector.rep_history()
    assert record.quality == RepQuality.GOOD
    assert record.feedback == ("Good form!",)


def test_one_arm_alone_never_counts():
    detector = BicepCurlDetector()
    results, _ = feed(detector, curl_pose, hold([(170, 170), (40, 170), (170, 170), (40, 170), (170, 170)]))
    assert detector.current_count() == 0
    assert "Curl both arms together" in results[8].feedback
    assert results[8].quality == RepQuality.PARTIAL


def test_hidden_arm_gates_counting():
    detector = BicepCurlDetector()
    frames = hold([(170, 170, 0.9, 0.2), (40, 40, 0.9, 0.2), (170, 170, 0.9, 0.2)])
    results, _ = feed(detector, lambda l, r, lv, rv, timestamp: curl_pose(l, r, timestamp, lv, rv), frames)
    assert detector.current_count() == 0
    assert all("Both arms must be visible" in r.feedback for r in results)


def test_side_view_skips_asymmetry_penalty():
    detector = BicepCurlDetector()
    form = detector.validate_form(curl_pose(40, 170, right_visibility=0.6))
    assert form.feedback == ["Good form!"]


def test_count_deferred_until_cooldown_ends():
    detector = BicepCurlDetector()
    frames = hold([(170, 170), (40, 40), (170, 170), (40, 40)], frames=3) + [(170, 170)] * 80
    results, _ = feed(detector, curl_pose, frames, frame_ms=10)
    history = detector.rep_history()
    assert detector.current_count() == 2
    assert history[1].end_time - history[0].end_time > detector.thresholds.cooldown_ms
    # Held extended while the cooldown runs out.
    assert RepPhase.ECCENTRIC in [r.phase for r in results]


def test_arm_angles_are_smoothed():
    detector = BicepCurlDetector()
    feed(detector, curl_pose, [(170, 170), (170, 170), (40, 40)])
    left, right = detector.arm_angles
    assert left > 160 and right > 160
    assert detector.primary_angle() > 160


def test_reset():
    detector = BicepCurlDetector()
    _, t = feed(detector, curl_pose, hold([(170, 170), (40, 40), (170, 170)]))
    detector.reset()
    assert detector.current_count() == 0
    assert detector.rep_history() == []
    assert detector.arm_angles == (0.0, 0.0)


def test_blank_frames_do_not_reach_smoothing():
    detector = BicepCurlDetector()
    _, t = feed(detector, curl_pose, [(170, 170)] * 5)
    _, t = feed(detector, blank_pose, [()] * 5, start=t)
    feed(detector, curl_pose, [(170, 170)] * 5, start=t)
    assert detector.current_count() == 0
    assert detector.arm_angles[0] > 160
