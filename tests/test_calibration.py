from calibration import StandingCalibrator


def test_no_baseline_before_first_frame():
    assert StandingCalibrator().result() is None


def test_highest_hip_wins():
    calibrator = StandingCalibrator(calibration_frames=30)
    calibrator.update(0.50, 170.0)
    calibrator.update(0.48, 175.0)
    result = calibrator.update(0.52, 160.0)
    assert result.hip_y_standing == 0.48
    assert result.knee_angle_standing == 175.0
    assert result.frames == 3
    assert not calibrator.complete


def test_frozen_after_calibration_frames():
    calibrator = StandingCalibrator(calibration_frames=2)
    calibrator.update(0.50, 170.0)
    calibrator.update(0.49, 172.0)
    assert calibrator.complete
    result = calibrator.update(0.30, 100.0)
    assert result.hip_y_standing == 0.49
    assert result.frames == 2


def test_mark_complete_keeps_first_frame():
    calibrator = StandingCalibrator()
    calibrator.mark_complete()
    calibrator.update(0.55, 168.0)
    result = calibrator.update(0.40, 170.0)
    assert result.hip_y_standing == 0.55
    assert result.frames == 1


def test_reset():
    calibrator = StandingCalibrator(calibration_frames=1)
    calibrator.update(0.5, 170.0)
    calibrator.mark_complete()
    calibrator.reset()
    assert not calibrator.complete
    assert calibrator.result() is None
