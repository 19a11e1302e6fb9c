import pytest

from exercises.base import GOOD_FORM, Cooldown, Detector, FormCheck, quality_from_score
from pose_types import RepQuality


def test_detector_contract_is_abstract():
    with pytest.raises(TypeError):
        Detector()


def test_partial_detector_cannot_be_built():
    class CountsOnly(Detector):
        def _detect(self, pose, now):
            return None

    with pytest.raises(TypeError):
        CountsOnly()


@pytest.mark.parametrize(
    "score, quality",
    [
        (100, RepQuality.GOOD),
        (70, RepQuality.GOOD),
        (69, RepQuality.PARTIAL),
        (40, RepQuality.PARTIAL),
        (39, RepQuality.POOR),
    ],
)
def test_quality_breakpoints(score, quality):
    assert quality_from_score(score) == quality


def test_form_check_penalties_floor_at_zero():
    form = FormCheck().finalize()
    assert form.feedback == [GOOD_FORM]
    form.penalize(60, "first")
    form.penalize(60, "second")
    assert form.score == 0
    assert form.feedback == ["first", "second"]
    assert form.quality == RepQuality.POOR


def test_cooldown_is_strict():
    cooldown = Cooldown(600)
    assert cooldown.ready(0)
    cooldown.mark(100)
    assert not cooldown.ready(700)
    assert cooldown.ready(701)
    assert cooldown.elapsed(400) == 300
    cooldown.reset()
    assert cooldown.elapsed(400) is None
