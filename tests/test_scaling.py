import pytest

from flexophore.completegraphmatcher.scaling import ScaleClasses
from flexophore.config import ScalingConfig


@pytest.fixture
def final_scale():
    return ScaleClasses(ScalingConfig().final)


def test_final_curve(final_scale):
    assert final_scale.scale(0.0) == pytest.approx(0.0)
    assert final_scale.scale(0.05) == pytest.approx(0.25)
    assert final_scale.scale(0.1) == pytest.approx(0.5)
    assert final_scale.scale(0.6) == pytest.approx(0.85)
    assert final_scale.scale(1.0) == pytest.approx(1.0)


def test_histogram_curve_floor():
    scale = ScaleClasses(ScalingConfig().histograms)
    assert scale.scale(0.0) == pytest.approx(0.2)
    assert scale.scale(1.0) == pytest.approx(1.0)


def test_gap_takes_upper_value_of_class_below():
    scale = ScaleClasses([(0.5, 1.0, 0.6, 1.0), (0.0, 0.2, 0.0, 0.4)])
    assert scale.scale(0.3) == pytest.approx(0.4)
    assert scale.scale(1.5) == pytest.approx(1.0)


def test_classes_sorted():
    scale = ScaleClasses().add(0.5, 1.0, 0.5, 1.0).add(0.0, 0.5, 0.0, 0.5)
    assert [c[0] for c in scale.classes] == [0.0, 0.5]


def test_empty_range():
    with pytest.raises(ValueError):
        ScaleClasses().add(0.5, 0.5, 0.0, 1.0)


def test_no_classes_is_identity():
    assert ScaleClasses().scale(0.42) == 0.42
