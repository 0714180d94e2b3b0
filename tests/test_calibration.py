import pytest

from cattle_api.calibration import update_scale, default_calibration_points, clamp_reference_length
from cattle_api.errors import InvalidGeometry
from cattle_api.geometry import Point, Size


def test_scale_is_reference_over_pixel_distance():
    assert update_scale(Point(0, 0), Point(100, 0), 50, 0.2) == pytest.approx(0.5)
    assert update_scale(Point(0, 0), Point(30, 40), 10, 0.2) == pytest.approx(0.2)


@pytest.mark.parametrize("l1, l2", [(50, 100), (10, 200), (37.5, 12.5)])
def test_scale_proportional_to_reference_length(l1, l2):
    start, end = Point(12, 34), Point(256, 78)
    s1 = update_scale(start, end, l1, 0.2)
    s2 = update_scale(start, end, l2, 0.2)
    assert s2 / s1 == pytest.approx(l2 / l1)


def test_coincident_points_keep_previous_scale():
    assert update_scale(Point(5, 5), Point(5, 5), 50, 0.37) == 0.37


def test_default_points_centred_at_80_percent_height():
    start, end = default_calibration_points(Size(1000, 800))
    assert start == Point(450, 640)
    assert end == Point(550, 640)


def test_default_points_need_image_size():
    with pytest.raises(InvalidGeometry):
        default_calibration_points(None)
    with pytest.raises(InvalidGeometry):
        default_calibration_points(Size(0, 0))


@pytest.mark.parametrize("value, expected", [(5, 10), (10, 10), (75, 75), (200, 200), (500, 200)])
def test_clamp_reference_length(value, expected):
    assert clamp_reference_length(value) == expected
