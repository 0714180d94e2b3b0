import pytest

from cattle_api.geometry import Point, Size
from cattle_api.measurements import PointRole, MEASUREMENT_ROLES
from cattle_api.placement import (
    LandmarkHints, default_placement, detector_placement, place_points,
    cattle_detected_from_labels, SOURCE_DEFAULT, SOURCE_DETECTOR
)

IMAGE = Size(1000, 800)

HINTS = LandmarkHints(
    left_shoulder=Point(300, 300),
    right_shoulder=Point(320, 320),
    left_hip=Point(700, 300),
    right_hip=Point(720, 340),
)


def test_default_layout():
    points = default_placement(IMAGE)
    assert points == {
        PointRole.BELLY: Point(500, 520),
        PointRole.SPINE: Point(500, 280),
        PointRole.GIRTH_LEFT: Point(300, 400),
        PointRole.GIRTH_RIGHT: Point(700, 400),
        PointRole.NECK: Point(200, 360),
        PointRole.REAR: Point(800, 360),
    }


def test_detector_layout():
    points = detector_placement(IMAGE, HINTS)
    assert points[PointRole.NECK] == Point(310, 310)
    assert points[PointRole.REAR] == Point(710, 320)

    # girth x is 30% of the way from neck to rear, at the mean neck/rear height
    assert points[PointRole.GIRTH_LEFT].x == pytest.approx(280)
    assert points[PointRole.GIRTH_RIGHT].x == pytest.approx(580)
    assert points[PointRole.GIRTH_LEFT].y == pytest.approx(315)
    assert points[PointRole.BELLY].x == pytest.approx(430)
    assert points[PointRole.BELLY].y == pytest.approx(435)
    assert points[PointRole.SPINE].y == pytest.approx(195)


def test_place_points_uses_detector_when_enabled():
    placement = place_points(IMAGE, HINTS, use_enhanced_detection=True)
    assert placement.source == SOURCE_DETECTOR
    assert placement.cattle_detected
    assert set(placement.points) == set(MEASUREMENT_ROLES)


def test_place_points_flag_off_falls_back_to_default():
    placement = place_points(IMAGE, HINTS, use_enhanced_detection=False)
    assert placement.source == SOURCE_DEFAULT
    assert placement.cattle_detected
    assert placement.points == default_placement(IMAGE)


def test_place_points_incomplete_hints_fall_back_to_default():
    hints = LandmarkHints(left_shoulder=Point(1, 1), right_shoulder=Point(2, 2))
    assert not hints.complete
    placement = place_points(IMAGE, hints, use_enhanced_detection=True)
    assert placement.source == SOURCE_DEFAULT


def test_place_points_without_cattle_uses_default():
    hints = LandmarkHints(
        left_shoulder=HINTS.left_shoulder, right_shoulder=HINTS.right_shoulder,
        left_hip=HINTS.left_hip, right_hip=HINTS.right_hip,
        cattle_detected=False
    )
    placement = place_points(IMAGE, hints, use_enhanced_detection=True)
    assert placement.source == SOURCE_DEFAULT
    assert not placement.cattle_detected
    assert "No cattle detected" in placement.message


def test_place_points_without_hints():
    placement = place_points(IMAGE, None, use_enhanced_detection=True)
    assert placement.source == SOURCE_DEFAULT
    assert not placement.cattle_detected
    assert "No cattle detected" not in placement.message


def test_place_points_labels_decide_detection():
    placement = place_points(IMAGE, HINTS, use_enhanced_detection=True, labels=[("cow", 0.5)])
    assert placement.source == SOURCE_DEFAULT
    assert not placement.cattle_detected
    assert "No cattle detected" in placement.message

    placement = place_points(IMAGE, HINTS, use_enhanced_detection=True, labels=[("Cattle", 0.9)])
    assert placement.source == SOURCE_DETECTOR


def test_place_points_labels_without_landmarks():
    placement = place_points(IMAGE, None, use_enhanced_detection=True, labels=[("cow", 0.9)])
    assert placement.source == SOURCE_DEFAULT
    assert placement.cattle_detected


@pytest.mark.parametrize("labels, expected", [
    ([("Cow", 0.9)], True),
    ([("dog", 0.99), ("animal", 0.7)], True),
    ([("cow", 0.5)], False),
    ([("dog", 0.99)], False),
    ([], False),
])
def test_cattle_detected_from_labels(labels, expected):
    assert cattle_detected_from_labels(labels) is expected
