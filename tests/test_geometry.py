import pytest

from cattle_api.errors import InvalidGeometry
from cattle_api.geometry import CoordinateMapper, Point, Size, distance, midpoint


def test_distance_and_midpoint():
    assert distance(Point(0, 0), Point(3, 4)) == 5
    assert midpoint(Point(0, 0), Point(10, 20)) == Point(5, 10)


def test_letterboxed_mapping():
    # 1000x800 into 400x600: width-limited, bars top and bottom
    mapper = CoordinateMapper(Size(1000, 800), Size(400, 600))
    assert mapper.scale == pytest.approx(0.4)
    assert mapper.offset_x == pytest.approx(0)
    assert mapper.offset_y == pytest.approx(140)

    screen = mapper.image_to_screen(Point(500, 400))
    assert screen.x == pytest.approx(200)
    assert screen.y == pytest.approx(300)


def test_pillarboxed_mapping():
    # 1000x800 into 800x400: height-limited, bars left and right
    mapper = CoordinateMapper(Size(1000, 800), Size(800, 400))
    assert mapper.scale == pytest.approx(0.5)

    origin = mapper.image_to_screen(Point(0, 0))
    assert origin.x == pytest.approx(150)
    assert origin.y == pytest.approx(0)


@pytest.mark.parametrize("image_size, display_size", [
    (Size(1000, 800), Size(1000, 800)),
    (Size(1000, 800), Size(400, 600)),
    (Size(1000, 800), Size(800, 400)),
    (Size(4080, 3072), Size(393, 517)),
    (Size(3, 7), Size(1920, 1080)),
])
@pytest.mark.parametrize("point", [
    Point(0, 0), Point(123.456, 789.01), Point(-50, 2000), Point(1e-3, 1e4),
])
def test_screen_to_image_inverts_image_to_screen(image_size, display_size, point):
    mapper = CoordinateMapper(image_size, display_size)
    back = mapper.screen_to_image(mapper.image_to_screen(point))
    assert back.x == pytest.approx(point.x, abs=1e-6)
    assert back.y == pytest.approx(point.y, abs=1e-6)


def test_inverse_scale_is_reciprocal_of_forward_scale():
    mapper = CoordinateMapper(Size(4080, 3072), Size(393, 517))
    assert mapper.scale * mapper.inverse_scale == pytest.approx(1.0)


@pytest.mark.parametrize("image_size, display_size", [
    (Size(0, 800), Size(400, 600)),
    (Size(1000, 0), Size(400, 600)),
    (Size(1000, 800), Size(0, 600)),
    (Size(1000, 800), Size(400, 0)),
    (None, Size(400, 600)),
    (Size(1000, 800), None),
])
def test_unknown_or_empty_sizes_raise(image_size, display_size):
    with pytest.raises(InvalidGeometry):
        CoordinateMapper(image_size, display_size)


class TestFindClosest:

    def setup_method(self):
        self.mapper = CoordinateMapper(Size(1000, 800), Size(1000, 800))

    def test_picks_nearest_within_radius(self):
        candidates = [("a", Point(100, 100)), ("b", Point(110, 100))]
        assert self.mapper.find_closest(Point(108, 100), candidates) == "b"

    def test_nothing_in_reach(self):
        candidates = [("a", Point(100, 100))]
        assert self.mapper.find_closest(Point(200, 200), candidates) is None

    def test_radius_is_exclusive(self):
        candidates = [("a", Point(100, 100))]
        assert self.mapper.find_closest(Point(130, 100), candidates) is None
        assert self.mapper.find_closest(Point(129.9, 100), candidates) == "a"

    def test_tie_keeps_first_in_scan_order(self):
        candidates = [("first", Point(90, 100)), ("second", Point(110, 100))]
        assert self.mapper.find_closest(Point(100, 100), candidates) == "first"

    def test_unset_points_are_skipped(self):
        candidates = [("unset", None), ("b", Point(100, 100))]
        assert self.mapper.find_closest(Point(100, 100), candidates) == "b"

    def test_radius_is_measured_in_screen_space(self):
        # Radius applies to display units, after scaling
        mapper = CoordinateMapper(Size(1000, 800), Size(500, 400))
        candidates = [("a", Point(100, 100))]
        assert mapper.find_closest(Point(50 + 25, 50), candidates) == "a"
        assert mapper.find_closest(Point(50 + 31, 50), candidates) is None
