import pytest
from fastapi.testclient import TestClient

from cattle_api.geometry import Point, Size
from cattle_api.main import app
from cattle_api.measurements import MeasurementPoints, PointRole
from cattle_api.session import MeasurementSession


IMAGE_SIZE = Size(1000, 800)

# 400px tall, 400px wide girth, 600px long at 0.2 cm/px
SCENARIO_POINTS = {
    PointRole.BELLY: Point(500, 600),
    PointRole.SPINE: Point(500, 200),
    PointRole.NECK: Point(200, 380),
    PointRole.REAR: Point(800, 380),
    PointRole.GIRTH_LEFT: Point(300, 400),
    PointRole.GIRTH_RIGHT: Point(700, 400),
}


@pytest.fixture
def scenario_points():
    points = MeasurementPoints()
    points.update(SCENARIO_POINTS)
    return points


@pytest.fixture
def session():
    """Session with a 1000x800 image shown at native size"""
    s = MeasurementSession()
    s.load_image(IMAGE_SIZE, use_enhanced_detection=False)
    s.set_display_size(IMAGE_SIZE)
    return s


@pytest.fixture
def scenario_session(session):
    for role, point in SCENARIO_POINTS.items():
        session.move_point(role, point)
    return session


@pytest.fixture
def client():
    return TestClient(app)
