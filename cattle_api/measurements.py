"""
Body measurements from user-placed points

Measurement strategy (side view photo):
- Height: straight line spine -> belly
- Body length: straight line neck -> rear (pin bones)
- Heart girth: chest cross-section modelled as an ellipse, width from the
  two girth points, height from spine/belly, perimeter via Ramanujan's
  second approximation plus an 8% correction for the flatter cattle chest

Every reading is 0 when a point it needs is not placed yet. Partial point
sets are a normal state while the user is still placing points.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from .config import GIRTH_CORRECTION
from .geometry import Point, distance


class PointRole(str, Enum):
    """Semantic role of a point. Declaration order is the hit-test scan order."""
    BELLY = "belly"
    SPINE = "spine"
    NECK = "neck"
    REAR = "rear"
    GIRTH_LEFT = "girth_left"
    GIRTH_RIGHT = "girth_right"
    CALIBRATION_START = "calibration_start"
    CALIBRATION_END = "calibration_end"

    @property
    def is_calibration(self) -> bool:
        return self in CALIBRATION_ROLES


MEASUREMENT_ROLES: Tuple[PointRole, ...] = (
    PointRole.BELLY,
    PointRole.SPINE,
    PointRole.NECK,
    PointRole.REAR,
    PointRole.GIRTH_LEFT,
    PointRole.GIRTH_RIGHT,
)

CALIBRATION_ROLES: Tuple[PointRole, ...] = (
    PointRole.CALIBRATION_START,
    PointRole.CALIBRATION_END,
)

HEIGHT_ROLES = (PointRole.SPINE, PointRole.BELLY)
LENGTH_ROLES = (PointRole.NECK, PointRole.REAR)
GIRTH_ROLES = (PointRole.SPINE, PointRole.BELLY, PointRole.GIRTH_LEFT, PointRole.GIRTH_RIGHT)


class PointState(str, Enum):
    UNINITIALIZED = "uninitialized"
    PLACED = "placed"


class MeasurementPoints:
    """
    The point set of one session.

    Points are immutable values; set() replaces the value for a role. Callers
    outside the session get copies via snapshot().
    """

    def __init__(self):
        self._points: Dict[PointRole, Optional[Point]] = {role: None for role in PointRole}

    def get(self, role: PointRole) -> Optional[Point]:
        return self._points[role]

    def set(self, role: PointRole, point: Optional[Point]):
        self._points[role] = point

    def update(self, points: Dict[PointRole, Point]):
        for role, point in points.items():
            self.set(role, point)

    def state(self, role: PointRole) -> PointState:
        return PointState.UNINITIALIZED if self._points[role] is None else PointState.PLACED

    def is_placed(self, role: PointRole) -> bool:
        return self.state(role) is PointState.PLACED

    def all_placed(self, roles: Iterable[PointRole] = MEASUREMENT_ROLES) -> bool:
        return all(self.is_placed(role) for role in roles)

    def clear(self, roles: Iterable[PointRole] = tuple(PointRole)):
        for role in roles:
            self._points[role] = None

    def ordered(self, roles: Iterable[PointRole]) -> List[Tuple[PointRole, Optional[Point]]]:
        return [(role, self._points[role]) for role in roles]

    def snapshot(self) -> Dict[PointRole, Optional[Point]]:
        return dict(self._points)


@dataclass(frozen=True)
class BodyMeasurements:
    height_cm: float
    girth_cm: float
    length_cm: float

    def as_dict(self) -> Dict[str, float]:
        return {
            'height_cm': self.height_cm,
            'girth_cm': self.girth_cm,
            'length_cm': self.length_cm,
        }


def height_cm(points: MeasurementPoints, cm_per_pixel: float) -> float:
    """Belly to spine height"""
    if not points.all_placed(HEIGHT_ROLES):
        return 0.0
    return distance(points.get(PointRole.SPINE), points.get(PointRole.BELLY)) * cm_per_pixel


def length_cm(points: MeasurementPoints, cm_per_pixel: float) -> float:
    """Neck to rear body length"""
    if not points.all_placed(LENGTH_ROLES):
        return 0.0
    return distance(points.get(PointRole.NECK), points.get(PointRole.REAR)) * cm_per_pixel


def ellipse_perimeter(a: float, b: float) -> float:
    """Ramanujan's second approximation for an ellipse with semi-axes a, b"""
    if a + b == 0:
        return 0.0
    h = (a - b) ** 2 / (a + b) ** 2
    return math.pi * (a + b) * (1 + (3 * h) / (10 + math.sqrt(4 - 3 * h)))


def girth_cm(points: MeasurementPoints, cm_per_pixel: float) -> float:
    """
    Heart girth (chest circumference).

    Only absolute extents are used, so swapping left/right or belly/spine
    gives the same result.
    """
    if not points.all_placed(GIRTH_ROLES):
        return 0.0

    spine = points.get(PointRole.SPINE)
    belly = points.get(PointRole.BELLY)
    left = points.get(PointRole.GIRTH_LEFT)
    right = points.get(PointRole.GIRTH_RIGHT)

    vertical_extent = abs(spine.y - belly.y)
    horizontal_extent = abs(right.x - left.x)

    a = horizontal_extent / 2 * cm_per_pixel
    b = vertical_extent / 2 * cm_per_pixel

    return ellipse_perimeter(a, b) * GIRTH_CORRECTION


def measure(points: MeasurementPoints, cm_per_pixel: float) -> BodyMeasurements:
    return BodyMeasurements(
        height_cm=height_cm(points, cm_per_pixel),
        girth_cm=girth_cm(points, cm_per_pixel),
        length_cm=length_cm(points, cm_per_pixel),
    )
