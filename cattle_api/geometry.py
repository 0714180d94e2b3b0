"""
Geometry primitives and image <-> screen coordinate mapping

The photo is drawn "contained" inside the display box: one uniform scale,
centred, with letterbox or pillarbox margins. Points are stored in image
pixels; touches and overlay primitives live in screen space.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, TypeVar

from .config import TOUCH_RADIUS
from .errors import InvalidGeometry


@dataclass(frozen=True)
class Point:
    """A 2D position. Immutable; moving a point means replacing it."""
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


def distance(p1: Point, p2: Point) -> float:
    """Euclidean distance between two points"""
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def midpoint(p1: Point, p2: Point) -> Point:
    return Point((p1.x + p2.x) / 2, (p1.y + p2.y) / 2)


K = TypeVar('K')


class CoordinateMapper:
    """
    Maps between image pixel space and display (screen) space.

    Args:
        image_size: Pixel dimensions of the source photo
        display_size: Dimensions of the box the photo is rendered into

    Raises:
        InvalidGeometry: if either size has a zero or negative dimension
    """

    def __init__(self, image_size: Optional[Size], display_size: Optional[Size]):
        if image_size is None or image_size.is_empty:
            raise InvalidGeometry(
                f"Image size is unknown or empty: {image_size}",
                fix="Load an image before mapping coordinates"
            )
        if display_size is None or display_size.is_empty:
            raise InvalidGeometry(
                f"Display size is unknown or empty: {display_size}",
                fix="Report the display box size before mapping coordinates"
            )

        self.image_size = image_size
        self.display_size = display_size

        self.scale = min(
            display_size.width / image_size.width,
            display_size.height / image_size.height
        )
        # Inverse must be the reciprocal of the forward scale so a round
        # trip returns the original point
        self.inverse_scale = 1.0 / self.scale

        self.offset_x = (display_size.width - image_size.width * self.scale) / 2
        self.offset_y = (display_size.height - image_size.height * self.scale) / 2

    def image_to_screen(self, p: Point) -> Point:
        return Point(
            p.x * self.scale + self.offset_x,
            p.y * self.scale + self.offset_y
        )

    def screen_to_image(self, p: Point) -> Point:
        return Point(
            (p.x - self.offset_x) * self.inverse_scale,
            (p.y - self.offset_y) * self.inverse_scale
        )

    def find_closest(
        self,
        touch: Point,
        candidates: Iterable[Tuple[K, Optional[Point]]],
        radius: float = TOUCH_RADIUS
    ) -> Optional[K]:
        """
        Find the candidate whose screen position is nearest the touch.

        Candidates are scanned in order; unset (None) points are skipped. A
        candidate wins only if it is strictly closer than the best so far and
        strictly inside the radius, so on exact ties the earlier one is kept.

        Args:
            touch: Touch position in screen space
            candidates: (key, image-space point) pairs in scan order
            radius: Grab radius in display units

        Returns:
            Key of the closest candidate, or None if nothing is in reach
        """
        closest = None
        min_distance = math.inf

        for key, point in candidates:
            if point is None:
                continue
            d = distance(self.image_to_screen(point), touch)
            if d < min_distance and d < radius:
                min_distance = d
                closest = key

        return closest
