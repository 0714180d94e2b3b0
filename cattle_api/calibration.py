"""
Calibration - pixels to centimetres from a user-placed reference line

The user drags two handles over something of known length (a ruler, a gate
rail) and picks that length; scale is reference length / pixel distance.
"""

from typing import Tuple

from .config import (
    CALIBRATION_HALF_SPAN_PX, CALIBRATION_HEIGHT_PCT,
    MIN_CALIBRATION_LENGTH_CM, MAX_CALIBRATION_LENGTH_CM
)
from .errors import InvalidGeometry
from .geometry import Point, Size, distance
from .logger import log


def update_scale(start: Point, end: Point, reference_length_cm: float, current_scale: float) -> float:
    """
    Compute cm per pixel from the calibration line.

    Args:
        start: Calibration handle in image space
        end: Other calibration handle in image space
        reference_length_cm: Real-world length the line represents
        current_scale: Scale to keep if the line has zero length

    Returns:
        New scale, or current_scale unchanged when the handles coincide
        (normal while a handle is mid-drag).
    """
    pixel_distance = distance(start, end)

    if pixel_distance <= 0:
        log.debug('calibration', 'Zero-length calibration line, keeping scale',
                  cm_per_pixel=current_scale)
        return current_scale

    return reference_length_cm / pixel_distance


def default_calibration_points(image_size: Size) -> Tuple[Point, Point]:
    """Starting handles: centred horizontally, 100px apart, 80% down the image"""
    if image_size is None or image_size.is_empty:
        raise InvalidGeometry(
            "Cannot place calibration handles without an image size",
            fix="Load an image before entering calibration mode"
        )

    center_x = image_size.width / 2
    bottom_y = image_size.height * CALIBRATION_HEIGHT_PCT

    return (
        Point(center_x - CALIBRATION_HALF_SPAN_PX, bottom_y),
        Point(center_x + CALIBRATION_HALF_SPAN_PX, bottom_y)
    )


def clamp_reference_length(length_cm: float) -> float:
    return max(MIN_CALIBRATION_LENGTH_CM, min(MAX_CALIBRATION_LENGTH_CM, length_cm))
