"""
Initial point placement for a newly loaded image

Two strategies:
- Default: fixed fractions of the image around its centre, for a side-on
  animal roughly filling the frame
- Detector: when an external pose/landmark detector found shoulders and
  hips, neck/rear go on their midpoints and the girth/height points are
  laid out from there

The detector itself is external. It hands over LandmarkHints; nothing in
here runs inference.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

from .config import (
    HEIGHT_OFFSET_PCT, GIRTH_OFFSET_PCT, LENGTH_OFFSET_PCT, LENGTH_RAISE_PCT,
    DETECTOR_GIRTH_AXIS_PCT, DETECTOR_GIRTH_OFFSET_PCT, DETECTOR_HEIGHT_OFFSET_PCT,
    USE_ENHANCED_DETECTION, CATTLE_LABELS, LABEL_CONFIDENCE_THRESHOLD
)
from .geometry import Point, Size, midpoint
from .logger import log
from .measurements import PointRole

SOURCE_DEFAULT = "default"
SOURCE_DETECTOR = "detector"

MSG_DETECTOR = (
    "Cattle detected with enhanced detection. Points were placed from detected "
    "body positions; adjust them as needed for accurate measurements."
)
MSG_DETECTED = (
    "Cattle detected. Drag the points into position: belly/spine for height, "
    "girth points for chest circumference, neck/rear for body length. "
    "Use calibration mode to set the scale."
)
MSG_NOT_DETECTED = "No cattle detected in the image. You can still place the measurement points manually."
MSG_NO_DETECTOR = (
    "Drag the points into position: belly/spine for height, girth points for "
    "chest circumference, neck/rear for body length. Use calibration mode to set the scale."
)


@dataclass
class LandmarkHints:
    """Anatomical landmarks from an external detector, in image pixels"""
    left_shoulder: Optional[Point] = None
    right_shoulder: Optional[Point] = None
    left_hip: Optional[Point] = None
    right_hip: Optional[Point] = None
    cattle_detected: bool = True

    @property
    def complete(self) -> bool:
        return None not in (self.left_shoulder, self.right_shoulder, self.left_hip, self.right_hip)


@dataclass
class Placement:
    points: Dict[PointRole, Point]
    source: str
    cattle_detected: bool
    message: str = field(default="")


def default_placement(image_size: Size) -> Dict[PointRole, Point]:
    """Default side-view layout around the image centre"""
    w, h = image_size.width, image_size.height
    cx, cy = w / 2, h / 2

    return {
        PointRole.BELLY: Point(cx, cy + h * HEIGHT_OFFSET_PCT),
        PointRole.SPINE: Point(cx, cy - h * HEIGHT_OFFSET_PCT),
        PointRole.GIRTH_LEFT: Point(cx - w * GIRTH_OFFSET_PCT, cy),
        PointRole.GIRTH_RIGHT: Point(cx + w * GIRTH_OFFSET_PCT, cy),
        PointRole.NECK: Point(cx - w * LENGTH_OFFSET_PCT, cy - h * LENGTH_RAISE_PCT),
        PointRole.REAR: Point(cx + w * LENGTH_OFFSET_PCT, cy - h * LENGTH_RAISE_PCT),
    }


def detector_placement(image_size: Size, hints: LandmarkHints) -> Dict[PointRole, Point]:
    """
    Layout from shoulder/hip landmarks.

    Heart girth sits just behind the front legs, ~30% of the way from neck
    to rear.
    """
    neck = midpoint(hints.left_shoulder, hints.right_shoulder)
    rear = midpoint(hints.left_hip, hints.right_hip)

    mid_y = (neck.y + rear.y) / 2
    girth_x = neck.x + (rear.x - neck.x) * DETECTOR_GIRTH_AXIS_PCT

    girth_dx = image_size.width * DETECTOR_GIRTH_OFFSET_PCT
    height_dy = image_size.height * DETECTOR_HEIGHT_OFFSET_PCT

    return {
        PointRole.NECK: neck,
        PointRole.REAR: rear,
        PointRole.GIRTH_LEFT: Point(girth_x - girth_dx, mid_y),
        PointRole.GIRTH_RIGHT: Point(girth_x + girth_dx, mid_y),
        PointRole.BELLY: Point(girth_x, mid_y + height_dy),
        PointRole.SPINE: Point(girth_x, mid_y - height_dy),
    }


def place_points(
    image_size: Size,
    hints: Optional[LandmarkHints] = None,
    use_enhanced_detection: bool = USE_ENHANCED_DETECTION,
    labels: Optional[Iterable[Tuple[str, float]]] = None
) -> Placement:
    """
    Pick a placement strategy for a new image.

    Args:
        image_size: Pixel dimensions of the loaded image
        hints: Detector output, if a detector ran
        use_enhanced_detection: Allow landmark-driven placement
        labels: (label, confidence) pairs from an image labeler, if one ran.
            When given they decide whether cattle were detected.

    Returns:
        Placement with all six measurement points set
    """
    if hints is None and labels is None:
        log.info('placement', 'No detector output, placing points at default layout',
                 width=image_size.width, height=image_size.height)
        return Placement(
            points=default_placement(image_size),
            source=SOURCE_DEFAULT,
            cattle_detected=False,
            message=MSG_NO_DETECTOR
        )

    if labels is not None:
        cattle_detected = cattle_detected_from_labels(labels)
    else:
        cattle_detected = hints.cattle_detected

    if use_enhanced_detection and cattle_detected and hints is not None and hints.complete:
        log.info('placement', 'Placing points from detector landmarks',
                 width=image_size.width, height=image_size.height)
        return Placement(
            points=detector_placement(image_size, hints),
            source=SOURCE_DETECTOR,
            cattle_detected=True,
            message=MSG_DETECTOR
        )

    if cattle_detected and use_enhanced_detection and hints is not None:
        log.warn('placement', 'Detector hints incomplete, using default layout')

    log.info('placement', 'Placing points at default layout',
             width=image_size.width, height=image_size.height, cattle_detected=cattle_detected)

    return Placement(
        points=default_placement(image_size),
        source=SOURCE_DEFAULT,
        cattle_detected=cattle_detected,
        message=MSG_DETECTED if cattle_detected else MSG_NOT_DETECTED
    )


def cattle_detected_from_labels(
    labels: Iterable[Tuple[str, float]],
    threshold: float = LABEL_CONFIDENCE_THRESHOLD
) -> bool:
    """
    Gate on image-labeler output.

    Args:
        labels: (label, confidence) pairs from an external image labeler
        threshold: Minimum confidence for a label to count
    """
    for label, confidence in labels:
        if confidence >= threshold and label.strip().lower() in CATTLE_LABELS:
            return True
    return False
