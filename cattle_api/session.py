"""
Measurement sessions

A session is one photo being measured: its points, calibration and the
animal's breed/condition. All mutation goes through MeasurementSession so
the calibration rules hold:

- scale is recomputed whenever a point is dragged while calibration mode is on,
  and when the reference length changes
- a zero-length calibration line leaves the scale as it was
- toggling calibration mode never touches the scale

SessionManager keeps sessions isolated from each other, one lock per
session.
"""

import threading
import uuid
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np

from .calibration import update_scale, default_calibration_points, clamp_reference_length
from .config import (
    DEFAULT_CM_PER_PIXEL, DEFAULT_CALIBRATION_LENGTH_CM,
    DEFAULT_BREED, DEFAULT_CONDITION, MAX_SESSIONS, USE_ENHANCED_DETECTION
)
from .errors import InvalidGeometry, SessionNotFound
from .geometry import CoordinateMapper, Point, Size
from .logger import log
from .measurements import (
    BodyMeasurements, MeasurementPoints, PointRole,
    MEASUREMENT_ROLES, CALIBRATION_ROLES, measure
)
from .placement import LandmarkHints, place_points
from .weight import Breed, Condition, WeightEstimate, estimate


@dataclass(frozen=True)
class Readings:
    """Everything the UI displays, computed in one pass"""
    measurements: BodyMeasurements
    estimate: WeightEstimate
    cm_per_pixel: float
    calibration_length_cm: float
    all_points_placed: bool


class MeasurementSession:

    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id or uuid.uuid4().hex
        self.lock = threading.RLock()

        self.points = MeasurementPoints()
        self.cm_per_pixel = DEFAULT_CM_PER_PIXEL
        self.calibration_length_cm = DEFAULT_CALIBRATION_LENGTH_CM
        self.calibration_mode = False
        self.active_role: Optional[PointRole] = None

        self.image_size: Optional[Size] = None
        self.display_size: Optional[Size] = None
        self.image: Optional[np.ndarray] = None

        self.breed = Breed(DEFAULT_BREED)
        self.condition = Condition(DEFAULT_CONDITION)

        self.cattle_detected = False
        self.placement_source: Optional[str] = None
        self.status_message = "No image selected"

    # =========================================================================
    # IMAGE / DISPLAY
    # =========================================================================

    def load_image(
        self,
        image_size: Size,
        hints: Optional[LandmarkHints] = None,
        use_enhanced_detection: bool = USE_ENHANCED_DETECTION,
        image: Optional[np.ndarray] = None,
        labels: Optional[Iterable[Tuple[str, float]]] = None
    ):
        """
        Start measuring a new image.

        All eight points are discarded and the six measurement points are
        re-placed. Scale, reference length and calibration mode carry over.
        """
        if image_size is None or image_size.is_empty:
            raise InvalidGeometry(
                f"Image size must be positive, got {image_size}",
                fix="Check the image decoded correctly"
            )

        self.points.clear()
        self.active_role = None
        self.image_size = image_size
        self.image = image

        placement = place_points(image_size, hints, use_enhanced_detection, labels)
        self.points.update(placement.points)
        self.cattle_detected = placement.cattle_detected
        self.placement_source = placement.source
        self.status_message = placement.message

        log.info('session', 'Image loaded', session_id=self.session_id,
                 width=image_size.width, height=image_size.height,
                 placement=placement.source)

    def set_display_size(self, display_size: Size):
        self.display_size = display_size

    def mapper(self) -> CoordinateMapper:
        """Raises InvalidGeometry until both image and display sizes are known"""
        return CoordinateMapper(self.image_size, self.display_size)

    # =========================================================================
    # CALIBRATION
    # =========================================================================

    def set_calibration_mode(self, enabled: bool):
        if enabled and not self.points.all_placed(CALIBRATION_ROLES):
            start, end = default_calibration_points(self.image_size)
            self.points.set(PointRole.CALIBRATION_START, start)
            self.points.set(PointRole.CALIBRATION_END, end)
            log.debug('session:calibration', 'Placed default calibration handles',
                      session_id=self.session_id)

        self.calibration_mode = enabled
        log.info('session:calibration', 'Calibration mode changed',
                 session_id=self.session_id, enabled=enabled)

    def toggle_calibration_mode(self) -> bool:
        self.set_calibration_mode(not self.calibration_mode)
        return self.calibration_mode

    def set_calibration_length(self, length_cm: float):
        """Store the reference length and rescale from the last calibration line"""
        self.calibration_length_cm = clamp_reference_length(length_cm)
        self._recalibrate()

    def _recalibrate(self):
        start = self.points.get(PointRole.CALIBRATION_START)
        end = self.points.get(PointRole.CALIBRATION_END)
        if start is None or end is None:
            return

        previous = self.cm_per_pixel
        self.cm_per_pixel = update_scale(start, end, self.calibration_length_cm, previous)

        if self.cm_per_pixel != previous:
            log.debug('session:calibration', 'Scale updated', session_id=self.session_id,
                      cm_per_pixel=self.cm_per_pixel, reference_cm=self.calibration_length_cm)

    # =========================================================================
    # POINTS / DRAG
    # =========================================================================

    def active_candidates(self) -> List[Tuple[PointRole, Optional[Point]]]:
        """Points that can be grabbed, in hit-test order"""
        roles = MEASUREMENT_ROLES + CALIBRATION_ROLES if self.calibration_mode else MEASUREMENT_ROLES
        return self.points.ordered(roles)

    def hit_test(self, screen_point: Point) -> Optional[PointRole]:
        return self.mapper().find_closest(screen_point, self.active_candidates())

    def begin_drag(self, screen_point: Point) -> Optional[PointRole]:
        role = self.hit_test(screen_point)
        if role is not None:
            self.active_role = role
            log.debug('session:drag', 'Drag started', session_id=self.session_id, role=role)
        return role

    def drag_to(self, screen_point: Point) -> Optional[Point]:
        """
        Move the active point to a touch position.

        Returns:
            The point's new image-space position, or None if nothing is being dragged
        """
        if self.active_role is None:
            log.debug('session:drag', 'Drag update without active point', session_id=self.session_id)
            return None

        image_point = self.mapper().screen_to_image(screen_point)
        self.points.set(self.active_role, image_point)

        if self.calibration_mode:
            self._recalibrate()

        return image_point

    def end_drag(self):
        self.active_role = None

    def move_point(self, role: PointRole, image_point: Point):
        """Place a point directly in image space"""
        self.points.set(role, image_point)
        if self.calibration_mode and role.is_calibration:
            self._recalibrate()

    # =========================================================================
    # RESULTS
    # =========================================================================

    def set_animal(self, breed: Breed, condition: Condition):
        self.breed = breed
        self.condition = condition

    def measurements(self) -> BodyMeasurements:
        return measure(self.points, self.cm_per_pixel)

    def estimate(self, measurements: Optional[BodyMeasurements] = None) -> WeightEstimate:
        m = measurements or self.measurements()
        return estimate(m.girth_cm, m.length_cm, self.breed, self.condition)

    def readings(self) -> Readings:
        m = self.measurements()
        return Readings(
            measurements=m,
            estimate=self.estimate(m),
            cm_per_pixel=self.cm_per_pixel,
            calibration_length_cm=self.calibration_length_cm,
            all_points_placed=self.points.all_placed(),
        )

    @property
    def has_image(self) -> bool:
        return self.image_size is not None


class SessionManager:
    """
    Thread-safe in-memory registry of sessions.

    Oldest sessions are evicted once max_sessions is reached.
    """

    def __init__(self, max_sessions: int = MAX_SESSIONS):
        self.max_sessions = max(1, max_sessions)
        self._sessions: "OrderedDict[str, MeasurementSession]" = OrderedDict()
        self._lock = threading.Lock()

    def create(self) -> MeasurementSession:
        session = MeasurementSession()
        with self._lock:
            while len(self._sessions) >= self.max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                log.warn('session', 'Session limit reached, evicted oldest',
                         evicted=evicted_id, limit=self.max_sessions)
            self._sessions[session.session_id] = session
            total = len(self._sessions)

        log.info('session', 'Session created', session_id=session.session_id, total=total)
        return session

    def get(self, session_id: str) -> MeasurementSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    @contextmanager
    def checkout(self, session_id: str) -> Iterator[MeasurementSession]:
        """Hold the session's lock for the duration of a request"""
        session = self.get(session_id)
        with session.lock:
            yield session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed is None:
            log.warn('session', 'Session not found for deletion', session_id=session_id)
            return False
        log.info('session', 'Session deleted', session_id=session_id)
        return True

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)


# Global session registry
sessions = SessionManager()
