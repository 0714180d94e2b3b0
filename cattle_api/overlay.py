"""
Overlay - screen-space drawing primitives for the measurement view

build_overlay() turns a session into plain value primitives (lines, point
handles, the girth ellipse, labels) already mapped to display coordinates.
Renderers never see the session's points themselves.

draw_overlay() paints those primitives onto an image with OpenCV, the same
way the grading debug images are annotated.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

import cv2
import numpy as np

from .geometry import CoordinateMapper, Point, Size, midpoint
from .logger import log
from .measurements import PointRole

HANDLE_RADIUS = 8
LINE_THICKNESS = 3

# Colour names map to BGR for OpenCV
HEIGHT_COLOR = "blue"
GIRTH_COLOR = "purple"
LENGTH_COLOR = "green"
CALIBRATION_COLOR = "amber"

BGR = {
    "blue": (243, 150, 33),
    "purple": (176, 39, 156),
    "green": (80, 175, 76),
    "amber": (7, 193, 255),
    "white": (255, 255, 255),
}
TEXT_BG = (0, 0, 0)


@dataclass(frozen=True)
class Line:
    start: Point
    end: Point
    color: str
    alpha: float = 1.0


@dataclass(frozen=True)
class Handle:
    role: PointRole
    center: Point
    color: str
    radius: float = HANDLE_RADIUS


@dataclass(frozen=True)
class Ellipse:
    center: Point
    width: float
    height: float
    color: str


@dataclass(frozen=True)
class Label:
    text: str
    position: Point
    color: str


@dataclass
class Overlay:
    calibration_mode: bool
    lines: List[Line] = field(default_factory=list)
    handles: List[Handle] = field(default_factory=list)
    ellipses: List[Ellipse] = field(default_factory=list)
    labels: List[Label] = field(default_factory=list)

    def as_dict(self) -> Dict:
        return asdict(self)


def format_cm(value: float) -> str:
    return f"{value:.1f} cm"


def build_overlay(session, display_size: Optional[Size] = None) -> Overlay:
    """
    Compute overlay primitives for the session's current state.

    Args:
        session: MeasurementSession
        display_size: Render target size; defaults to the session's display size

    Raises:
        InvalidGeometry: if the image or display size is unknown
    """
    mapper = CoordinateMapper(session.image_size, display_size or session.display_size)
    overlay = Overlay(calibration_mode=session.calibration_mode)

    def screen(role: PointRole) -> Optional[Point]:
        p = session.points.get(role)
        return mapper.image_to_screen(p) if p is not None else None

    if session.calibration_mode:
        start = screen(PointRole.CALIBRATION_START)
        end = screen(PointRole.CALIBRATION_END)
        if start and end:
            mid = midpoint(start, end)
            overlay.lines.append(Line(start, end, CALIBRATION_COLOR))
            overlay.handles.append(Handle(PointRole.CALIBRATION_START, start, CALIBRATION_COLOR))
            overlay.handles.append(Handle(PointRole.CALIBRATION_END, end, CALIBRATION_COLOR))
            overlay.labels.append(Label(
                format_cm(session.calibration_length_cm),
                Point(mid.x, mid.y - 15),
                CALIBRATION_COLOR
            ))
        return overlay

    m = session.measurements()

    belly = screen(PointRole.BELLY)
    spine = screen(PointRole.SPINE)
    left = screen(PointRole.GIRTH_LEFT)
    right = screen(PointRole.GIRTH_RIGHT)
    neck = screen(PointRole.NECK)
    rear = screen(PointRole.REAR)

    # Height
    if belly and spine:
        mid = midpoint(belly, spine)
        overlay.lines.append(Line(belly, spine, HEIGHT_COLOR))
        overlay.handles.append(Handle(PointRole.BELLY, belly, HEIGHT_COLOR))
        overlay.handles.append(Handle(PointRole.SPINE, spine, HEIGHT_COLOR))
        overlay.labels.append(Label(format_cm(m.height_cm), Point(mid.x + 15, mid.y), HEIGHT_COLOR))

    # Heart girth
    if belly and spine and left and right:
        center_x = (left.x + right.x) / 2
        center_y = (belly.y + spine.y) / 2
        width = abs(right.x - left.x)
        height = abs(spine.y - belly.y)

        overlay.handles.append(Handle(PointRole.GIRTH_LEFT, left, GIRTH_COLOR))
        overlay.handles.append(Handle(PointRole.GIRTH_RIGHT, right, GIRTH_COLOR))
        overlay.ellipses.append(Ellipse(Point(center_x, center_y), width, height, GIRTH_COLOR))
        overlay.lines.append(Line(Point(center_x, belly.y), Point(center_x, spine.y), GIRTH_COLOR, alpha=0.6))
        overlay.labels.append(Label(
            format_cm(m.girth_cm),
            Point(center_x + width / 2 + 25, center_y),
            GIRTH_COLOR
        ))

    # Body length
    if neck and rear:
        mid = midpoint(neck, rear)
        overlay.lines.append(Line(neck, rear, LENGTH_COLOR))
        overlay.handles.append(Handle(PointRole.NECK, neck, LENGTH_COLOR))
        overlay.handles.append(Handle(PointRole.REAR, rear, LENGTH_COLOR))
        overlay.labels.append(Label(format_cm(m.length_cm), Point(mid.x, mid.y - 15), LENGTH_COLOR))

    return overlay


def _px(p: Point):
    return (int(round(p.x)), int(round(p.y)))


def draw_text_with_bg(img: np.ndarray, text: str, center: Point, color, scale: float = 0.6):
    """Draw text centred on a point with a black background for readability"""
    font = cv2.FONT_HERSHEY_SIMPLEX
    thickness = 2
    (tw, th), _ = cv2.getTextSize(text, font, scale, thickness)
    tx = int(center.x - tw / 2)
    ty = int(center.y + th / 2)
    cv2.rectangle(img, (tx - 2, ty - th - 4), (tx + tw + 2, ty + 4), TEXT_BG, -1)
    cv2.putText(img, text, (tx, ty), font, scale, color, thickness)


def draw_overlay(image: np.ndarray, overlay: Overlay) -> np.ndarray:
    """
    Paint overlay primitives onto a copy of the image.

    The overlay must have been built for a display size equal to the
    image's own size.
    """
    canvas = image.copy()

    for ellipse in overlay.ellipses:
        cv2.ellipse(
            canvas,
            _px(ellipse.center),
            (int(round(ellipse.width / 2)), int(round(ellipse.height / 2))),
            0, 0, 360,
            BGR[ellipse.color],
            LINE_THICKNESS
        )

    for line in overlay.lines:
        if line.alpha < 1.0:
            layer = canvas.copy()
            cv2.line(layer, _px(line.start), _px(line.end), BGR[line.color], LINE_THICKNESS)
            canvas = cv2.addWeighted(layer, line.alpha, canvas, 1 - line.alpha, 0)
        else:
            cv2.line(canvas, _px(line.start), _px(line.end), BGR[line.color], LINE_THICKNESS)

    for handle in overlay.handles:
        cv2.circle(canvas, _px(handle.center), int(handle.radius), BGR[handle.color], -1)

    for label in overlay.labels:
        draw_text_with_bg(canvas, label.text, label.position, BGR[label.color])

    log.debug('overlay', 'Overlay drawn', lines=len(overlay.lines),
              handles=len(overlay.handles), labels=len(overlay.labels))

    return canvas


def render_session(session) -> np.ndarray:
    """Annotated copy of the session's photo, drawn at full image resolution"""
    if session.image is None:
        raise ValueError("Session has no uploaded image to draw on")
    height, width = session.image.shape[:2]
    overlay = build_overlay(session, Size(width, height))
    return draw_overlay(session.image, overlay)
