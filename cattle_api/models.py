"""
Pydantic models for API request/response schemas
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Tuple

from .config import (
    MIN_CALIBRATION_LENGTH_CM, MAX_CALIBRATION_LENGTH_CM,
    DEFAULT_BREED, DEFAULT_CONDITION
)
from .geometry import Point, Size
from .measurements import PointRole
from .placement import LandmarkHints
from .weight import Breed, Condition


# ============== Shared ==============

class PointModel(BaseModel):
    x: float
    y: float

    def to_point(self) -> Point:
        return Point(self.x, self.y)


class SizeModel(BaseModel):
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)

    def to_size(self) -> Size:
        return Size(self.width, self.height)


class ErrorResponse(BaseModel):
    """Standard error response"""
    error: str
    error_code: str
    detail: Optional[str] = None
    fix: Optional[str] = None


# ============== Requests ==============

class LandmarksModel(BaseModel):
    """Landmarks from an external pose detector, in image pixels"""
    left_shoulder: Optional[PointModel] = None
    right_shoulder: Optional[PointModel] = None
    left_hip: Optional[PointModel] = None
    right_hip: Optional[PointModel] = None
    cattle_detected: bool = True

    def to_hints(self) -> LandmarkHints:
        def pt(p: Optional[PointModel]) -> Optional[Point]:
            return p.to_point() if p is not None else None

        return LandmarkHints(
            left_shoulder=pt(self.left_shoulder),
            right_shoulder=pt(self.right_shoulder),
            left_hip=pt(self.left_hip),
            right_hip=pt(self.right_hip),
            cattle_detected=self.cattle_detected
        )


class ImageLabelModel(BaseModel):
    """One result from an external image labeler"""
    label: str
    confidence: float = Field(..., ge=0, le=1)


class ImageLoadRequest(SizeModel):
    landmarks: Optional[LandmarksModel] = None
    labels: Optional[List[ImageLabelModel]] = None
    use_enhanced_detection: Optional[bool] = None

    def label_pairs(self) -> Optional[List[Tuple[str, float]]]:
        if self.labels is None:
            return None
        return [(item.label, item.confidence) for item in self.labels]


class CalibrationModeRequest(BaseModel):
    enabled: bool


class CalibrationLengthRequest(BaseModel):
    length_cm: float = Field(..., ge=MIN_CALIBRATION_LENGTH_CM, le=MAX_CALIBRATION_LENGTH_CM)


class AnimalRequest(BaseModel):
    breed: Breed = Breed(DEFAULT_BREED)
    condition: Condition = Condition(DEFAULT_CONDITION)

    @field_validator('breed', mode='before')
    @classmethod
    def parse_breed(cls, v):
        return Breed(v) if isinstance(v, str) else v

    @field_validator('condition', mode='before')
    @classmethod
    def parse_condition(cls, v):
        return Condition(v) if isinstance(v, str) else v


class EstimateRequest(AnimalRequest):
    girth_cm: float = Field(..., ge=0)
    length_cm: float = Field(0.0, ge=0)


# ============== Responses ==============

class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    active_sessions: int


class MeasurementsResponse(BaseModel):
    height_cm: float
    girth_cm: float
    length_cm: float


class WeightEstimateResponse(BaseModel):
    live_weight_kg: float
    meat_yield_kg: float
    dressing_percentage: float


class ReadingsResponse(BaseModel):
    measurements: MeasurementsResponse
    estimate: WeightEstimateResponse
    cm_per_pixel: float
    calibration_length_cm: float
    all_points_placed: bool


class PointStateModel(BaseModel):
    role: PointRole
    state: str
    position: Optional[PointModel] = None


class SessionResponse(BaseModel):
    session_id: str
    has_image: bool
    image_size: Optional[SizeModel] = None
    display_size: Optional[SizeModel] = None
    calibration_mode: bool
    active_role: Optional[PointRole] = None
    breed: Breed
    condition: Condition
    cattle_detected: bool
    placement_source: Optional[str] = None
    status_message: str
    points: List[PointStateModel]
    readings: ReadingsResponse


class DragResponse(BaseModel):
    active_role: Optional[PointRole] = None
    position: Optional[PointModel] = None
    readings: ReadingsResponse


class LineModel(BaseModel):
    start: PointModel
    end: PointModel
    color: str
    alpha: float


class HandleModel(BaseModel):
    role: PointRole
    center: PointModel
    color: str
    radius: float


class EllipseModel(BaseModel):
    center: PointModel
    width: float
    height: float
    color: str


class LabelModel(BaseModel):
    text: str
    position: PointModel
    color: str


class OverlayResponse(BaseModel):
    calibration_mode: bool
    lines: List[LineModel]
    handles: List[HandleModel]
    ellipses: List[EllipseModel]
    labels: List[LabelModel]
