"""
Cattle Measurement API

FastAPI server behind the measurement screen. The client shows the photo,
forwards touches and reads back measurements, weight estimates and the
overlay to draw.

Endpoints:
    POST   /sessions                              - Start a measurement session
    GET    /sessions/{id}                         - Full session state
    DELETE /sessions/{id}                         - Discard a session
    POST   /sessions/{id}/image                   - Load image by size (+ detector landmarks)
    POST   /sessions/{id}/image/upload            - Upload the photo itself
    PUT    /sessions/{id}/display                 - Report the display box size
    PUT    /sessions/{id}/calibration             - Enter/leave calibration mode
    PUT    /sessions/{id}/calibration/length      - Set the reference length (cm)
    POST   /sessions/{id}/drag/start|move|end     - Touch drag events (screen space)
    PUT    /sessions/{id}/points/{role}           - Place a point (image space)
    PUT    /sessions/{id}/animal                  - Breed and body condition
    GET    /sessions/{id}/measurements            - Measurements + weight estimate
    GET    /sessions/{id}/overlay                 - Screen-space drawing primitives
    GET    /sessions/{id}/overlay.png             - Annotated photo
    POST   /estimate                              - Stateless weight estimate
    GET    /health                                - Health check
"""

from datetime import datetime
from pathlib import Path

import cv2
import numpy as np
from fastapi import FastAPI, File, HTTPException, Request, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import (
    API_HOST, API_PORT, CORS_ORIGINS, USE_ENHANCED_DETECTION,
    MAX_FILE_SIZE_BYTES, MAX_IMAGE_SIZE_MB, MIN_IMAGE_DIMENSION, VALID_IMAGE_EXTENSIONS
)
from .errors import InvalidGeometry, SessionNotFound
from .geometry import Size
from .logger import log
from .measurements import PointRole
from .models import (
    ErrorResponse, HealthResponse, SessionResponse, ReadingsResponse,
    MeasurementsResponse, WeightEstimateResponse, PointStateModel, PointModel,
    SizeModel, ImageLoadRequest, CalibrationModeRequest, CalibrationLengthRequest,
    AnimalRequest, EstimateRequest, DragResponse, OverlayResponse
)
from .overlay import build_overlay, render_session
from .session import MeasurementSession, Readings, sessions
from .weight import estimate

VERSION = "1.0.0"

app = FastAPI(
    title="Cattle Measurement API",
    description="Photo-based body measurements and weight estimation for cattle",
    version=VERSION
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============== Error Handling ==============

@app.exception_handler(InvalidGeometry)
async def invalid_geometry_handler(request: Request, exc: InvalidGeometry):
    log.warn('api', 'Invalid geometry', path=request.url.path, error=str(exc), fix=exc.fix)
    body = ErrorResponse(error=str(exc), error_code=exc.error_code, fix=exc.fix)
    return JSONResponse(status_code=409, content=body.model_dump())


@app.exception_handler(SessionNotFound)
async def session_not_found_handler(request: Request, exc: SessionNotFound):
    log.warn('api', 'Session not found', path=request.url.path, session_id=exc.session_id)
    body = ErrorResponse(error=str(exc), error_code=exc.error_code, fix=exc.fix)
    return JSONResponse(status_code=404, content=body.model_dump())


# ============== Serialization ==============

def _point_model(p):
    return PointModel(x=p.x, y=p.y) if p is not None else None


def _size_model(s):
    return SizeModel(width=s.width, height=s.height) if s is not None else None


def _readings_response(readings: Readings) -> ReadingsResponse:
    return ReadingsResponse(
        measurements=MeasurementsResponse(**readings.measurements.as_dict()),
        estimate=WeightEstimateResponse(**readings.estimate.as_dict()),
        cm_per_pixel=readings.cm_per_pixel,
        calibration_length_cm=readings.calibration_length_cm,
        all_points_placed=readings.all_points_placed
    )


def _session_response(session: MeasurementSession) -> SessionResponse:
    points = [
        PointStateModel(
            role=role,
            state=session.points.state(role).value,
            position=_point_model(session.points.get(role))
        )
        for role in PointRole
    ]
    return SessionResponse(
        session_id=session.session_id,
        has_image=session.has_image,
        image_size=_size_model(session.image_size),
        display_size=_size_model(session.display_size),
        calibration_mode=session.calibration_mode,
        active_role=session.active_role,
        breed=session.breed,
        condition=session.condition,
        cattle_detected=session.cattle_detected,
        placement_source=session.placement_source,
        status_message=session.status_message,
        points=points,
        readings=_readings_response(session.readings())
    )


def _drag_response(session: MeasurementSession, position=None) -> DragResponse:
    return DragResponse(
        active_role=session.active_role,
        position=_point_model(position),
        readings=_readings_response(session.readings())
    )


# ============== Endpoints ==============

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint for monitoring"""
    return HealthResponse(
        status="ok",
        timestamp=datetime.now().isoformat(),
        version=VERSION,
        active_sessions=sessions.count()
    )


@app.post("/sessions", response_model=SessionResponse, status_code=201)
def create_session():
    session = sessions.create()
    return _session_response(session)


@app.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(session_id: str):
    with sessions.checkout(session_id) as session:
        return _session_response(session)


@app.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str):
    if not sessions.delete(session_id):
        raise SessionNotFound(session_id)
    return Response(status_code=204)


@app.post("/sessions/{session_id}/image", response_model=SessionResponse)
def load_image(session_id: str, request: ImageLoadRequest):
    """
    Load an image by its pixel size.

    The client decodes the photo itself and optionally runs an image labeler
    and a pose detector. Labels decide whether cattle were detected; the
    shoulder/hip landmarks drive initial point placement.
    """
    use_enhanced = USE_ENHANCED_DETECTION if request.use_enhanced_detection is None \
        else request.use_enhanced_detection
    hints = request.landmarks.to_hints() if request.landmarks else None

    with sessions.checkout(session_id) as session:
        session.load_image(request.to_size(), hints=hints, use_enhanced_detection=use_enhanced,
                           labels=request.label_pairs())
        return _session_response(session)


@app.post("/sessions/{session_id}/image/upload", response_model=SessionResponse)
def upload_image(session_id: str, file: UploadFile = File(...)):
    """
    Upload the photo. It is decoded to get its size and kept in memory for
    overlay.png; points are placed with the default layout.

    Runs in the threadpool: decoding and waiting on the session lock must
    not block the event loop.
    """
    # Validate before touching the session
    sessions.get(session_id)

    suffix = Path(file.filename or "").suffix.lower()
    if suffix and suffix not in VALID_IMAGE_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported image type {suffix}, use one of {sorted(VALID_IMAGE_EXTENSIONS)}"
        )

    data = file.file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(data) > MAX_FILE_SIZE_BYTES:
        raise HTTPException(status_code=413, detail=f"Image exceeds {MAX_IMAGE_SIZE_MB} MB")

    image = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    if image is None:
        log.warn('api:sessions', 'Could not decode upload', session_id=session_id,
                 filename=file.filename, bytes=len(data))
        raise HTTPException(status_code=400, detail="Could not decode image")

    height, width = image.shape[:2]
    if width < MIN_IMAGE_DIMENSION or height < MIN_IMAGE_DIMENSION:
        raise HTTPException(
            status_code=400,
            detail=f"Image too small ({width}x{height}), minimum is {MIN_IMAGE_DIMENSION}px"
        )

    with sessions.checkout(session_id) as session:
        session.load_image(Size(width, height), image=image)
        log.info('api:sessions', 'Image uploaded', session_id=session_id,
                 filename=file.filename, width=width, height=height)
        return _session_response(session)


@app.put("/sessions/{session_id}/display", response_model=SessionResponse)
def set_display(session_id: str, request: SizeModel):
    with sessions.checkout(session_id) as session:
        session.set_display_size(request.to_size())
        return _session_response(session)


@app.put("/sessions/{session_id}/calibration", response_model=SessionResponse)
def set_calibration_mode(session_id: str, request: CalibrationModeRequest):
    with sessions.checkout(session_id) as session:
        session.set_calibration_mode(request.enabled)
        return _session_response(session)


@app.put("/sessions/{session_id}/calibration/length", response_model=SessionResponse)
def set_calibration_length(session_id: str, request: CalibrationLengthRequest):
    with sessions.checkout(session_id) as session:
        session.set_calibration_length(request.length_cm)
        return _session_response(session)


@app.post("/sessions/{session_id}/drag/start", response_model=DragResponse)
def drag_start(session_id: str, request: PointModel):
    """Grab the point nearest the touch, if any is within reach"""
    with sessions.checkout(session_id) as session:
        session.begin_drag(request.to_point())
        return _drag_response(session)


@app.post("/sessions/{session_id}/drag/move", response_model=DragResponse)
def drag_move(session_id: str, request: PointModel):
    with sessions.checkout(session_id) as session:
        position = session.drag_to(request.to_point())
        return _drag_response(session, position)


@app.post("/sessions/{session_id}/drag/end", response_model=DragResponse)
def drag_end(session_id: str):
    with sessions.checkout(session_id) as session:
        session.end_drag()
        return _drag_response(session)


@app.put("/sessions/{session_id}/points/{role}", response_model=SessionResponse)
def move_point(session_id: str, role: PointRole, request: PointModel):
    with sessions.checkout(session_id) as session:
        session.move_point(role, request.to_point())
        return _session_response(session)


@app.put("/sessions/{session_id}/animal", response_model=SessionResponse)
def set_animal(session_id: str, request: AnimalRequest):
    with sessions.checkout(session_id) as session:
        session.set_animal(request.breed, request.condition)
        return _session_response(session)


@app.get("/sessions/{session_id}/measurements", response_model=ReadingsResponse)
def get_measurements(session_id: str):
    with sessions.checkout(session_id) as session:
        return _readings_response(session.readings())


@app.get("/sessions/{session_id}/overlay", response_model=OverlayResponse)
def get_overlay(session_id: str):
    with sessions.checkout(session_id) as session:
        overlay = build_overlay(session)
    return OverlayResponse(**overlay.as_dict())


@app.get("/sessions/{session_id}/overlay.png")
def get_overlay_image(session_id: str):
    with sessions.checkout(session_id) as session:
        if session.image is None:
            raise HTTPException(
                status_code=404,
                detail="No uploaded image for this session, use /image/upload first"
            )
        annotated = render_session(session)

    ok, encoded = cv2.imencode(".png", annotated)
    if not ok:
        log.error('api:sessions', 'PNG encoding failed', session_id=session_id)
        raise HTTPException(status_code=500, detail="Failed to encode overlay image")

    return Response(content=encoded.tobytes(), media_type="image/png")


@app.post("/estimate", response_model=WeightEstimateResponse)
def estimate_weight(request: EstimateRequest):
    """Weight estimate from measurements taken elsewhere"""
    result = estimate(request.girth_cm, request.length_cm, request.breed, request.condition)
    return WeightEstimateResponse(**result.as_dict())


def run():
    import uvicorn
    log.info('startup', 'Starting server', host=API_HOST, port=API_PORT)
    uvicorn.run(app, host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    run()
