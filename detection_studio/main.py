import logging
import time
import uuid

import uvicorn
from fastapi import FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from detection_studio.capture.camera import OpenCVCamera, parse_facing_devices
from detection_studio.config import get_settings
from detection_studio.core.detector import load_detector
from detection_studio.core.errors import ModelLoadError, NoResult, StudioError
from detection_studio.core.session import DetectionSession
from detection_studio.core.surface import encode_jpeg, encode_jpeg_b64
from detection_studio.core.types import CameraConstraints, CycleOutput
from detection_studio.logging_setup import setup_logging
from detection_studio.schemas import (
    CameraOpenRequest,
    CycleResponse,
    ErrorResponse,
    HealthResponse,
    SessionResponse,
)

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger('detection_studio')

app = FastAPI(title='Detection Studio', version=settings.version)
started_at = time.time()


def _request_id(request: Request) -> str:
    return request.headers.get('x-request-id') or str(uuid.uuid4())


def _session() -> DetectionSession:
    return app.state.session


def _cycle_response(output: CycleOutput) -> CycleResponse:
    return CycleResponse.from_output(output, image_b64=encode_jpeg_b64(output.frame, settings.jpeg_quality))


def _session_response(session: DetectionSession) -> SessionResponse:
    return SessionResponse(
        state=session.state.value,
        busy=session.busy,
        sequence=session.sequence,
        has_result=session.latest is not None,
        model_loaded=session.model_loaded,
    )


@app.on_event('startup')
async def startup_event() -> None:
    camera = OpenCVCamera(facing_devices=parse_facing_devices(settings.camera_facing_devices))
    session = DetectionSession(settings, camera)
    app.state.session = session
    try:
        detector = await load_detector(settings)
    except ModelLoadError as exc:
        session.fail_model(exc)
        logger.exception('Model load failed provider=%s', settings.provider)
        return
    session.attach_detector(detector)
    logger.info(
        'Detector initialized provider=%s model=%s loaded_at=%s',
        settings.provider,
        detector.model_id,
        session.model_loaded_at,
    )


@app.on_event('shutdown')
async def shutdown_event() -> None:
    session = getattr(app.state, 'session', None)
    if session is not None:
        await session.stop_camera()


@app.exception_handler(StudioError)
async def studio_error_handler(request: Request, exc: StudioError):
    request_id = _request_id(request)
    logger.warning('Request failed request_id=%s code=%s message=%s', request_id, exc.code, exc.message)
    payload = ErrorResponse(
        error=exc.code,
        message=exc.message,
        request_id=request_id,
    )
    return JSONResponse(status_code=exc.status_code, content=payload.model_dump())


@app.exception_handler(Exception)
async def generic_error_handler(request: Request, exc: Exception):
    request_id = _request_id(request)
    logger.exception('Unhandled exception request_id=%s', request_id)
    payload = ErrorResponse(
        error='UNEXPECTED_SERVER_ERROR',
        message='Unexpected server error.',
        request_id=request_id,
    )
    return JSONResponse(status_code=500, content=payload.model_dump())


@app.get('/health', response_model=HealthResponse)
def health():
    session = _session()
    return HealthResponse(
        ok=session.model_error is None,
        version=settings.version,
        provider=settings.provider,
        model_loaded=session.model_loaded,
        model=session.detector.model_id if session.detector else None,
        model_error=session.model_error,
        model_loaded_at=session.model_loaded_at,
        uptime_s=round(time.time() - started_at, 3),
    )


@app.get('/session', response_model=SessionResponse)
def session_state():
    return _session_response(_session())


@app.post('/detect', response_model=CycleResponse)
async def detect(request: Request, image: UploadFile = File(...)):
    request_id = _request_id(request)
    image_bytes = await image.read()
    output = await _session().process_upload(image_bytes)
    logger.info(
        'detect request_id=%s bytes=%s sequence=%s detections=%s processing_time=%s',
        request_id,
        len(image_bytes),
        output.sequence,
        len(output.detections),
        output.results.processing_time_text,
    )
    return _cycle_response(output)


@app.post('/camera/open', response_model=SessionResponse)
async def camera_open(payload: CameraOpenRequest | None = None):
    payload = payload or CameraOpenRequest()
    constraints = CameraConstraints(
        facing_mode=payload.facing_mode or settings.camera_facing_mode,
        width=payload.width or settings.camera_width,
        height=payload.height or settings.camera_height,
    )
    session = _session()
    await session.open_camera(constraints)
    return _session_response(session)


@app.post('/camera/capture', response_model=CycleResponse)
async def camera_capture(request: Request):
    request_id = _request_id(request)
    output = await _session().take_picture()
    logger.info(
        'capture request_id=%s sequence=%s detections=%s processing_time=%s',
        request_id,
        output.sequence,
        len(output.detections),
        output.results.processing_time_text,
    )
    return _cycle_response(output)


@app.post('/camera/close', response_model=SessionResponse)
async def camera_close():
    session = _session()
    await session.stop_camera()
    return _session_response(session)


def _latest_output() -> CycleOutput:
    output = _session().latest
    if output is None:
        raise NoResult('No detection result yet.')
    return output


@app.get('/result', response_model=CycleResponse)
def latest_result():
    return _cycle_response(_latest_output())


@app.get('/result/frame.jpg')
def latest_frame():
    output = _latest_output()
    return Response(content=encode_jpeg(output.frame, settings.jpeg_quality), media_type='image/jpeg')


def run() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == '__main__':
    run()
