import asyncio
import logging
from datetime import datetime, timezone

from detection_studio.capture.camera import Camera, VideoStream
from detection_studio.config import Settings
from detection_studio.core.cycle import CancellationToken, CaptureCycle
from detection_studio.core.detector import Detector
from detection_studio.core.errors import (
    CameraNotActive,
    CycleSuperseded,
    ModelLoadError,
    ModelNotReady,
)
from detection_studio.core.live_loop import LiveDetectionLoop
from detection_studio.core.overlay import OverlayRenderer
from detection_studio.core.runner import DetectionRunner
from detection_studio.core.surface import DrawingSurface
from detection_studio.core.types import CameraConstraints, CaptureState, CycleOutput
from detection_studio.utils.image_io import StillImageSource, check_image_size, load_image_from_bytes

logger = logging.getLogger(__name__)


class DetectionSession:
    """Owns everything one viewer interacts with.

    Capture state transitions:

        IDLE / IMAGE_LOADED / FRAME_CAPTURED --upload--> IMAGE_LOADED
        any --open camera--> CAMERA_ACTIVE
        CAMERA_ACTIVE --take picture--> FRAME_CAPTURED
        CAMERA_ACTIVE --stop camera--> IDLE

    Leaving CAMERA_ACTIVE always cancels the live loop and releases the
    stream before anything else is drawn. Mode switches run one at a time,
    so there is never more than one open stream.
    """

    def __init__(self, settings: Settings, camera: Camera) -> None:
        self.settings = settings
        self.camera = camera
        self.state = CaptureState.IDLE
        self._pending = 0
        self.detector: Detector | None = None
        self.model_error: str | None = None
        self.model_loaded_at: str | None = None
        self.surface = DrawingSurface(font_path=settings.overlay_font_path, font_size=settings.overlay_font_size)
        self.renderer = OverlayRenderer(
            color=settings.overlay_color,
            text_color=settings.overlay_text_color,
            line_width=settings.overlay_line_width,
        )
        self.cycle: CaptureCycle | None = None
        self._stream: VideoStream | None = None
        self._live_task: asyncio.Task | None = None
        self._live_token: CancellationToken | None = None
        self.live_loop: LiveDetectionLoop | None = None
        self._switch_lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._pending > 0

    @property
    def model_loaded(self) -> bool:
        return self.detector is not None

    @property
    def sequence(self) -> int:
        return self.cycle.sequence if self.cycle else 0

    @property
    def latest(self) -> CycleOutput | None:
        return self.cycle.latest if self.cycle else None

    def attach_detector(self, detector: Detector) -> None:
        self.detector = detector
        self.model_error = None
        self.model_loaded_at = datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
        self.cycle = CaptureCycle(self.surface, DetectionRunner(detector), self.renderer)

    def fail_model(self, error: ModelLoadError) -> None:
        self.detector = None
        self.cycle = None
        self.model_error = error.message

    def _require_cycle(self) -> CaptureCycle:
        if self.model_error is not None:
            raise ModelLoadError('Error loading AI model. Restart the service.', details={'reason': self.model_error})
        if self.cycle is None:
            raise ModelNotReady('Model is not ready yet. Try again shortly.')
        return self.cycle

    async def _run_single(self, source: StillImageSource, state: CaptureState) -> CycleOutput:
        cycle = self._require_cycle()
        self._pending += 1
        try:
            output = await cycle.run(source, state)
        finally:
            self._pending -= 1
        if output is None:
            raise CycleSuperseded('A newer capture replaced this one before it finished.')
        return output

    async def process_upload(self, image_bytes: bytes) -> CycleOutput:
        check_image_size(image_bytes, self.settings.max_image_bytes)
        self._require_cycle()
        image = load_image_from_bytes(image_bytes, self.settings.max_image_bytes)
        async with self._switch_lock:
            await self._release_camera()
            self.state = CaptureState.IMAGE_LOADED
        logger.info('Image loaded size=%sx%s bytes=%s', image.width, image.height, len(image_bytes))
        return await self._run_single(StillImageSource(image), CaptureState.IMAGE_LOADED)

    async def open_camera(self, constraints: CameraConstraints | None = None) -> None:
        cycle = self._require_cycle()
        constraints = constraints or CameraConstraints(
            facing_mode=self.settings.camera_facing_mode,
            width=self.settings.camera_width,
            height=self.settings.camera_height,
        )
        async with self._switch_lock:
            await self._release_camera()
            stream = await asyncio.to_thread(self.camera.request_stream, constraints)
            self._stream = stream
            self.state = CaptureState.CAMERA_ACTIVE
            self._live_token = CancellationToken()
            self.live_loop = LiveDetectionLoop(
                cycle,
                stream,
                frame_interval_s=self.settings.live_frame_interval_ms / 1000.0,
                retry_delay_s=self.settings.live_retry_delay_ms / 1000.0,
            )
            self._live_task = asyncio.create_task(self.live_loop.run(self._live_token))

    async def take_picture(self) -> CycleOutput:
        async with self._switch_lock:
            if self.state is not CaptureState.CAMERA_ACTIVE or self._stream is None:
                raise CameraNotActive('Open the camera first.')
            image = await asyncio.to_thread(self._stream.current_frame)
            await self._release_camera()
            self.state = CaptureState.FRAME_CAPTURED
        return await self._run_single(StillImageSource(image), CaptureState.FRAME_CAPTURED)

    async def stop_camera(self) -> None:
        async with self._switch_lock:
            await self._release_camera()

    async def _release_camera(self) -> None:
        # caller holds _switch_lock
        token, task, stream = self._live_token, self._live_task, self._stream
        self._live_token = None
        self._live_task = None
        self._stream = None
        if token is not None:
            token.cancel()
        if task is not None:
            try:
                await task
            except Exception:
                logger.exception('Live detection task failed')
        if stream is not None:
            await asyncio.to_thread(stream.stop)
        if self.state is CaptureState.CAMERA_ACTIVE:
            self.state = CaptureState.IDLE
