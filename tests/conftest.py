import pytest
from PIL import Image

from detection_studio.capture.camera import Camera, VideoStream
from detection_studio.core.detector import Detector
from detection_studio.core.types import BoundingBox, CameraConstraints, Detection, DetectionResult


class StaticDetector(Detector):
    def __init__(self, detections: list[Detection] | None = None, model_id: str = 'static-v1') -> None:
        self._detections = detections or []
        self._model_id = model_id
        self.calls = 0

    @property
    def model_id(self) -> str:
        return self._model_id

    def detect(self, image) -> DetectionResult:
        self.calls += 1
        return DetectionResult(detections=list(self._detections), model_id=self._model_id, latency_ms=1, image_size=image.size)


class FakeStream(VideoStream):
    def __init__(self, image: Image.Image) -> None:
        self._image = image
        self.reads = 0
        self.stopped = False

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    @property
    def active(self) -> bool:
        return not self.stopped

    def current_frame(self) -> Image.Image:
        self.reads += 1
        return self._image.copy()

    def stop(self) -> None:
        self.stopped = True


class FakeCamera(Camera):
    def __init__(self, image: Image.Image | None = None, error: Exception | None = None) -> None:
        self._image = image or Image.new('RGB', (64, 48), color='green')
        self._error = error
        self.requests: list[CameraConstraints] = []
        self.streams: list[FakeStream] = []

    def request_stream(self, constraints: CameraConstraints) -> VideoStream:
        self.requests.append(constraints)
        if self._error is not None:
            raise self._error
        stream = FakeStream(self._image)
        self.streams.append(stream)
        return stream


def make_detection(label: str, confidence: float, bbox: tuple[float, float, float, float] = (10, 10, 100, 50)) -> Detection:
    return Detection(label=label, confidence=confidence, bbox=BoundingBox(*bbox))


@pytest.fixture
def detection():
    return make_detection


@pytest.fixture
def static_detector():
    return StaticDetector


@pytest.fixture
def fake_camera():
    return FakeCamera


@pytest.fixture
def frame_image():
    return Image.new('RGB', (200, 120), color=(0, 0, 255))
