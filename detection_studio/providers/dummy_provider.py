import time

from detection_studio.core.detector import Detector
from detection_studio.core.types import BoundingBox, Detection, DetectionResult

# label, confidence, box as fractions of the frame (x1, y1, x2, y2)
_FIXTURE_BOXES = (
    ('person', 0.91, (0.05, 0.10, 0.45, 0.90)),
    ('dog', 0.62, (0.30, 0.20, 0.90, 0.95)),
    ('cup', 0.54, (0.15, 0.35, 0.70, 0.85)),
)


class DummyProvider(Detector):
    """Deterministic boxes scaled to the frame, for running without weights."""

    def __init__(self, model_id: str = 'dummy-v1') -> None:
        self._model_id = model_id

    @property
    def model_id(self) -> str:
        return self._model_id

    def detect(self, image) -> DetectionResult:
        start = time.perf_counter()
        width, height = image.size
        detections = [
            Detection(
                label=label,
                confidence=confidence,
                bbox=BoundingBox.from_xyxy(x1 * width, y1 * height, x2 * width, y2 * height),
            )
            for label, confidence, (x1, y1, x2, y2) in _FIXTURE_BOXES
        ]
        latency_ms = int((time.perf_counter() - start) * 1000)
        return DetectionResult(
            detections=detections,
            model_id=self.model_id,
            latency_ms=max(latency_ms, 1),
            image_size=(width, height),
        )
