import io
import time

import httpx

from detection_studio.core.detector import Detector
from detection_studio.core.types import BoundingBox, Detection, DetectionResult


def _join_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def _normalized_to_box(detection_box: list[float] | tuple[float, ...] | None, image_size: tuple[int, int]) -> BoundingBox | None:
    # MAX reports [ymin, xmin, ymax, xmax] in 0..1
    if not detection_box or len(detection_box) != 4:
        return None

    width, height = image_size
    ymin, xmin, ymax, xmax = [float(value) for value in detection_box]
    return BoundingBox.from_xyxy(
        max(0.0, min(float(width), xmin * width)),
        max(0.0, min(float(height), ymin * height)),
        max(0.0, min(float(width), xmax * width)),
        max(0.0, min(float(height), ymax * height)),
    )


class MaxRemoteProvider(Detector):
    def __init__(
        self,
        base_url: str = 'http://127.0.0.1:5000',
        predict_path: str = '/model/predict',
        timeout_ms: int = 12000,
        threshold: float = 0.5,
        max_detections: int = 20,
    ) -> None:
        self._base_url = base_url
        self._predict_path = predict_path
        self._timeout = max(int(timeout_ms), 1000) / 1000.0
        self._threshold = float(threshold)
        self._max_detections = max(1, int(max_detections))
        self._model_id = 'max-object-detector'

    @property
    def model_id(self) -> str:
        return self._model_id

    def detect(self, image) -> DetectionResult:
        start = time.perf_counter()
        width, height = image.size
        payload = io.BytesIO()
        image.convert('RGB').save(payload, format='JPEG', quality=92)

        with httpx.Client(timeout=self._timeout) as client:
            response = client.post(
                _join_url(self._base_url, self._predict_path),
                files={'image': ('frame.jpg', payload.getvalue(), 'image/jpeg')},
                data={'threshold': str(self._threshold)},
            )
        response.raise_for_status()
        body = response.json()

        detections: list[Detection] = []
        for row in body.get('predictions', []):
            label = str(row.get('label') or '').strip()
            probability = float(row.get('probability') or 0.0)
            bbox = _normalized_to_box(row.get('detection_box'), (width, height))
            if not label or bbox is None or probability < self._threshold:
                continue
            detections.append(Detection(label=label, confidence=probability, bbox=bbox))
            if len(detections) >= self._max_detections:
                break

        latency_ms = int((time.perf_counter() - start) * 1000)
        return DetectionResult(
            detections=detections,
            model_id=self.model_id,
            latency_ms=max(latency_ms, 1),
            image_size=(width, height),
        )
