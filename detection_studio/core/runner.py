import asyncio
import logging

from PIL import Image

from detection_studio.core.detector import Detector
from detection_studio.core.errors import DetectionError
from detection_studio.core.types import Detection
from detection_studio.utils.timings import measure_ms

logger = logging.getLogger(__name__)


class DetectionRunner:
    def __init__(self, detector: Detector) -> None:
        self._detector = detector

    @property
    def model_id(self) -> str:
        return self._detector.model_id

    async def detect(self, frame: Image.Image) -> tuple[list[Detection], float]:
        with measure_ms() as elapsed:
            try:
                result = await asyncio.to_thread(self._detector.detect, frame)
            except Exception as exc:
                raise DetectionError(f'Detection failed: {exc}', details={'model': self.model_id}) from exc
            elapsed_ms = elapsed()
        logger.debug('detect model=%s detections=%s elapsed_ms=%.1f', self.model_id, len(result.detections), elapsed_ms)
        return list(result.detections), elapsed_ms
