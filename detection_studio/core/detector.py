import asyncio
import logging
from abc import ABC, abstractmethod

from detection_studio.config import Settings
from detection_studio.core.errors import ModelLoadError
from detection_studio.core.types import DetectionResult

logger = logging.getLogger(__name__)


class Detector(ABC):
    @abstractmethod
    def detect(self, image) -> DetectionResult:
        raise NotImplementedError

    @property
    @abstractmethod
    def model_id(self) -> str:
        raise NotImplementedError


def create_detector(settings: Settings) -> Detector:
    provider = settings.provider.strip().lower()
    if provider == 'dummy':
        from detection_studio.providers.dummy_provider import DummyProvider

        return DummyProvider(model_id='dummy-v1')
    if provider == 'yolo':
        from detection_studio.providers.yolo_provider import YoloProvider

        return YoloProvider(
            model_id=settings.model_id,
            conf_threshold=settings.conf_threshold,
            max_detections=settings.max_detections,
        )
    if provider == 'max_remote':
        from detection_studio.providers.max_remote_provider import MaxRemoteProvider

        return MaxRemoteProvider(
            base_url=settings.max_remote_base_url,
            predict_path=settings.max_remote_predict_path,
            timeout_ms=settings.max_remote_timeout_ms,
            threshold=settings.conf_threshold,
            max_detections=settings.max_detections,
        )
    raise ValueError(f'Unsupported PROVIDER={settings.provider!r}')


async def load_detector(settings: Settings) -> Detector:
    """Build the configured detector off the event loop.

    Weight downloads and model construction can take seconds, so they run in a
    worker thread. Any failure is reported as ``ModelLoadError``.
    """
    logger.info('Loading detector provider=%s model=%s', settings.provider, settings.model_id)
    try:
        return await asyncio.to_thread(create_detector, settings)
    except Exception as exc:
        raise ModelLoadError(f'Could not load detector provider={settings.provider!r}: {exc}') from exc
