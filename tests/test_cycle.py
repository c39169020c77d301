import asyncio
import threading

import pytest

from detection_studio.core.cycle import CancellationToken, CaptureCycle
from detection_studio.core.detector import Detector
from detection_studio.core.errors import DetectionError
from detection_studio.core.overlay import OverlayRenderer
from detection_studio.core.runner import DetectionRunner
from detection_studio.core.surface import DrawingSurface
from detection_studio.core.types import BoundingBox, CaptureState, Detection, DetectionResult
from detection_studio.utils.image_io import StillImageSource


class SlowFirstDetector(Detector):
    """The first call blocks until released; later calls return at once."""

    def __init__(self) -> None:
        self.calls = 0
        self.entered = threading.Event()
        self.release = threading.Event()

    @property
    def model_id(self) -> str:
        return 'slow-first'

    def detect(self, image) -> DetectionResult:
        self.calls += 1
        label = 'old' if self.calls == 1 else 'new'
        if self.calls == 1:
            self.entered.set()
            self.release.wait(timeout=5)
        detection = Detection(label=label, confidence=0.9, bbox=BoundingBox(1, 1, 5, 5))
        return DetectionResult(detections=[detection], model_id=self.model_id, latency_ms=1, image_size=image.size)


class BrokenDetector(Detector):
    @property
    def model_id(self) -> str:
        return 'broken'

    def detect(self, image) -> DetectionResult:
        raise RuntimeError('model exploded')


def _cycle(detector: Detector) -> CaptureCycle:
    return CaptureCycle(DrawingSurface(), DetectionRunner(detector), OverlayRenderer())


def test_cycle_renders_and_presents(frame_image, static_detector, detection):
    cycle = _cycle(static_detector([detection('cat', 0.87)]))

    output = asyncio.run(cycle.run(StillImageSource(frame_image), CaptureState.IMAGE_LOADED))

    assert output is not None
    assert output.sequence == 1
    assert output.source is CaptureState.IMAGE_LOADED
    assert output.frame.size == frame_image.size
    assert cycle.surface.size == frame_image.size
    assert output.results.object_count_text == '1'
    assert output.model_id == 'static-v1'
    assert cycle.latest is output


def test_stale_cycle_is_discarded(frame_image):
    detector = SlowFirstDetector()
    cycle = _cycle(detector)
    source = StillImageSource(frame_image)

    async def scenario():
        first = asyncio.create_task(cycle.run(source, CaptureState.IMAGE_LOADED))
        await asyncio.to_thread(detector.entered.wait, 5)
        second = await cycle.run(source, CaptureState.IMAGE_LOADED)
        detector.release.set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert first is None
    assert second.sequence == 2
    assert [d.label for d in second.detections] == ['new']
    assert cycle.latest is second


def test_cancel_during_detect_prevents_render(frame_image):
    detector = SlowFirstDetector()
    cycle = _cycle(detector)
    token = CancellationToken()

    async def scenario():
        task = asyncio.create_task(cycle.run(StillImageSource(frame_image), CaptureState.CAMERA_ACTIVE, token))
        await asyncio.to_thread(detector.entered.wait, 5)
        token.cancel()
        detector.release.set()
        return await task

    assert asyncio.run(scenario()) is None
    assert cycle.latest is None


def test_detector_failure_is_detection_error(frame_image):
    cycle = _cycle(BrokenDetector())

    with pytest.raises(DetectionError) as excinfo:
        asyncio.run(cycle.run(StillImageSource(frame_image), CaptureState.IMAGE_LOADED))

    assert 'model exploded' in excinfo.value.message
    assert excinfo.value.details == {'model': 'broken'}


def test_token_sleep_wakes_on_cancel():
    token = CancellationToken()

    async def scenario():
        asyncio.get_running_loop().call_later(0.01, token.cancel)
        return await token.sleep(5)

    assert asyncio.run(scenario()) is True
