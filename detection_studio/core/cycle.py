import asyncio
import itertools
import logging

from detection_studio.core.overlay import OverlayRenderer
from detection_studio.core.results import present
from detection_studio.core.runner import DetectionRunner
from detection_studio.core.surface import DrawingSurface, FrameSampler, FrameSource
from detection_studio.core.types import CaptureState, CycleOutput
from detection_studio.utils.image_io import StillImageSource

logger = logging.getLogger(__name__)


class CancellationToken:
    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def sleep(self, seconds: float) -> bool:
        """Sleep up to ``seconds``, waking early on cancel. Returns ``cancelled``."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout=max(0.0, seconds))
        except asyncio.TimeoutError:
            pass
        return self.cancelled


class CaptureCycle:
    """Sample, detect, render and summarize one frame.

    Every run takes the next sequence number. Output is applied to the
    surface and published only while its number is still the latest issued,
    so a slow cycle can never paint over a newer one.
    """

    def __init__(
        self,
        surface: DrawingSurface,
        runner: DetectionRunner,
        renderer: OverlayRenderer,
        sampler: FrameSampler | None = None,
    ) -> None:
        self.surface = surface
        self.runner = runner
        self.renderer = renderer
        self.sampler = sampler or FrameSampler()
        self._counter = itertools.count(1)
        self._issued = 0
        self.latest: CycleOutput | None = None

    @property
    def sequence(self) -> int:
        return self._issued

    def next_sequence(self) -> int:
        self._issued = next(self._counter)
        return self._issued

    def is_latest(self, sequence: int) -> bool:
        return sequence == self._issued

    async def run(self, source: FrameSource, state: CaptureState, token: CancellationToken | None = None) -> CycleOutput | None:
        sequence = self.next_sequence()
        # camera reads block until the next frame arrives
        image = await asyncio.to_thread(source.current_frame)
        if token is not None and token.cancelled:
            return None
        frame = self.sampler.sample(StillImageSource(image), self.surface)

        detections, elapsed_ms = await self.runner.detect(frame)
        if token is not None and token.cancelled:
            logger.debug('Dropping cycle after stop sequence=%s', sequence)
            return None
        if not self.is_latest(sequence):
            logger.info('Discarding stale cycle sequence=%s latest=%s', sequence, self._issued)
            return None

        self.renderer.render(self.surface, frame, detections)
        output = CycleOutput(
            sequence=sequence,
            source=state,
            frame=self.surface.snapshot(),
            detections=detections,
            results=present(detections, elapsed_ms),
            model_id=self.runner.model_id,
        )
        self.latest = output
        logger.debug(
            'cycle sequence=%s state=%s detections=%s elapsed_ms=%.1f',
            sequence,
            state.value,
            len(detections),
            elapsed_ms,
        )
        return output
