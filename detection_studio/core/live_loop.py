import logging

from detection_studio.core.cycle import CancellationToken, CaptureCycle
from detection_studio.core.errors import StudioError
from detection_studio.core.surface import FrameSource
from detection_studio.core.types import CaptureState

logger = logging.getLogger(__name__)


class LiveDetectionLoop:
    """Continuous detection over a camera stream.

    Runs until the token is cancelled. A failed cycle is logged and retried
    after a fixed delay; there is no backoff and no give-up.
    """

    def __init__(
        self,
        cycle: CaptureCycle,
        source: FrameSource,
        frame_interval_s: float = 0.016,
        retry_delay_s: float = 0.1,
    ) -> None:
        self._cycle = cycle
        self._source = source
        self.frame_interval_s = frame_interval_s
        self.retry_delay_s = retry_delay_s
        self.cycles = 0
        self.failures = 0

    async def run(self, token: CancellationToken) -> None:
        logger.info('Live detection started frame_interval_s=%s retry_delay_s=%s', self.frame_interval_s, self.retry_delay_s)
        while not token.cancelled:
            try:
                await self._cycle.run(self._source, CaptureState.CAMERA_ACTIVE, token)
            except StudioError as exc:
                self.failures += 1
                logger.warning('Live detection error code=%s message=%s retry_in_s=%s', exc.code, exc.message, self.retry_delay_s)
                await token.sleep(self.retry_delay_s)
                continue
            except Exception:
                self.failures += 1
                logger.exception('Live detection cycle failed retry_in_s=%s', self.retry_delay_s)
                await token.sleep(self.retry_delay_s)
                continue
            self.cycles += 1
            await token.sleep(self.frame_interval_s)
        logger.info('Live detection stopped cycles=%s failures=%s', self.cycles, self.failures)
