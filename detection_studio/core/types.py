from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from PIL import Image

if TYPE_CHECKING:
    from detection_studio.core.results import ResultsView


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> 'BoundingBox':
        return cls(x=float(x1), y=float(y1), width=max(0.0, float(x2) - float(x1)), height=max(0.0, float(y2) - float(y1)))

    def as_list(self) -> list[float]:
        return [self.x, self.y, self.width, self.height]


@dataclass(frozen=True)
class Detection:
    label: str
    confidence: float
    bbox: BoundingBox


@dataclass
class DetectionResult:
    detections: list[Detection]
    model_id: str
    latency_ms: int
    image_size: tuple[int, int]


class CaptureState(str, Enum):
    IDLE = 'idle'
    IMAGE_LOADED = 'image_loaded'
    CAMERA_ACTIVE = 'camera_active'
    FRAME_CAPTURED = 'frame_captured'


@dataclass(frozen=True)
class CameraConstraints:
    facing_mode: str = 'environment'
    width: int = 1280
    height: int = 720


@dataclass
class CycleOutput:
    """One finished capture cycle: the rendered frame plus its results view."""

    sequence: int
    source: CaptureState
    frame: Image.Image
    detections: list[Detection]
    results: 'ResultsView'
    model_id: str | None = None
