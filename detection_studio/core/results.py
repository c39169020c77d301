import math
from dataclasses import dataclass

from detection_studio.core.types import Detection

NO_OBJECTS_PLACEHOLDER = 'Tidak ada objek terdeteksi'


def round_half_up(value: float) -> int:
    # browser Math.round semantics, not banker's rounding
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class ResultRow:
    rank: int
    label: str
    confidence_percent: int
    width_px: int
    height_px: int

    @property
    def size_text(self) -> str:
        return f'{self.width_px}×{self.height_px}px'

    @property
    def summary(self) -> str:
        return f'{self.rank}. {self.label}  Akurasi: {self.confidence_percent}%  {self.size_text}'


@dataclass(frozen=True)
class ResultsView:
    object_count: int
    average_confidence: int
    processing_time_ms: int
    rows: list[ResultRow]
    placeholder: str | None = None

    @property
    def object_count_text(self) -> str:
        return str(self.object_count)

    @property
    def confidence_avg_text(self) -> str:
        return f'{self.average_confidence}%'

    @property
    def processing_time_text(self) -> str:
        return f'{self.processing_time_ms}ms'


def present(detections: list[Detection], processing_ms: float) -> ResultsView:
    """Build the complete results panel for one capture cycle.

    An empty list zeroes every statistic, including the processing time, and
    shows the placeholder instead of rows.
    """
    if not detections:
        return ResultsView(
            object_count=0,
            average_confidence=0,
            processing_time_ms=0,
            rows=[],
            placeholder=NO_OBJECTS_PLACEHOLDER,
        )

    total_confidence = sum(d.confidence for d in detections)
    average = (total_confidence / len(detections)) * 100
    rows = [
        ResultRow(
            rank=index,
            label=d.label,
            confidence_percent=round_half_up(d.confidence * 100),
            width_px=round_half_up(d.bbox.width),
            height_px=round_half_up(d.bbox.height),
        )
        for index, d in enumerate(detections, start=1)
    ]
    return ResultsView(
        object_count=len(detections),
        average_confidence=round_half_up(average),
        processing_time_ms=round_half_up(processing_ms),
        rows=rows,
    )
