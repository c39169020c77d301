from pydantic import BaseModel, Field

from detection_studio.core.results import ResultsView
from detection_studio.core.types import CycleOutput, Detection


class DetectionOut(BaseModel):
    label: str
    confidence: float = Field(ge=0.0, le=1.0)
    bbox: list[float]

    @classmethod
    def from_detection(cls, detection: Detection) -> 'DetectionOut':
        return cls(label=detection.label, confidence=detection.confidence, bbox=detection.bbox.as_list())


class ResultRowOut(BaseModel):
    rank: int
    label: str
    confidence_percent: int
    size: str
    summary: str


class ResultsOut(BaseModel):
    object_count: str
    confidence_avg: str
    processing_time: str
    rows: list[ResultRowOut] = []
    placeholder: str | None = None

    @classmethod
    def from_view(cls, view: ResultsView) -> 'ResultsOut':
        return cls(
            object_count=view.object_count_text,
            confidence_avg=view.confidence_avg_text,
            processing_time=view.processing_time_text,
            rows=[
                ResultRowOut(
                    rank=row.rank,
                    label=row.label,
                    confidence_percent=row.confidence_percent,
                    size=row.size_text,
                    summary=row.summary,
                )
                for row in view.rows
            ],
            placeholder=view.placeholder,
        )


class CycleResponse(BaseModel):
    ok: bool = True
    sequence: int
    state: str
    model: str | None = None
    width: int
    height: int
    detections: list[DetectionOut]
    results: ResultsOut
    image: str | None = None

    @classmethod
    def from_output(cls, output: CycleOutput, image_b64: str | None = None) -> 'CycleResponse':
        return cls(
            sequence=output.sequence,
            state=output.source.value,
            model=output.model_id,
            width=output.frame.width,
            height=output.frame.height,
            detections=[DetectionOut.from_detection(d) for d in output.detections],
            results=ResultsOut.from_view(output.results),
            image=image_b64,
        )


class CameraOpenRequest(BaseModel):
    facing_mode: str | None = None
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)


class SessionResponse(BaseModel):
    ok: bool = True
    state: str
    busy: bool
    sequence: int
    has_result: bool
    model_loaded: bool


class HealthResponse(BaseModel):
    ok: bool
    version: str
    provider: str
    model_loaded: bool
    model: str | None = None
    model_error: str | None = None
    model_loaded_at: str | None = None
    uptime_s: float


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    message: str
    request_id: str | None = None
