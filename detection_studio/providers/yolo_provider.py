import time

from detection_studio.core.detector import Detector
from detection_studio.core.types import BoundingBox, Detection, DetectionResult


class YoloProvider(Detector):
    def __init__(self, model_id: str = 'yolov8n.pt', conf_threshold: float = 0.5, max_detections: int = 20) -> None:
        try:
            from ultralytics import YOLO
        except ImportError as exc:
            raise RuntimeError('ultralytics is required for PROVIDER=yolo. Install the "yolo" extra.') from exc

        self._model_id = model_id
        self._conf_threshold = float(conf_threshold)
        self._max_detections = max(1, int(max_detections))
        self._model = YOLO(model_id)

    @property
    def model_id(self) -> str:
        return self._model_id

    def detect(self, image) -> DetectionResult:
        start = time.perf_counter()
        width, height = image.size
        prediction = self._model(image, conf=self._conf_threshold, max_det=self._max_detections, verbose=False)

        detections: list[Detection] = []
        if prediction:
            result = prediction[0]
            names = result.names
            boxes = result.boxes
            if boxes is not None:
                for cls_id, conf, xyxy in zip(boxes.cls.tolist(), boxes.conf.tolist(), boxes.xyxy.tolist()):
                    detections.append(
                        Detection(
                            label=str(names.get(int(cls_id), int(cls_id))),
                            confidence=float(conf),
                            bbox=BoundingBox.from_xyxy(*xyxy),
                        )
                    )

        latency_ms = int((time.perf_counter() - start) * 1000)
        return DetectionResult(
            detections=detections,
            model_id=self.model_id,
            latency_ms=max(latency_ms, 1),
            image_size=(width, height),
        )
