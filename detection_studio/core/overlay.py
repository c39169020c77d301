from PIL import Image

from detection_studio.core.results import round_half_up
from detection_studio.core.surface import DrawingSurface
from detection_studio.core.types import Detection

LABEL_HEIGHT = 20
LABEL_PADDING = 10


def format_label(detection: Detection) -> str:
    return f'{detection.label} ({round_half_up(detection.confidence * 100)}%)'


class OverlayRenderer:
    def __init__(self, color: str = '#FF6B6B', text_color: str = 'white', line_width: int = 3) -> None:
        self.color = color
        self.text_color = text_color
        self.line_width = line_width

    def render(self, surface: DrawingSurface, frame: Image.Image, detections: list[Detection]) -> None:
        """Redraw ``frame`` and draw every detection over it, in list order.

        Overlapping boxes are not resolved; later detections paint over
        earlier ones.
        """
        surface.clear()
        surface.draw_image(frame)

        for detection in detections:
            box = detection.bbox
            label = format_label(detection)
            surface.stroke_rect(box.x, box.y, box.width, box.height, self.color, self.line_width)
            text_width = surface.measure_text(label)
            surface.fill_rect(box.x, box.y - LABEL_HEIGHT, text_width + LABEL_PADDING, LABEL_HEIGHT, self.color)
            surface.fill_text(label, box.x + 5, box.y - 5, self.text_color)
