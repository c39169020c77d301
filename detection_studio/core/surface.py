import base64
import logging
from io import BytesIO
from typing import Protocol

from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

_TRANSPARENT = (0, 0, 0, 0)


class FrameSource(Protocol):
    @property
    def size(self) -> tuple[int, int]: ...

    def current_frame(self) -> Image.Image: ...


def load_font(path: str | None, size: int):
    if path:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            logger.debug('Font not found path=%s, using the bundled default', path)
    return ImageFont.load_default(size=size)


class DrawingSurface:
    """The shared canvas every capture cycle draws into.

    Coordinates are source pixels. The surface is resized to the sampled
    frame, so boxes reported by the detector land where they belong.
    """

    def __init__(self, width: int = 1, height: int = 1, font_path: str | None = None, font_size: int = 14) -> None:
        self._font = load_font(font_path, font_size)
        self._font_size = font_size
        self._image = Image.new('RGBA', (max(1, width), max(1, height)), _TRANSPARENT)
        self._draw = ImageDraw.Draw(self._image)

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    def resize(self, width: int, height: int) -> None:
        # like a canvas, resizing always discards the current pixels
        self._image = Image.new('RGBA', (max(1, int(width)), max(1, int(height))), _TRANSPARENT)
        self._draw = ImageDraw.Draw(self._image)

    def clear(self) -> None:
        self._draw.rectangle((0, 0, self.width, self.height), fill=_TRANSPARENT)

    def draw_image(self, image: Image.Image) -> None:
        frame = image.convert('RGBA')
        if frame.size != self.size:
            frame = frame.resize(self.size)
        self._image.paste(frame, (0, 0))

    def stroke_rect(self, x: float, y: float, width: float, height: float, color: str, line_width: int = 1) -> None:
        self._draw.rectangle((x, y, x + width, y + height), outline=color, width=line_width)

    def fill_rect(self, x: float, y: float, width: float, height: float, color: str) -> None:
        self._draw.rectangle((x, y, x + width, y + height), fill=color)

    def measure_text(self, text: str) -> float:
        return float(self._draw.textlength(text, font=self._font))

    def fill_text(self, text: str, x: float, y: float, color: str) -> None:
        # (x, y) is the left end of the text baseline
        if isinstance(self._font, ImageFont.FreeTypeFont):
            self._draw.text((x, y), text, fill=color, font=self._font, anchor='ls')
        else:
            self._draw.text((x, y - self._font_size), text, fill=color, font=self._font)

    def snapshot(self) -> Image.Image:
        return self._image.convert('RGB')


def encode_jpeg(image: Image.Image, quality: int = 85) -> bytes:
    buf = BytesIO()
    image.convert('RGB').save(buf, format='JPEG', quality=quality)
    return buf.getvalue()


def encode_jpeg_b64(image: Image.Image, quality: int = 85) -> str:
    return base64.b64encode(encode_jpeg(image, quality)).decode('ascii')


class FrameSampler:
    def sample(self, source: FrameSource, surface: DrawingSurface) -> Image.Image:
        """Copy the source's current pixels onto the surface at native size."""
        frame = source.current_frame()
        width, height = frame.size
        surface.resize(width, height)
        surface.draw_image(frame)
        return surface.snapshot()
