from io import BytesIO

from PIL import Image, ImageOps

from detection_studio.core.errors import ImageDecodeError, MissingImage, OversizeFile


def check_image_size(image_bytes: bytes, max_bytes: int) -> None:
    if not image_bytes:
        raise MissingImage('Missing image upload (field name: image).')
    if len(image_bytes) > max_bytes:
        raise OversizeFile(f'Image too large. Max {max_bytes} bytes.', details={'size': len(image_bytes), 'max_bytes': max_bytes})


def load_image_from_bytes(image_bytes: bytes, max_bytes: int) -> Image.Image:
    check_image_size(image_bytes, max_bytes)

    try:
        image = Image.open(BytesIO(image_bytes))
        image.load()
        image = ImageOps.exif_transpose(image)
    except Exception as exc:
        raise ImageDecodeError('Could not decode image.') from exc

    if image.mode != 'RGB':
        image = image.convert('RGB')
    return image


class StillImageSource:
    """A decoded upload or captured frame, served as a frame source."""

    def __init__(self, image: Image.Image) -> None:
        self._image = image

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    def current_frame(self) -> Image.Image:
        return self._image
