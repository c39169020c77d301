from io import BytesIO

import pytest
from PIL import Image

from detection_studio.core.errors import ImageDecodeError, MissingImage, OversizeFile
from detection_studio.utils import image_io
from detection_studio.utils.image_io import StillImageSource, load_image_from_bytes

MAX_BYTES = 5 * 1024 * 1024


def _png_bytes(mode: str = 'RGB', size: tuple[int, int] = (40, 30)) -> bytes:
    buf = BytesIO()
    Image.new(mode, size).save(buf, format='PNG')
    return buf.getvalue()


def test_oversized_upload_rejected_before_decode(monkeypatch):
    def fail_open(*_args, **_kwargs):
        raise AssertionError('decode must not be attempted')

    monkeypatch.setattr(image_io.Image, 'open', fail_open)

    with pytest.raises(OversizeFile) as excinfo:
        load_image_from_bytes(b'\0' * (MAX_BYTES + 1), MAX_BYTES)

    assert excinfo.value.status_code == 413
    assert excinfo.value.details['size'] == MAX_BYTES + 1


def test_upload_at_the_limit_is_decoded():
    with pytest.raises(ImageDecodeError):
        load_image_from_bytes(b'\0' * MAX_BYTES, MAX_BYTES)


def test_empty_upload_is_missing():
    with pytest.raises(MissingImage):
        load_image_from_bytes(b'', MAX_BYTES)


def test_decodes_and_converts_to_rgb():
    image = load_image_from_bytes(_png_bytes(mode='RGBA'), MAX_BYTES)

    assert image.mode == 'RGB'
    assert image.size == (40, 30)


def test_still_source_returns_same_frame():
    image = Image.new('RGB', (8, 6))
    source = StillImageSource(image)

    assert source.size == (8, 6)
    assert source.current_frame() is source.current_frame()
