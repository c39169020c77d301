import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path

import cv2
from PIL import Image

from detection_studio.core.errors import CameraPermissionDenied, DeviceUnavailable
from detection_studio.core.types import CameraConstraints

logger = logging.getLogger(__name__)


def parse_facing_devices(raw: str | None) -> dict[str, int]:
    """Parse ``'environment:0,user:1'`` into a facing-mode to device-index map."""
    mapping: dict[str, int] = {}
    if not raw:
        return mapping
    for token in raw.split(','):
        name, _, index = token.partition(':')
        name = name.strip().lower()
        if not name or not index.strip():
            continue
        try:
            mapping[name] = int(index.strip())
        except ValueError:
            logger.warning('Ignoring camera facing entry=%r', token)
    return mapping


class VideoStream(ABC):
    @property
    @abstractmethod
    def size(self) -> tuple[int, int]:
        raise NotImplementedError

    @abstractmethod
    def current_frame(self) -> Image.Image:
        raise NotImplementedError

    @abstractmethod
    def stop(self) -> None:
        raise NotImplementedError

    @property
    @abstractmethod
    def active(self) -> bool:
        raise NotImplementedError


class Camera(ABC):
    @abstractmethod
    def request_stream(self, constraints: CameraConstraints) -> VideoStream:
        raise NotImplementedError


class OpenCVVideoStream(VideoStream):
    def __init__(self, capture, device_index: int, facing_mode: str) -> None:
        self._capture = capture
        self._lock = threading.Lock()
        self.device_index = device_index
        self.facing_mode = facing_mode
        width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
        height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)
        self._size = (width, height)

    @property
    def size(self) -> tuple[int, int]:
        return self._size

    @property
    def active(self) -> bool:
        return self._capture is not None

    def current_frame(self) -> Image.Image:
        with self._lock:
            if self._capture is None:
                raise DeviceUnavailable('Camera stream is stopped.')
            ok, frame = self._capture.read()
        if not ok or frame is None:
            raise DeviceUnavailable(f'Could not read a frame from camera device={self.device_index}.')
        image = Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
        self._size = image.size
        return image

    def stop(self) -> None:
        with self._lock:
            capture, self._capture = self._capture, None
        if capture is not None:
            capture.release()
            logger.info('Camera released device=%s', self.device_index)


class OpenCVCamera(Camera):
    def __init__(self, facing_devices: dict[str, int] | None = None, device_root: str = '/dev') -> None:
        self._facing_devices = facing_devices or {}
        self._device_root = Path(device_root)

    def _check_permission(self, index: int) -> None:
        node = self._device_root / f'video{index}'
        if node.exists() and not os.access(node, os.R_OK | os.W_OK):
            raise CameraPermissionDenied(f'Permission denied for camera device {node.as_posix()}.')

    def _open(self, index: int, constraints: CameraConstraints):
        capture = cv2.VideoCapture(index)
        if not capture.isOpened():
            capture.release()
            return None
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.height)
        return capture

    def request_stream(self, constraints: CameraConstraints) -> VideoStream:
        preferred = self._facing_devices.get(constraints.facing_mode.strip().lower(), 0)
        candidates = [preferred] if preferred == 0 else [preferred, 0]

        for index in candidates:
            self._check_permission(index)
            capture = self._open(index, constraints)
            if capture is None:
                logger.warning('Camera device unavailable device=%s facing_mode=%s', index, constraints.facing_mode)
                continue
            stream = OpenCVVideoStream(capture, device_index=index, facing_mode=constraints.facing_mode)
            logger.info(
                'Camera opened device=%s facing_mode=%s requested=%sx%s actual=%sx%s',
                index,
                constraints.facing_mode,
                constraints.width,
                constraints.height,
                *stream.size,
            )
            return stream

        raise DeviceUnavailable('No camera device available.', details={'tried': candidates})
