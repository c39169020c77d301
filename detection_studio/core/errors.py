class StudioError(Exception):
    code = 'STUDIO_ERROR'
    status_code = 400

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None, details: dict | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}


class ModelLoadError(StudioError):
    code = 'MODEL_LOAD_FAILED'
    status_code = 503


class ModelNotReady(StudioError):
    code = 'MODEL_NOT_READY'
    status_code = 503


class CameraPermissionDenied(StudioError):
    code = 'CAMERA_PERMISSION_DENIED'
    status_code = 403


class DeviceUnavailable(StudioError):
    code = 'CAMERA_UNAVAILABLE'
    status_code = 503


class CameraNotActive(StudioError):
    code = 'CAMERA_NOT_ACTIVE'
    status_code = 409


class MissingImage(StudioError):
    code = 'MISSING_IMAGE'
    status_code = 400


class OversizeFile(StudioError):
    code = 'IMAGE_TOO_LARGE'
    status_code = 413


class ImageDecodeError(StudioError):
    code = 'IMAGE_DECODE_FAILED'
    status_code = 400


class DetectionError(StudioError):
    code = 'DETECTION_FAILED'
    status_code = 500


class NoResult(StudioError):
    code = 'NO_RESULT'
    status_code = 404


class CycleSuperseded(StudioError):
    code = 'CYCLE_SUPERSEDED'
    status_code = 409
