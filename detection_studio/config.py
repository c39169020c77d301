from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore', protected_namespaces=('settings_',))

    provider: str = 'dummy'
    model_id: str = 'yolov8n.pt'
    max_remote_base_url: str = 'http://127.0.0.1:5000'
    max_remote_predict_path: str = '/model/predict'
    max_remote_timeout_ms: int = 12000
    conf_threshold: float = 0.5
    max_detections: int = 20
    max_image_bytes: int = 5 * 1024 * 1024
    camera_facing_mode: str = 'environment'
    camera_facing_devices: str = 'environment:0,user:1'
    camera_width: int = 1280
    camera_height: int = 720
    live_frame_interval_ms: int = 16
    live_retry_delay_ms: int = 100
    overlay_color: str = '#FF6B6B'
    overlay_text_color: str = 'white'
    overlay_line_width: int = 3
    overlay_font_size: int = 14
    overlay_font_path: str = 'arial.ttf'
    jpeg_quality: int = 85
    host: str = '127.0.0.1'
    port: int = 8000
    log_level: str = 'INFO'
    version: str = '1.0.0'


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
