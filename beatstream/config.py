"""Application configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings with env var overrides."""

    # Analysis
    window_size: int = 1024
    band_count: int = 8
    energy_threshold_factor: float = 1.4
    energy_decay: float = 0.9

    # Live streaming
    sample_rate: int = 44100  # rate assumed for raw PCM pushed over the WebSocket

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    max_upload_mb: int = 50

    log_level: str = "INFO"

    model_config = {"env_prefix": "BEATSTREAM_"}


settings = Settings()
