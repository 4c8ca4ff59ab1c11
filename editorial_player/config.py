"""Configuration loading from environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from .utils import parse_float_env, parse_int_env, resolve_path


@dataclass(frozen=True)
class PlayerConfig:
    log_level: str
    file_log_level: str
    log_dir: str
    log_file: str
    source: str
    poster: str
    known_duration_seconds: Optional[float]
    controls_hide_delay_seconds: float = 3.0
    seek_step_seconds: float = 5.0
    volume_step: float = 0.1
    generator_base_url: str = "http://127.0.0.1:1234/v1"
    generator_api_key: str = ""
    generator_model: str = ""
    generator_timeout_seconds: int = 60
    app_env: str = "production"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


def load_config() -> PlayerConfig:
    base_dir = str(Path(__file__).resolve().parents[1])
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    file_log_level = os.getenv("FILE_LOG_LEVEL", "DEBUG").upper()
    log_dir = resolve_path(os.getenv("LOG_DIR", "logs"), base_dir)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(
        log_dir, f"player_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}.log"
    )
    source = os.getenv("PLAYER_SOURCE", "").strip()
    poster = os.getenv("PLAYER_POSTER", "").strip()
    known_duration_seconds: Optional[float] = parse_float_env(
        "PLAYER_KNOWN_DURATION", 0.0, min_value=0.0
    )
    if known_duration_seconds == 0.0:
        known_duration_seconds = None
    controls_hide_delay_seconds = parse_float_env(
        "CONTROLS_HIDE_DELAY_SECONDS",
        3.0,
        min_value=0.5,
        max_value=30.0,
    )
    seek_step_seconds = parse_float_env(
        "SEEK_STEP_SECONDS",
        5.0,
        min_value=1.0,
        max_value=60.0,
    )
    volume_step = parse_float_env("VOLUME_STEP", 0.1, min_value=0.01, max_value=0.5)
    generator_base_url = (
        os.getenv("GENERATOR_BASE_URL", "http://127.0.0.1:1234/v1").strip()
        or "http://127.0.0.1:1234/v1"
    )
    generator_api_key = os.getenv("GENERATOR_API_KEY", "").strip()
    generator_model = os.getenv("GENERATOR_MODEL", "").strip()
    generator_timeout_seconds = parse_int_env(
        "GENERATOR_TIMEOUT_SECONDS",
        60,
        min_value=0,
        max_value=600,
    )
    app_env = os.getenv("APP_ENV", "production").strip().lower() or "production"
    return PlayerConfig(
        log_level=log_level,
        file_log_level=file_log_level,
        log_dir=log_dir,
        log_file=log_file,
        source=source,
        poster=poster,
        known_duration_seconds=known_duration_seconds,
        controls_hide_delay_seconds=controls_hide_delay_seconds,
        seek_step_seconds=seek_step_seconds,
        volume_step=volume_step,
        generator_base_url=generator_base_url,
        generator_api_key=generator_api_key,
        generator_model=generator_model,
        generator_timeout_seconds=generator_timeout_seconds,
        app_env=app_env,
    )
