"""Desktop entrypoint and facade for the editorial player."""

from __future__ import annotations

import os
import platform
import sys
from typing import Any, Mapping, Optional

from editorial_player.config import load_config
from editorial_player.integrations.animation_generator import (
    GeneratorSettings,
    handle_animation_request,
)
from editorial_player.logging_config import setup_logging
from editorial_player.ui.desktop_types import PlayerApp
from editorial_player.ui.tkinter_app import create_tkinter_app

CONFIG = load_config()
logger = setup_logging(CONFIG)


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


SKIP_APP_INIT = _env_flag("PLAYER_SKIP_APP_INIT")

logger.info("Starting app")
logger.info("Log file: %s", CONFIG.log_file)
logger.debug(
    "Player config: LOG_LEVEL=%s FILE_LOG_LEVEL=%s LOG_DIR=%s PLAYER_SOURCE=%s "
    "PLAYER_POSTER=%s PLAYER_KNOWN_DURATION=%s CONTROLS_HIDE_DELAY_SECONDS=%s "
    "SEEK_STEP_SECONDS=%s VOLUME_STEP=%s APP_ENV=%s",
    CONFIG.log_level,
    CONFIG.file_log_level,
    CONFIG.log_dir,
    CONFIG.source or "<none>",
    CONFIG.poster or "<none>",
    CONFIG.known_duration_seconds,
    CONFIG.controls_hide_delay_seconds,
    CONFIG.seek_step_seconds,
    CONFIG.volume_step,
    CONFIG.app_env,
)
logger.debug(
    "Generator config: GENERATOR_BASE_URL=%s GENERATOR_MODEL=%s GENERATOR_TIMEOUT_SECONDS=%s",
    CONFIG.generator_base_url,
    CONFIG.generator_model or "<unset>",
    CONFIG.generator_timeout_seconds,
)
if CONFIG.generator_api_key:
    logger.debug("GENERATOR_API_KEY is set")
else:
    logger.debug("GENERATOR_API_KEY is not set")
logger.debug("Python version: %s", sys.version.replace("\n", " "))
logger.debug("Platform: %s", platform.platform())
try:
    import vlc

    logger.debug("python-vlc version: %s", getattr(vlc, "__version__", "unknown"))
except Exception:  # pragma: no cover - depends on the local libVLC install
    logger.warning("python-vlc could not be imported; video playback is unavailable")

app: Optional[PlayerApp] = None


def _current_desktop_app() -> Optional[PlayerApp]:
    global app
    if app is None and not SKIP_APP_INIT:
        app = create_tkinter_app(config=CONFIG, logger=logger)
    return app


def generate_algorithm_animation(
    payload: Mapping[str, Any] | None,
) -> tuple[int, dict[str, Any]]:
    """Generate an animation plan for a problem; returns ``(status, body)``."""
    return handle_animation_request(payload, GeneratorSettings.from_config(CONFIG), logger)


def launch() -> None:
    if SKIP_APP_INIT:
        logger.info("PLAYER_SKIP_APP_INIT enabled; launch skipped")
        return
    desktop_app = _current_desktop_app()
    if desktop_app is None:
        raise RuntimeError("Desktop app is not initialized.")
    logger.info("Launching desktop app")
    desktop_app.launch()


if __name__ == "__main__":
    launch()
