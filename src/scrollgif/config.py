"""
scrollgif Configuration
=======================

This module handles configuration loading for the scroll recorder.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    SCROLLGIF_VIEWPORT_WIDTH   -> recording.viewport_width
    SCROLLGIF_VIEWPORT_HEIGHT  -> recording.viewport_height
    SCROLLGIF_FRAME_RATE       -> recording.frame_rate
    SCROLLGIF_GIF_TIME         -> recording.gif_time
    SCROLLGIF_CLICK_SELECTOR   -> recording.click_selector
    SCROLLGIF_LOSSY            -> compression.lossy
    SCROLLGIF_LOSSLESS         -> compression.lossless
    SCROLLGIF_ULTRA_LOSSY      -> compression.ultra_lossy
    SCROLLGIF_GIFSICLE_BINARY  -> compression.gifsicle_binary
    SCROLLGIF_OUTPUT_DIR       -> output.directory
    SCROLLGIF_LOG_LEVEL        -> logging.level

Example:
    from scrollgif.config import settings

    print(settings.recording.frame_rate)
    print(settings.scroll.min_step, settings.scroll.max_step)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, model_validator


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class RecordingConfig(BaseModel):
    """Viewport, cadence and timing of one recording run."""

    viewport_width: int = Field(default=1366, ge=100, le=4000, description="Viewport width (px)")
    viewport_height: int = Field(default=768, ge=100, le=4000, description="Viewport height (px)")
    frame_rate: int = Field(
        default=10,
        ge=1,
        le=60,
        description="Frames per second of the produced GIF",
    )
    wait_to_load_page: int = Field(
        default=0,
        ge=0,
        description="Delay (ms) after navigation before the first frame",
    )
    recording_time_before_action: int = Field(
        default=1000,
        ge=0,
        description="Hold duration (ms) captured before scrolling starts",
    )
    scroll_down: bool = Field(default=True, description="Run the scroll choreography")
    scroll_percentage: Optional[float] = Field(
        default=None,
        gt=0,
        le=100,
        description="Advisory step size as a percentage of the viewport height",
    )
    click_selector: Optional[str] = Field(
        default=None,
        description="CSS selector clicked after scrolling",
    )
    recording_time_after_click: int = Field(
        default=0,
        ge=0,
        description="Hold duration (ms) captured after the click",
    )
    gif_time: int = Field(
        default=20000,
        gt=0,
        description="Total elapsed-time budget of the GIF (ms)",
    )


class ScrollConfig(BaseModel):
    """Scroll rhythm and step bounds."""

    active_scrolls: int = Field(default=10, ge=1, description="Scrolling iterations per cycle")
    paused_scrolls: int = Field(default=7, ge=0, description="Paused iterations per cycle")
    min_step: int = Field(default=27, ge=1, description="Minimum active scroll step (px)")
    max_step: int = Field(default=44, ge=1, description="Maximum active scroll step (px)")
    settle_min_ms: int = Field(default=50, ge=0, description="Minimum settle delay (ms)")
    settle_max_ms: int = Field(default=150, ge=0, description="Maximum settle delay (ms)")
    ease_strength: float = Field(
        default=0.5,
        ge=0,
        le=1.0,
        description="How strongly steps shrink near the page bottom (0 = off)",
    )
    track_page_growth: bool = Field(
        default=True,
        description="Re-read document height after every scroll",
    )
    seed: Optional[int] = Field(default=None, description="Seed for step/delay sampling")

    @model_validator(mode="after")
    def _check_ranges(self) -> "ScrollConfig":
        if self.min_step > self.max_step:
            raise ValueError("min_step must be <= max_step")
        if self.settle_min_ms > self.settle_max_ms:
            raise ValueError("settle_min_ms must be <= settle_max_ms")
        return self


class DecoderConfig(BaseModel):
    """Frame capture and decode budgets."""

    decode_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Maximum time to decode one screenshot",
    )
    capture_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Maximum time to wait for one screenshot",
    )


class CompressionConfig(BaseModel):
    """Post-compression profiles and retry policy."""

    lossy: bool = Field(default=False, description="Produce a lossy variant")
    lossless: bool = Field(default=False, description="Produce a lossless variant")
    ultra_lossy: bool = Field(default=False, description="Produce an ultra-lossy variant")
    lossy_level: int = Field(default=80, ge=1, le=200, description="gifsicle --lossy for LOSSY")
    ultra_lossy_level: int = Field(
        default=130,
        ge=1,
        le=200,
        description="gifsicle --lossy for ULTRA_LOSSY",
    )
    optimization_level: int = Field(default=3, ge=1, le=3, description="gifsicle -O level")
    max_attempts: int = Field(default=3, ge=1, description="Attempts per profile")
    backoff_base_seconds: float = Field(
        default=1.0,
        ge=0,
        description="First retry delay; doubles on each retry",
    )
    gifsicle_binary: str = Field(default="gifsicle", description="gifsicle executable")
    timeout_seconds: float = Field(default=120.0, gt=0, description="Per-call gifsicle timeout")


class OutputConfig(BaseModel):
    """Local artifact output."""

    directory: str = Field(default="./output", description="Directory for saved GIFs")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for scrollgif.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    recording: RecordingConfig = Field(default_factory=RecordingConfig)
    scroll: ScrollConfig = Field(default_factory=ScrollConfig)
    decoder: DecoderConfig = Field(default_factory=DecoderConfig)
    compression: CompressionConfig = Field(default_factory=CompressionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Recording settings
    if env_width := os.environ.get("SCROLLGIF_VIEWPORT_WIDTH"):
        config_data.setdefault("recording", {})["viewport_width"] = int(env_width)
    if env_height := os.environ.get("SCROLLGIF_VIEWPORT_HEIGHT"):
        config_data.setdefault("recording", {})["viewport_height"] = int(env_height)
    if env_fps := os.environ.get("SCROLLGIF_FRAME_RATE"):
        config_data.setdefault("recording", {})["frame_rate"] = int(env_fps)
    if env_gif_time := os.environ.get("SCROLLGIF_GIF_TIME"):
        config_data.setdefault("recording", {})["gif_time"] = int(env_gif_time)
    if env_selector := os.environ.get("SCROLLGIF_CLICK_SELECTOR"):
        config_data.setdefault("recording", {})["click_selector"] = env_selector

    # Compression flags
    if env_lossy := os.environ.get("SCROLLGIF_LOSSY"):
        config_data.setdefault("compression", {})["lossy"] = _env_flag(env_lossy)
    if env_lossless := os.environ.get("SCROLLGIF_LOSSLESS"):
        config_data.setdefault("compression", {})["lossless"] = _env_flag(env_lossless)
    if env_ultra := os.environ.get("SCROLLGIF_ULTRA_LOSSY"):
        config_data.setdefault("compression", {})["ultra_lossy"] = _env_flag(env_ultra)
    if env_binary := os.environ.get("SCROLLGIF_GIFSICLE_BINARY"):
        config_data.setdefault("compression", {})["gifsicle_binary"] = env_binary

    # Output
    if env_dir := os.environ.get("SCROLLGIF_OUTPUT_DIR"):
        config_data.setdefault("output", {})["directory"] = env_dir

    # Logging settings
    if env_log := os.environ.get("SCROLLGIF_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
