"""
Configuration loader for the Scanner module.

Loads and validates configuration from config.yaml file.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict

import yaml

from src.scanner.types import (
    BinarizerConfig,
    ClassifierConfig,
    MatcherConfig,
    PresentationConfig,
    RectifierConfig,
    ScannerConfig,
    SchedulerConfig,
)

logger = logging.getLogger(__name__)

# Default configuration path (relative to this file)
DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

VALID_INTERPOLATIONS = ["linear", "cubic", "nearest"]

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> ScannerConfig:
    """
    Load scanner configuration from YAML file.

    Args:
        config_path: Path to the configuration YAML file.

    Returns:
        Validated ScannerConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config is invalid or missing required fields.

    Example:
        >>> config = load_config()
        >>> print(config.binarizer.adaptive_block_size)
        11
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading scanner config from {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw_config = yaml.safe_load(f)

    try:
        config = _parse_config(raw_config)
        _validate_config(config)
        logger.info("Successfully loaded scanner configuration")
        return config
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid configuration file: {e}") from e


def _parse_config(raw: Dict[str, Any]) -> ScannerConfig:
    """Parse raw dictionary into structured config objects."""
    aspect_min, aspect_max = raw["classifier"]["aspect_ratio_range"]

    return ScannerConfig(
        binarizer=BinarizerConfig(
            blur_kernel_size=int(raw["binarizer"]["blur_kernel_size"]),
            adaptive_block_size=int(raw["binarizer"]["adaptive_block_size"]),
            adaptive_offset=float(raw["binarizer"]["adaptive_offset"]),
        ),
        classifier=ClassifierConfig(
            approx_epsilon_ratio=float(raw["classifier"]["approx_epsilon_ratio"]),
            aspect_ratio_min=float(aspect_min),
            aspect_ratio_max=float(aspect_max),
        ),
        matcher=MatcherConfig(
            right_angle_tolerance=float(raw["matcher"]["right_angle_tolerance"]),
            isosceles_tolerance=float(raw["matcher"]["isosceles_tolerance"]),
            min_candidates=int(raw["matcher"]["min_candidates"]),
        ),
        rectifier=RectifierConfig(
            min_side_px=float(raw["rectifier"]["min_side_px"]),
            border_value=int(raw["rectifier"]["border_value"]),
            interpolation=str(raw["rectifier"]["interpolation"]),
        ),
        scheduler=SchedulerConfig(
            cooldown_seconds=float(raw["scheduler"]["cooldown_seconds"]),
            frame_rate_hint=float(raw["scheduler"]["frame_rate_hint"]),
        ),
        presentation=PresentationConfig(
            direct_outline_color=str(raw["presentation"]["direct_outline_color"]),
            rectified_outline_color=str(
                raw["presentation"]["rectified_outline_color"]
            ),
        ),
    )


def _validate_config(config: ScannerConfig) -> None:
    """
    Validate configuration values for logical consistency.

    Raises:
        ValueError: If any configuration value is invalid.
    """
    # Binarizer: OpenCV requires odd kernel and window sizes
    kernel = config.binarizer.blur_kernel_size
    if kernel < 1 or kernel % 2 == 0:
        raise ValueError(
            f"blur_kernel_size must be a positive odd integer, got {kernel}"
        )

    block = config.binarizer.adaptive_block_size
    if block < 3 or block % 2 == 0:
        raise ValueError(
            f"adaptive_block_size must be an odd integer >= 3, got {block}"
        )

    # Classifier
    if not 0 < config.classifier.approx_epsilon_ratio < 1:
        raise ValueError("approx_epsilon_ratio must be in (0, 1)")

    if config.classifier.aspect_ratio_min <= 0:
        raise ValueError("aspect_ratio_range min must be positive")

    if config.classifier.aspect_ratio_min >= config.classifier.aspect_ratio_max:
        raise ValueError(
            f"aspect_ratio_range min ({config.classifier.aspect_ratio_min}) must be "
            f"less than max ({config.classifier.aspect_ratio_max})"
        )

    # Matcher
    if config.matcher.right_angle_tolerance <= 0:
        raise ValueError("right_angle_tolerance must be positive")

    if config.matcher.isosceles_tolerance <= 0:
        raise ValueError("isosceles_tolerance must be positive")

    if config.matcher.min_candidates < 3:
        raise ValueError("min_candidates must be at least 3")

    # Rectifier
    if config.rectifier.min_side_px < 1:
        raise ValueError("min_side_px must be at least 1")

    if not 0 <= config.rectifier.border_value <= 255:
        raise ValueError("border_value must be in [0, 255]")

    if config.rectifier.interpolation not in VALID_INTERPOLATIONS:
        raise ValueError(
            f"Invalid interpolation: {config.rectifier.interpolation}. "
            f"Must be one of {VALID_INTERPOLATIONS}"
        )

    # Scheduler
    if config.scheduler.cooldown_seconds < 0:
        raise ValueError("cooldown_seconds cannot be negative")

    if config.scheduler.frame_rate_hint <= 0:
        raise ValueError("frame_rate_hint must be positive")

    # Presentation
    for name in ("direct_outline_color", "rectified_outline_color"):
        color = getattr(config.presentation, name)
        if not _HEX_COLOR.match(color):
            raise ValueError(f"{name} must be a #RRGGBB color, got {color!r}")

    logger.debug("Configuration validation passed")
