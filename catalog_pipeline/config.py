# catalog_pipeline/config.py

import logging
from dataclasses import dataclass, replace, fields
from pathlib import Path
from typing import Any, Dict, Optional

import json5

from .errors import ConfigFault

logger = logging.getLogger(__name__)

# --- Core Settings ---
# The listing page that reveals more products every time its "load more" button is clicked.
TARGET_URL = "https://www.scrapingcourse.com/button-click"
# How many of the highest-priced products get their detail page fetched.
TOP_N = 5

# --- Reveal Loop Settings ---
# The maximum number of times the "load more" button is clicked.
REVEAL_ATTEMPTS = 4
# How long (in milliseconds) to wait after each click for the new cards to render.
SETTLE_DELAY_MS = 2000
# "fixed" always waits SETTLE_DELAY_MS. "poll" checks the card count every
# POLL_INTERVAL_MS and stops waiting as soon as it grows (SETTLE_DELAY_MS becomes the upper bound).
SETTLE_MODE = "fixed"
POLL_INTERVAL_MS = 250

# --- Selectors ---
# CSS selectors for the listing page. The button selector must be stable across clicks.
LISTING_SELECTORS = {
    "item": ".product-item",
    "name": ".product-name",
    "price": ".product-price",
    "image": ".product-image",
    "link": "a",
}
REVEAL_SELECTOR = "#load-more-btn"
# CSS selectors for an individual product page (WooCommerce markup).
DETAIL_SELECTORS = {
    "title": ".product_title",
    "price": ".price",
    "description": ".woocommerce-product-details__short-description",
    "sku": ".sku_wrapper .sku",
    "category": ".posted_in",
}

# --- File Path Settings ---
# This line gets the path to the directory where this config.py file is located (the package).
PACKAGE_PATH = Path(__file__).parent
# Scraped rows and their manifest are saved in the 'data' directory next to the package.
DATA_PATH = PACKAGE_PATH.parent / "data"
LISTINGS_FILENAME = "products.csv"

# --- Browser/Network Settings ---
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
VIEWPORT = {"width": 1920, "height": 1080}
HEADLESS = True
# The maximum time (in milliseconds) to wait for a page to reach network idle.
NAVIGATION_TIMEOUT_MS = 60000 # 60 seconds
# The maximum time (in milliseconds) a single document query may take.
QUERY_TIMEOUT_MS = 30000

SETTLE_MODES = ("fixed", "poll")


@dataclass(frozen=True)
class PipelineSettings:
    """Runtime options for one pipeline invocation. Defaults come from the constants above."""
    target_url: str = TARGET_URL
    top_n: int = TOP_N
    reveal_attempts: int = REVEAL_ATTEMPTS
    settle_delay_ms: int = SETTLE_DELAY_MS
    settle_mode: str = SETTLE_MODE
    poll_interval_ms: int = POLL_INTERVAL_MS
    navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS
    query_timeout_ms: Optional[int] = QUERY_TIMEOUT_MS
    headless: bool = HEADLESS
    data_path: Path = DATA_PATH

    def __post_init__(self):
        for name in ("top_n", "reveal_attempts", "settle_delay_ms"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigFault(f"{name} must be a non-negative integer, got {value!r}")
        for name in ("poll_interval_ms", "navigation_timeout_ms"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigFault(f"{name} must be a positive integer, got {value!r}")
        timeout = self.query_timeout_ms
        if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0):
            raise ConfigFault(f"query_timeout_ms must be a positive integer or null, got {timeout!r}")
        if not isinstance(self.headless, bool):
            raise ConfigFault(f"headless must be true or false, got {self.headless!r}")
        if not isinstance(self.target_url, str) or not self.target_url.startswith(("http://", "https://")):
            raise ConfigFault(f"target_url must be an http(s) URL, got {self.target_url!r}")
        if self.settle_mode not in SETTLE_MODES:
            raise ConfigFault(f"settle_mode must be one of {SETTLE_MODES}, got {self.settle_mode!r}")
        if not isinstance(self.data_path, Path):
            object.__setattr__(self, "data_path", Path(self.data_path))


# Option names as they appear in a config file, mapped to PipelineSettings fields.
CONFIG_KEYS = {
    "targetUrl": "target_url",
    "topN": "top_n",
    "revealAttempts": "reveal_attempts",
    "settleDelayMs": "settle_delay_ms",
    "settleMode": "settle_mode",
    "pollIntervalMs": "poll_interval_ms",
    "navigationTimeoutMs": "navigation_timeout_ms",
    "queryTimeoutMs": "query_timeout_ms",
    "headless": "headless",
    "dataPath": "data_path",
}


def settings_from_mapping(options: Dict[str, Any], base: Optional[PipelineSettings] = None) -> PipelineSettings:
    """Applies camelCase options (as used in config files) on top of base settings."""
    unknown = sorted(set(options) - set(CONFIG_KEYS))
    if unknown:
        raise ConfigFault(f"Unknown configuration option(s): {', '.join(unknown)}. Recognized: {', '.join(CONFIG_KEYS)}")
    changes = {CONFIG_KEYS[key]: value for key, value in options.items()}
    return replace(base or PipelineSettings(), **changes)


def load_settings(config_path: Optional[Path] = None, **overrides: Any) -> PipelineSettings:
    """
    Builds the settings for a run. Later sources win:
    module constants, then the JSON5 file at config_path, then keyword overrides
    (PipelineSettings field names; None values are ignored so unset CLI flags fall through).
    """
    settings = PipelineSettings()

    if config_path is not None:
        config_path = Path(config_path)
        try:
            with config_path.open("r", encoding="utf-8") as f:
                options = json5.load(f)
        except FileNotFoundError:
            raise ConfigFault(f"Config file not found: {config_path}") from None
        except ValueError as e:
            raise ConfigFault(f"Config file {config_path} is not valid JSON5: {e}") from e
        if not isinstance(options, dict):
            raise ConfigFault(f"Config file {config_path} must contain an object at the top level")
        settings = settings_from_mapping(options, settings)
        logger.info("Loaded configuration from %s", config_path)

    known_fields = {f.name for f in fields(PipelineSettings)}
    changes = {}
    for name, value in overrides.items():
        if name not in known_fields:
            raise ConfigFault(f"Unknown setting: {name}")
        if value is not None:
            changes[name] = value
    if changes:
        settings = replace(settings, **changes)

    logger.debug("Effective settings: %s", settings)
    return settings
