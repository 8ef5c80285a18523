"""
Application settings.

Values come from a YAML file (``config/settings.yaml`` by default) and can be
overridden one by one with ``SANAD_*`` environment variables.
"""
import os
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional

import yaml

from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "settings.yaml"


@dataclass
class Settings:
    """
    Runtime configuration for rendering, storage and the HTTP layer.

    Attributes:
        template_path: Fillable voucher template (PDF with an AcroForm)
        font_path: TrueType font used by the custom-font render strategy
            (None selects the bundled DejaVu Sans)
        fetch_timeout: Seconds allowed for each remote logo/stamp fetch
        storage_root: Directory used by the local document store
        data_file: Optional YAML/JSON seed for the in-memory repository
    """
    template_path: str = "assets/templates/voucher.pdf"
    font_path: Optional[str] = None
    fetch_timeout: float = 10.0
    storage_root: str = "storage/receipts"
    data_file: Optional[str] = None

    # Barcode
    barcode_prefix: str = "RCP"
    receipt_number_prefixes: List[str] = field(default_factory=lambda: ["REC", "PAY"])
    barcode_module_width: float = 1.2
    barcode_bar_height: float = 40.0
    barcode_top_offset: float = 95.0
    barcode_scale: float = 0.75
    public_verify_url: Optional[str] = None

    # Display
    display_timezone: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def accepted_prefixes(self) -> List[str]:
        """Prefixes accepted as public lookup keys."""
        return [self.barcode_prefix] + [p for p in self.receipt_number_prefixes if p != self.barcode_prefix]

    @property
    def log_level_value(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO


def _coerce(raw: str, current):
    """Converts an environment string to the type of the current value."""
    if isinstance(current, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(current, float):
        return float(raw)
    if isinstance(current, int):
        return int(raw)
    if isinstance(current, list):
        return [item.strip() for item in raw.split(",") if item.strip()]
    return raw


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Load settings from YAML, then apply ``SANAD_<FIELD>`` environment overrides.

    Args:
        path: YAML file to read. Defaults to ``SANAD_CONFIG`` or config/settings.yaml.
              A missing file is not an error; defaults are used.

    Returns:
        Settings
    """
    config_path = Path(path or os.getenv("SANAD_CONFIG") or DEFAULT_CONFIG_PATH)
    data = {}
    if config_path.exists():
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        logger.debug(f"Loaded settings from {config_path}")

    known = {f.name for f in fields(Settings)}
    unknown = set(data) - known
    if unknown:
        logger.warning("Ignoring unknown settings keys", keys=sorted(unknown))

    settings = Settings(**{k: v for k, v in data.items() if k in known})

    for f in fields(Settings):
        env_value = os.getenv(f"SANAD_{f.name.upper()}")
        if env_value is not None:
            setattr(settings, f.name, _coerce(env_value, getattr(settings, f.name)))

    return settings
