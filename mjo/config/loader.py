import logging
from pathlib import Path
from typing import Optional
import yaml
from mjo.config.models import AppConfig

logger = logging.getLogger(__name__)

def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Loads ``AppConfig`` from a YAML file. A missing file yields the defaults."""
    if config_path is None or not Path(config_path).exists():
        if config_path is not None:
            logger.warning(f"Config file not found at {config_path}, using defaults")
        return AppConfig()

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    return AppConfig(**data)
