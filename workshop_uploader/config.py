"""Configuration loading: JSON file plus environment overrides."""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError
from .models import ItemType, WorkshopConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "workshop.config.json"
CONFIG_ENV_VAR = "WORKSHOP_CONFIG"
CONTENT_ROOT_ENV_VAR = "WORKSHOP_CONTENT_ROOT"
APP_ID_ENV_VAR = "WORKSHOP_APP_ID"


def _read_json(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"could not read config file {path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"config file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")
    return data


def _parse_app_id(value: Any, source: str) -> int:
    try:
        app_id = int(str(value).strip())
    except ValueError as e:
        raise ConfigError(f"invalid app id in {source}: {value!r}") from e
    if app_id < 0:
        raise ConfigError(f"invalid app id in {source}: {value!r}")
    return app_id


def load_config(path: Optional[Path] = None, content_root: Optional[Path] = None) -> WorkshopConfig:
    """
    Build a WorkshopConfig.

    Precedence (highest first): explicit arguments, environment
    (WORKSHOP_CONTENT_ROOT, WORKSHOP_APP_ID), config file, defaults.
    The config file is `path`, else $WORKSHOP_CONFIG, else
    ./workshop.config.json; a missing default file means defaults.
    """
    explicit = path or os.getenv(CONFIG_ENV_VAR)
    config_path = Path(explicit) if explicit else Path(DEFAULT_CONFIG_FILE)

    data: Dict[str, Any] = {}
    if config_path.is_file():
        data = _read_json(config_path)
        logger.debug("Loaded config from %s", config_path)
    elif explicit:
        raise ConfigError(f"config file not found: {config_path}")

    defaults = WorkshopConfig()

    root_value = content_root or os.getenv(CONTENT_ROOT_ENV_VAR) or data.get("content_root")
    root = Path(root_value).expanduser() if root_value else defaults.content_root

    app_id = defaults.app_id
    if os.getenv(APP_ID_ENV_VAR):
        app_id = _parse_app_id(os.environ[APP_ID_ENV_VAR], APP_ID_ENV_VAR)
    elif "app_id" in data:
        app_id = _parse_app_id(data["app_id"], str(config_path))

    valid_tags = data.get("valid_tags", [])
    if not isinstance(valid_tags, list):
        raise ConfigError("'valid_tags' must be a list of strings")

    try:
        return WorkshopConfig(
            content_root=root,
            app_id=app_id,
            item_type=ItemType(int(data.get("item_type", defaults.item_type))),
            language=str(data.get("language", defaults.language)),
            validate_tags=bool(data.get("validate_tags", defaults.validate_tags)),
            valid_tags=frozenset(str(tag) for tag in valid_tags),
            poll_interval=float(data.get("poll_interval", defaults.poll_interval)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid value in {config_path}: {e}") from e
