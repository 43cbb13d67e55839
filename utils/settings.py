from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic.alias_generators import to_camel

from config import load_config
from db.store import Stores
from models import Settings

logger = logging.getLogger(__name__)

SETTINGS_KEY = "userSettings"


def default_settings(config: Optional[Dict[str, Any]] = None) -> Settings:
    """Settings seeded from the [study] and [import] config sections."""
    if config is None:
        config = load_config()
    study = config.get("study", {})
    return Settings(
        mode=study.get("mode", "problem"),
        order_mode=study.get("order_mode", "random"),
        repeat_mode=study.get("repeat_mode", False),
        question_type=study.get("question_type", "multiple"),
        card_front=study.get("card_front", "explanation"),
        has_header_row=config.get("import", {}).get("has_header_row", True),
    )


def get_settings(stores: Stores, config: Optional[Dict[str, Any]] = None) -> Settings:
    settings = stores.settings.get(SETTINGS_KEY)
    return settings or default_settings(config)


def save_settings(stores: Stores, settings: Settings) -> Settings:
    stores.settings.set(SETTINGS_KEY, settings)
    return settings


def _field_name(key: str) -> str:
    if key in Settings.model_fields:
        return key
    for name in Settings.model_fields:
        if to_camel(name) == key:
            return name
    raise KeyError(f"Unknown setting: {key}")


def update_setting(stores: Stores, key: str, value: Any, config: Optional[Dict[str, Any]] = None) -> Settings:
    """Change one setting (snake_case or camelCase key) and persist the whole record."""
    name = _field_name(key)
    current = get_settings(stores, config)
    data = current.model_dump()
    data[name] = value
    updated = Settings.model_validate(data)
    save_settings(stores, updated)
    logger.debug("Updated setting %s", name)
    return updated
