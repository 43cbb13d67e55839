import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".learningmate"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

DEFAULT_STUDY = {
    "mode": "problem",
    "order_mode": "random",
    "repeat_mode": False,
    "question_type": "multiple",
    "card_front": "explanation",
}

def load_config() -> Dict[str, Any]:
    """Load config from ~/.learningmate/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()  # .env may carry LEARNINGMATE_* overrides
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    storage_cfg = config.get("storage", {})
    db_path = os.getenv("LEARNINGMATE_DB_PATH", storage_cfg.get("db_path") or "")
    config["storage"] = {
        "db_path": str(Path(db_path).expanduser()) if db_path else str(CONFIG_DIR / "learningmate.db"),
    }

    study_cfg = config.get("study", {})
    study = {key: study_cfg.get(key, value) for key, value in DEFAULT_STUDY.items()}
    study["order_mode"] = os.getenv("LEARNINGMATE_ORDER_MODE", study["order_mode"])
    config["study"] = study

    import_cfg = config.get("import", {})
    config["import"] = {
        "has_header_row": bool(import_cfg.get("has_header_row", True)),
    }

    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("LEARNINGMATE_LOG_LEVEL", logging_cfg.get("level", "INFO")).upper(),
    }
    return config

def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('study', 'order_mode')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value
