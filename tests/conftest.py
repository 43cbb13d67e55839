from pathlib import Path

import pytest

import config
from db import database
from models import ProblemRecord


def _write_test_config(config_path: Path) -> None:
    config_path.write_text(
        "\n".join(
            [
                "[storage]",
                "db_path = \"\"",
                "",
                "[study]",
                "order_mode = \"sequential\"",
                "",
                "[import]",
                "has_header_row = true",
                "",
                "[logging]",
                "level = \"DEBUG\"",
            ]
        ),
        encoding="utf-8",
    )


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    config_dir = tmp_path / ".learningmate"
    config_dir.mkdir()
    config_path = config_dir / "config.toml"
    _write_test_config(config_path)

    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    monkeypatch.setattr(database, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(database, "DB_PATH", config_dir / "learningmate.db")
    for name in ("LEARNINGMATE_DB_PATH", "LEARNINGMATE_ORDER_MODE", "LEARNINGMATE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return config_path


@pytest.fixture
def stores(tmp_path):
    return database.get_stores(tmp_path / "learningmate.db")


def make_problem(problem_id: str, file_set_id: str, seq: int = 1, **fields) -> ProblemRecord:
    fields.setdefault("description", f"Question {problem_id}")
    fields.setdefault("answer", f"Answer {problem_id}")
    return ProblemRecord(id=problem_id, file_set_id=file_set_id, sequence_number=seq, **fields)
