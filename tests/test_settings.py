import pytest

from models import ColumnMapping
from models.settings import OrderMode
from utils import settings


def test_defaults_come_from_config(stores):
    current = settings.get_settings(stores)

    assert current.order_mode == OrderMode.SEQUENTIAL
    assert current.has_header_row is True
    assert current.parser_mapping == ColumnMapping()
    assert len(stores.settings) == 0


def test_default_settings_from_explicit_config():
    current = settings.default_settings({"study": {"order_mode": "random", "mode": "card"}})

    assert current.order_mode == OrderMode.RANDOM
    assert current.mode == "card"
    assert current.export_mapping.wrong_count == 5


def test_update_setting_accepts_camel_case(stores):
    updated = settings.update_setting(stores, "orderMode", "random")

    assert updated.order_mode == OrderMode.RANDOM
    assert settings.get_settings(stores).order_mode == OrderMode.RANDOM
    assert list(stores.settings.keys()) == [settings.SETTINGS_KEY]


def test_update_setting_keeps_other_fields(stores):
    settings.update_setting(stores, "font_size", 7)
    settings.update_setting(stores, "theme", "dark")

    current = settings.get_settings(stores)
    assert current.font_size == 7
    assert current.theme == "dark"
    assert current.order_mode == OrderMode.SEQUENTIAL


def test_update_setting_rejects_unknown_key(stores):
    with pytest.raises(KeyError):
        settings.update_setting(stores, "volume", 11)
