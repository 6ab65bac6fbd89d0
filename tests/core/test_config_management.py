# tests/core/test_config_management.py
import pytest
import json

from pydbundle.core.managers.config_manager import ConfigManager
from pydbundle.core.utils.path_utils import PathUtils

# Een standaard, voorspelbare configuratie voor onze tests
MOCK_SETTINGS_CONTENT = {
    "debug": {
        "level": "WARNING"
    },
    "bundler": {
        "subjects": ["index.html"],
        "show_progress": False,
        "discard_assets": False
    }
}


@pytest.fixture
def config_env(tmp_path, monkeypatch):
    """
    Een fixture die een geïsoleerde testomgeving opzet voor de ConfigManager:
    - Plaatst een nep 'settings.json' bestand in een tijdelijke map.
    - Monkeypatched PathUtils om naar deze locatie te wijzen.
    - Herlaadt na de test de echte configuratie.
    """
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps(MOCK_SETTINGS_CONTENT))
    monkeypatch.setattr(PathUtils, 'get_settings_file', lambda: settings_file)

    manager = ConfigManager()
    manager.reset()  # Forceer herladen vanuit ons nep-bestand
    yield manager

    monkeypatch.undo()
    manager.reset()


def test_config_manager_is_singleton():
    assert ConfigManager() is ConfigManager()


def test_config_manager_load(config_env):
    """Test of de manager de configuratie correct laadt."""
    config = config_env.get_all()
    assert config["debug"]["level"] == "WARNING"
    assert config["bundler"]["subjects"] == ["index.html"]


def test_config_manager_get_nested(config_env):
    """Test het ophalen van geneste waarden."""
    assert config_env.get_nested("bundler.show_progress") is False
    assert config_env.get_nested("non.existent.key", "default") == "default"
    assert config_env.get_nested("debug.level.deeper", "x") == "x"


def test_config_manager_set_nested(config_env):
    """Test het aanpassen van waarden in het geheugen."""
    config_env.set_nested("debug.level", "INFO")
    assert config_env.get_nested("debug.level") == "INFO"

    # Nieuwe sleutel
    config_env.set_nested("new_feature.enabled", True)
    assert config_env.get_nested("new_feature.enabled") is True

    # Booleans worden vanuit strings gecast
    config_env.set_nested("bundler.discard_assets", "true")
    assert config_env.get_nested("bundler.discard_assets") is True
    config_env.set_nested("bundler.show_progress", "off")
    assert config_env.get_nested("bundler.show_progress") is False


def test_config_manager_reset(config_env):
    """Test of de reset-functie de configuratie herlaadt vanaf schijf."""
    config_env.set_nested("debug.level", "DEBUG")
    config_env.reset()
    assert config_env.get_nested("debug.level") == "WARNING"


def test_missing_settings_file_gives_empty_config(tmp_path, monkeypatch):
    monkeypatch.setattr(PathUtils, 'get_settings_file', lambda: tmp_path / "absent.json")
    manager = ConfigManager()
    manager.reset()
    try:
        assert manager.get_all() == {}
        assert manager.get_nested("bundler.subjects", []) == []
    finally:
        monkeypatch.undo()
        manager.reset()


def test_shipped_settings_file_exists():
    settings = json.loads(PathUtils.get_settings_file().read_text(encoding="utf-8"))
    assert settings["bundler"]["discard_assets"] is False
