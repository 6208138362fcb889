from __future__ import annotations

from pathlib import Path

from systemyml.core.config_manager import ConfigManager


def test_missing_file_uses_defaults(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "missing.yaml")
    assert manager.load_config() is False
    assert manager.get_setting("config_path") == "services"
    assert manager.get_setting("target_dir") == "/etc/systemd/system"
    assert manager.get_setting("user_mode") is False
    assert manager.get_setting("systemctl_timeout") == 10


def test_settings_file_overrides_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("target_dir: /srv/units\nsystemctl_timeout: 30\n")

    manager = ConfigManager(path)

    assert manager.load_config() is True
    assert manager.get_setting("target_dir") == "/srv/units"
    assert manager.get_setting("systemctl_timeout") == 30
    assert manager.get_setting("config_path") == "services"


def test_invalid_settings_fall_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("systemctl_timeout: soon\ntarget_dir: /srv/units\n")

    manager = ConfigManager(path)

    assert manager.load_config() is False
    assert manager.get_setting("target_dir") == "/etc/systemd/system"


def test_unparseable_settings_fall_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("target_dir: [unclosed\n")
    manager = ConfigManager(path)
    assert manager.load_config() is False
    assert manager.get_setting("target_dir") == "/etc/systemd/system"


def test_resolve_target_dir_for_user_mode(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("user_target_dir: ~/units\n")
    manager = ConfigManager(path)
    manager.load_config()
    assert manager.resolve_target_dir(user_mode=True) == Path.home() / "units"
    assert manager.resolve_target_dir(user_mode=False) == Path("/etc/systemd/system")
