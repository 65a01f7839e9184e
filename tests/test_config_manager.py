"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from dupedrop.config import (
    ConfigError,
    ConfigManager,
    DupedropConfig,
    flatten_for_env,
    resolve_with_precedence,
)


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager(env={})


def test_load_without_file_returns_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    config = manager.load()

    assert config == DupedropConfig()
    assert not manager.config_path.exists()


def test_ensure_exists_creates_default_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".dupedrop" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "dupedrop configuration file" in text
    assert "Last updated:" in text
    assert isinstance(manager.load(), DupedropConfig)


def test_load_can_write_default_file_first(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "nested" / "config.yaml", env={})

    config = manager.load(ensure_file=True)

    assert manager.config_path.exists()
    assert config == DupedropConfig()
    assert manager.load_file_overrides()["sharing"]["base_url"] == "http://localhost:8000"

def test_precedence_file_env_cli(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    env = {
        "DUPEDROP__INGESTION__MAX_CONCURRENCY": "4",
        "DUPEDROP__PREVIEWS__ENABLED": "false",
        "UNRELATED": "1",
    }
    manager = ConfigManager(config_path, env=env)
    manager.save({"ingestion": {"max_concurrency": 2, "recurse_directories": False}})

    config = manager.load(cli_overrides={"previews.enabled": True})

    assert config.ingestion.recurse_directories is False
    assert config.ingestion.max_concurrency == 4
    assert config.previews.enabled is True

    assert manager.load(include_env=False).ingestion.max_concurrency == 2


def test_set_value_validates_and_persists(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={})

    updated = manager.set_value("sharing.base_url", "https://example.test")

    assert updated.sharing.base_url == "https://example.test"
    assert manager.load().sharing.base_url == "https://example.test"

    with pytest.raises(ConfigError):
        manager.set_value("previews.text_max_chars", -3)
    assert manager.load_file_overrides() == {"sharing": {"base_url": "https://example.test"}}


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={})
    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(defaults=DupedropConfig(), file_overrides={"llm": {"model": "x"}})


def test_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=DupedropConfig(),
            file_overrides={"ingestion": {"max_concurrency": "many"}},
        )


def test_dotted_and_nested_overrides_merge() -> None:
    config = resolve_with_precedence(
        defaults=DupedropConfig(),
        cli_overrides={"previews.text_max_chars": 10, "previews": {"image_max_edge": 64}},
    )

    assert config.previews.text_max_chars == 10
    assert config.previews.image_max_edge == 64


def test_flatten_for_env_renders_defaults() -> None:
    flat = flatten_for_env(DupedropConfig())

    assert flat["DUPEDROP__INGESTION__MAX_CONCURRENCY"] == "0"
    assert flat["DUPEDROP__PREVIEWS__TEXT_MAX_CHARS"] == "null"
    assert flat["DUPEDROP__LOGGING__LEVEL"] == "WARNING"
