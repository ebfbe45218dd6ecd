from pathlib import Path

import config


def _force_cwd_only(monkeypatch, tmp_path: Path) -> None:
    """Make tests deterministic by ensuring only the temp CWD has config.env."""
    monkeypatch.chdir(tmp_path)

    # Ensure we don't pick up the repo's real config.env (project_root_dir)
    monkeypatch.setattr(config, 'project_root_dir', lambda: tmp_path)

    for key in ('FLIGHT_SEARCH_DB', 'FLIGHT_SEARCH_AIRPORTS', 'LOG_LEVEL', 'FLIGHT_SEARCH_PORT'):
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_config_file(tmp_path, monkeypatch):
    _force_cwd_only(monkeypatch, tmp_path)

    cfg = config.load_config()
    assert cfg.loaded_from is None
    assert cfg.db_path == Path('flight_search.db')
    assert cfg.airports_path is None
    assert cfg.log_level == 'INFO'
    assert cfg.port == 8080


def test_dotenv_path_prefers_existing(tmp_path, monkeypatch):
    env_file = tmp_path / "config.env"
    env_file.write_text("FLIGHT_SEARCH_DB=favorites.db\nLOG_LEVEL=debug\nFLIGHT_SEARCH_PORT=9000\n")

    _force_cwd_only(monkeypatch, tmp_path)

    cfg = config.load_config()
    assert cfg.loaded_from is not None
    assert Path(cfg.loaded_from) == env_file
    assert cfg.db_path == Path('favorites.db')
    assert cfg.log_level == 'DEBUG'
    assert cfg.port == 9000


def test_environment_wins_over_config_file(tmp_path, monkeypatch):
    env_file = tmp_path / "config.env"
    env_file.write_text("FLIGHT_SEARCH_DB=from_file.db\n")

    _force_cwd_only(monkeypatch, tmp_path)
    monkeypatch.setenv("FLIGHT_SEARCH_DB", "from_env.db")

    assert config.load_config().db_path == Path('from_env.db')


def test_invalid_port_falls_back_to_default(tmp_path, monkeypatch):
    _force_cwd_only(monkeypatch, tmp_path)
    monkeypatch.setenv("FLIGHT_SEARCH_PORT", "not-a-port")

    assert config.load_config().port == 8080


def test_diagnostics_mentions_resolved_settings(tmp_path, monkeypatch):
    _force_cwd_only(monkeypatch, tmp_path)
    text = config.config_diagnostics()

    assert "Database: flight_search.db" in text
    assert "bundled airports.json" in text
