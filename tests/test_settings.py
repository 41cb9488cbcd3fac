from routescout.config.settings import get_logging_config, get_settings


def test_defaults_are_loaded_from_packaged_yaml(monkeypatch):
    monkeypatch.delenv("ROUTESCOUT_CONFIG_PATH", raising=False)
    monkeypatch.delenv("ROUTESCOUT_LOG_LEVEL", raising=False)
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.services.routing.base_url.startswith("https://")
        assert settings.enrichment.pois.checkpoint_segments == 10
        assert settings.enrichment.pois.max_results == 100
        assert settings.enrichment.pois.dedup_epsilon_deg == 1e-5
        assert settings.enrichment.elevation.max_samples == 100
    finally:
        get_settings.cache_clear()


def test_env_overrides_log_level_and_history_path(monkeypatch, tmp_path):
    monkeypatch.setenv("ROUTESCOUT_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("ROUTESCOUT_HISTORY_PATH", str(tmp_path / "h.json"))
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.app.log_level == "DEBUG"
        assert settings.history.path == str(tmp_path / "h.json")
    finally:
        get_settings.cache_clear()


def test_external_config_file(monkeypatch, tmp_path):
    cfg = tmp_path / "routescout.yaml"
    cfg.write_text(
        """
services:
  routing: {base_url: "http://osrm.local/route/v1"}
  overpass: {base_url: "http://overpass.local/api/interpreter"}
  geocoding: {base_url: "http://nominatim.local"}
  elevation: {base_url: "http://elevation.local/api/v1/lookup"}
enrichment:
  pois:
    inter_query_delay_seconds: 0
""",
        encoding="utf-8",
    )
    monkeypatch.setenv("ROUTESCOUT_CONFIG_PATH", str(cfg))
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.services.routing.base_url == "http://osrm.local/route/v1"
        assert settings.enrichment.pois.inter_query_delay_seconds == 0
        assert settings.enrichment.pois.radius_m == 1000
    finally:
        get_settings.cache_clear()


def test_logging_config_has_console_handler():
    cfg = get_logging_config()
    assert "console" in cfg["handlers"]
