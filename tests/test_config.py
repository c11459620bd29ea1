import pytest

from backend.config import ConfigError, load_config


def test_default_config():
    config = load_config()

    assert config.endpoint.startswith("https://")
    assert config.theme == "aurora"
    assert config.active_theme.refresh_seconds == 15
    assert config.themes["classic"].refresh_seconds == 60
    assert len(config.active_theme.palette) == 6
    assert config.fallback_payload.name == "dashboard-payload-example.json"
    assert config.fallback_payload.exists()


def _write(tmp_path, text):
    path = tmp_path / "dashboard.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_theme_selection(tmp_path):
    path = _write(tmp_path, """
theme: calm
source:
  endpoint: http://localhost/report
themes:
  calm:
    refresh_seconds: 30
""")
    config = load_config(path)
    assert config.active_theme.name == "calm"
    assert config.active_theme.title == "calm"
    assert config.timeout == 10


def test_unknown_theme(tmp_path):
    path = _write(tmp_path, """
theme: missing
source:
  endpoint: http://localhost/report
themes:
  aurora:
    refresh_seconds: 15
""")
    with pytest.raises(ConfigError, match="missing"):
        load_config(path)


def test_endpoint_is_required(tmp_path):
    path = _write(tmp_path, "themes: {}\n")
    with pytest.raises(ConfigError, match="endpoint"):
        load_config(path)


def test_refresh_must_be_positive(tmp_path):
    path = _write(tmp_path, """
source:
  endpoint: http://localhost/report
themes:
  aurora:
    refresh_seconds: 0
""")
    with pytest.raises(ConfigError, match="positive"):
        load_config(path)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "nope.yaml")
