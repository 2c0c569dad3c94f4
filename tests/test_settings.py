"""
Settings loading from defaults, environment variables and YAML.
"""
import yaml

from config import ConnectionSettings, MilvusSettings, WaitSettings, load_settings
from wait_operations.config import WaitOperationConfig


def test_defaults():
    settings = MilvusSettings()
    assert settings.connection.host == "localhost"
    assert settings.connection.port == "19530"
    assert settings.wait.poll_interval == 0.5
    assert settings.wait.progress_log_every == 5


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MILVUS_HOST", "milvus.internal")
    monkeypatch.setenv("MILVUS_RETRY_COUNT", "7")
    monkeypatch.setenv("MILVUS_WAIT_POLL_INTERVAL", "0.2")

    settings = load_settings()

    assert settings.connection.host == "milvus.internal"
    assert settings.connection.retry_count == 7
    assert settings.wait.poll_interval == 0.2


def test_yaml_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "connection": {"host": "10.0.0.5", "port": "19531"},
        "wait": {"poll_interval": 1.5, "progress_log_every": 0},
    }))

    settings = load_settings(str(path))

    assert settings.connection.host == "10.0.0.5"
    assert settings.connection.port == "19531"
    assert settings.wait.poll_interval == 1.5
    assert settings.wait.progress_log_every == 0


def test_missing_yaml_falls_back_to_defaults(tmp_path):
    settings = load_settings(str(tmp_path / "missing.yaml"))
    assert settings.connection.host == "localhost"


def test_to_yaml_round_trip(tmp_path):
    settings = MilvusSettings(
        connection=ConnectionSettings(host="example"),
        wait=WaitSettings(poll_interval=2.0),
    )
    path = tmp_path / "out.yaml"
    path.write_text(settings.to_yaml())

    loaded = MilvusSettings.from_yaml(path)

    assert loaded.connection.host == "example"
    assert loaded.wait.poll_interval == 2.0


def test_wait_operation_config_from_settings():
    config = WaitOperationConfig.from_settings(WaitSettings(poll_interval=0.75, progress_log_every=3))
    assert config.default_poll_interval == 0.75
    assert config.progress_log_every == 3
