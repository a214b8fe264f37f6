import pytest

from core.config import Settings


def test_nested_env_overrides(monkeypatch):
    monkeypatch.setenv("GRPC__PORT", "6000")
    monkeypatch.setenv("MONGO__URL", "mongodb://mongo:27017")
    monkeypatch.setenv("MONGO__COLLECTION", "notes")

    s = Settings()
    assert s.grpc.port == 6000
    assert s.mongo.url == "mongodb://mongo:27017"
    assert s.mongo.collection == "notes"
    assert s.mongo.database == "mydb"


def test_log_level_is_normalized(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "info")
    assert Settings().LOG_LEVEL == "INFO"

    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(ValueError):
        Settings()
