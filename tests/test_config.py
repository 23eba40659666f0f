"""Tests for config module."""

import pytest
from pathlib import Path

from src.watchman_pdu.config import PduConfig
from src.watchman_pdu.sync_timeout import SyncTimeout


ENV_VARS = [
    "WATCHMAN_PDU_FIELDS",
    "WATCHMAN_PDU_SYNC_TIMEOUT_MS",
    "WATCHMAN_PDU_LOCK_TIMEOUT_MS",
    "WATCHMAN_PDU_CASE_SENSITIVE",
    "WATCHMAN_PDU_DEDUP_RESULTS",
    "WATCHMAN_PDU_VALIDATE_HASHES",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestPduConfig:
    """Tests for PduConfig class."""

    def test_default_values(self):
        config = PduConfig()
        assert config.fields == ["name", "exists", "type"]
        assert config.sync_timeout_ms is None
        assert config.lock_timeout_ms is None
        assert config.case_sensitive is False
        assert config.dedup_results is False
        assert config.validate_content_hashes is False

    def test_fields_from_string(self):
        assert PduConfig(fields="name, size").fields == ["name", "size"]

    def test_empty_fields_rejected(self):
        with pytest.raises(ValueError):
            PduConfig(fields=[])

    def test_sync_timeout(self):
        assert PduConfig().sync_timeout() == SyncTimeout.default()
        assert PduConfig(sync_timeout_ms=0).sync_timeout().is_disabled()
        assert PduConfig(sync_timeout_ms=250).sync_timeout().to_wire() == 250

    def test_default_query_params_are_minimal(self):
        data = PduConfig().query_params().to_dict()
        assert data == {"fields": ["name", "exists", "type"]}

    def test_query_params_apply_defaults(self):
        config = PduConfig(sync_timeout_ms=0, lock_timeout_ms=500, case_sensitive=True)
        data = config.query_params(suffix=["py"], relative_root=Path("src")).to_dict()
        assert data == {
            "suffix": ["py"],
            "relative_root": "src",
            "fields": ["name", "exists", "type"],
            "case_sensitive": True,
            "sync_timeout": 0,
            "lock_timeout": 500,
        }

    def test_overrides_win(self):
        config = PduConfig(case_sensitive=True)
        assert "case_sensitive" not in config.query_params(case_sensitive=False).to_dict()

    def test_subscribe_params(self):
        data = PduConfig(fields=["name"]).subscribe_params(relative_root="www").to_dict()
        assert data == {"relative_root": "www", "fields": ["name"]}


class TestPduConfigFromEnv:
    """Tests for loading config from the environment."""

    def test_empty_environment(self, clean_env):
        assert PduConfig.from_env() == PduConfig()

    def test_reads_variables(self, clean_env):
        clean_env.setenv("WATCHMAN_PDU_FIELDS", "name,content.sha1hex")
        clean_env.setenv("WATCHMAN_PDU_SYNC_TIMEOUT_MS", "1500")
        clean_env.setenv("WATCHMAN_PDU_LOCK_TIMEOUT_MS", "100")
        clean_env.setenv("WATCHMAN_PDU_CASE_SENSITIVE", "true")
        clean_env.setenv("WATCHMAN_PDU_DEDUP_RESULTS", "1")
        clean_env.setenv("WATCHMAN_PDU_VALIDATE_HASHES", "yes")
        config = PduConfig.from_env()
        assert config.fields == ["name", "content.sha1hex"]
        assert config.sync_timeout_ms == 1500
        assert config.lock_timeout_ms == 100
        assert config.case_sensitive is True
        assert config.dedup_results is True
        assert config.validate_content_hashes is True

    def test_invalid_integer(self, clean_env):
        clean_env.setenv("WATCHMAN_PDU_SYNC_TIMEOUT_MS", "soon")
        with pytest.raises(ValueError, match="WATCHMAN_PDU_SYNC_TIMEOUT_MS"):
            PduConfig.from_env()

    def test_false_values(self, clean_env):
        clean_env.setenv("WATCHMAN_PDU_CASE_SENSITIVE", "off")
        assert PduConfig.from_env().case_sensitive is False
