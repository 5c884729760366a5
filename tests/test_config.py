"""
Unit Tests: configuration model and INI config manager.
"""

import pytest

from localstore.core.service import LocalStorageService
from localstore.exceptions import ConfigurationError
from localstore.models.config import StorageConfig
from localstore.storage.config_manager import ConfigManager


class TestStorageConfig:
    def test_defaults(self):
        config = StorageConfig()

        assert config.backend == "local"
        assert config.chunk_size == 1024
        assert config.encoding == "utf-8"
        assert config.log_json is False

    def test_backend_is_normalized(self):
        assert StorageConfig(backend=" Roaming ").backend == "roaming"

    def test_encoding_is_normalized(self):
        assert StorageConfig(encoding="UTF8").encoding == "utf-8"

    @pytest.mark.parametrize(
        "field,value",
        [("backend", "ftp"), ("chunk_size", 0), ("encoding", "no-such-codec")],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValueError):
            StorageConfig(**{field: value})

    def test_ini_keys_exclude_internal_fields(self):
        assert StorageConfig.get_ini_keys() == {
            "backend",
            "data_dir",
            "chunk_size",
            "encoding",
            "log_json",
        }


class TestConfigManager:
    def test_missing_file_uses_defaults(self, tmp_path):
        config = ConfigManager(tmp_path / "config.ini").load_config()

        assert config.backend == "local"
        assert config.config_path == str(tmp_path)

    def test_save_then_load(self, tmp_path):
        manager = ConfigManager(tmp_path / "cfg" / "config.ini")
        manager.save_new_config({"backend": "temporary", "chunk_size": 4096})

        config = ConfigManager(tmp_path / "cfg" / "config.ini").load_config()

        assert config.backend == "temporary"
        assert config.chunk_size == 4096

    def test_migration_adds_missing_keys(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[DEFAULT]\nbackend = memory\n", encoding="utf-8")

        config = ConfigManager(path).load_config()

        assert config.backend == "memory"
        contents = path.read_text(encoding="utf-8")
        assert "chunk_size" in contents
        assert "encoding" in contents

    def test_cli_options_override_file(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[DEFAULT]\nbackend = memory\n", encoding="utf-8")

        config = ConfigManager(path).load_config(
            {"backend": "roaming", "data_dir": None}
        )

        assert config.backend == "roaming"
        assert config.data_dir == ""

    @pytest.mark.parametrize(
        "body", ["chunk_size = lots\n", "chunk_size = 0\n", "backend = ftp\n"]
    )
    def test_invalid_file_raises(self, tmp_path, body):
        path = tmp_path / "config.ini"
        path.write_text("[DEFAULT]\n" + body, encoding="utf-8")

        with pytest.raises(ConfigurationError):
            ConfigManager(path).load_config()

    def test_unparseable_file_raises(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("no section header\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            ConfigManager(path).load_config()


@pytest.mark.asyncio
async def test_service_from_config(tmp_path):
    config = StorageConfig(backend="local", data_dir=str(tmp_path), chunk_size=8)
    service = LocalStorageService.from_config(config)

    assert service.chunk_size == 8
    assert await service.write_text("a.txt", "configured") is True
    assert (tmp_path / "LocalState" / "a.txt").read_text() == "configured"
