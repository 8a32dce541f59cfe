"""Tests for server configuration.

These tests cover:
1. Default values
2. Environment variable loading
3. Field validation
4. The global configuration singleton
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from lending_library_mcp.config import ServerConfig, get_config, reset_config


@pytest.mark.usefixtures("clean_env")
class TestServerConfig:
    """Test server configuration behavior."""

    def test_default_configuration(self):
        config = ServerConfig()

        assert config.server_name == "lending-library"
        assert config.server_version == "0.1.0"
        assert config.transport == "stdio"
        assert config.database_path == Path("lending_library.db").absolute()
        assert config.seed_on_startup is True
        assert config.debug is False
        assert config.log_level == "INFO"

    def test_environment_variable_loading(self, tmp_path):
        db_path = tmp_path / "env.db"
        env_vars = {
            "LENDING_LIBRARY_SERVER_NAME": "branch-library",
            "LENDING_LIBRARY_SERVER_VERSION": "2.0.0",
            "LENDING_LIBRARY_DATABASE_PATH": str(db_path),
            "LENDING_LIBRARY_SEED_ON_STARTUP": "false",
            "LENDING_LIBRARY_DEBUG": "true",
            "LENDING_LIBRARY_LOG_LEVEL": "DEBUG",
        }

        with patch.dict(os.environ, env_vars):
            config = ServerConfig()

            assert config.server_name == "branch-library"
            assert config.server_version == "2.0.0"
            assert config.database_path == db_path
            assert config.seed_on_startup is False
            assert config.debug is True
            assert config.log_level == "DEBUG"

    def test_case_insensitive_env_vars(self):
        env_vars = {
            "lending_library_server_name": "lower-case",
            "Lending_Library_Log_Level": "ERROR",
        }

        with patch.dict(os.environ, env_vars):
            config = ServerConfig()

            assert config.server_name == "lower-case"
            assert config.log_level == "ERROR"

    @pytest.mark.parametrize("name", ["Library_Server", "my library", "lib@home", "ab", "a" * 51])
    def test_invalid_server_names(self, name):
        with pytest.raises(ValidationError):
            ServerConfig(server_name=name)

    @pytest.mark.parametrize("version", ["1.0", "v1.0.0", "1.0.0.0", "latest"])
    def test_invalid_versions(self, version):
        with pytest.raises(ValidationError):
            ServerConfig(server_version=version)

    def test_transport_validation(self):
        assert ServerConfig(transport="streamable_http").transport == "streamable_http"

        with pytest.raises(ValidationError):
            ServerConfig(transport="sse")

    def test_log_level_validation(self):
        with pytest.raises(ValidationError):
            ServerConfig(log_level="VERBOSE")

    def test_database_path_validation(self, tmp_path):
        """The parent directory is created and the path made absolute."""
        db_path = tmp_path / "subdir" / "library.db"

        config = ServerConfig(database_path=db_path)

        assert db_path.parent.is_dir()
        assert config.database_path.is_absolute()
        assert config.get_database_url() == f"sqlite:///{db_path}"

    def test_is_development(self, test_config):
        assert test_config.is_development is True
        assert ServerConfig(debug=False, log_level="DEBUG").is_development is True
        assert ServerConfig(debug=False, log_level="INFO").is_development is False

    def test_unknown_fields_ignored(self):
        config = ServerConfig(enable_sampling=True)

        assert not hasattr(config, "enable_sampling")

    def test_global_config_singleton(self):
        reset_config()

        config1 = get_config()
        assert get_config() is config1

        reset_config()
        assert get_config() is not config1
