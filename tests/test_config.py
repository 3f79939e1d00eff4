import os
from unittest import mock

from drive_journal.config import AppConfig


def test_default_config():
    """Test that the default configuration loads correctly."""
    with mock.patch.dict(os.environ, {}, clear=True):
        config = AppConfig()

    # Check that all sections exist
    assert hasattr(config, "db")
    assert hasattr(config, "logging")
    assert hasattr(config, "service")

    # Check some default values
    assert config.db.engine == "sqlite"
    assert config.db.name == "drive_journal.db"
    assert config.db.port == 5432
    assert config.db.user == "teslamate"
    assert config.service.http_port == 4001
    assert config.service.default_car_id == 1
    assert config.service.debug is False
    assert config.logging.level == "INFO"
    assert config.logging.use_color is True


def test_environment_variables():
    """Test that environment variables override default configuration."""
    with mock.patch.dict(os.environ, {
        "DB_ENGINE": "postgresql",
        "DB_NAME": "teslamate",
        "DB_HOST": "database",
        "DB_PORT": "5433",
        "DB_PASSWORD": "secret",
        "HTTP_PORT": "8080",
        "DEFAULT_CAR_ID": "3",
        "LOG_LEVEL": "WARNING",
    }):
        config = AppConfig()

        # Check that environment variables were applied
        assert config.db.engine == "postgresql"
        assert config.db.name == "teslamate"
        assert config.db.host == "database"
        assert config.db.port == 5433
        assert config.db.password == "secret"
        assert config.service.http_port == 8080
        assert config.service.default_car_id == 3
        assert config.logging.level == "WARNING"


def test_invalid_integer_falls_back_to_default():
    """Test that unparsable integers keep the default."""
    with mock.patch.dict(os.environ, {"HTTP_PORT": "not-a-port", "DB_PORT": ""}):
        config = AppConfig()

        assert config.service.http_port == 4001
        assert config.db.port == 5432


def test_allowed_hosts_parsing():
    """Test that allowed hosts are split and trimmed."""
    with mock.patch.dict(os.environ, {"ALLOWED_HOSTS": "journal.local, 10.0.0.5 ,"}):
        config = AppConfig()

        assert config.service.allowed_hosts == ["journal.local", "10.0.0.5"]


def test_boolean_parsing():
    """Test that boolean values are parsed correctly."""
    with mock.patch.dict(os.environ, {
        "DEBUG": "true",
        "LOG_USE_COLOR": "false",
    }):
        config = AppConfig()

        assert config.service.debug is True
        assert config.logging.use_color is False

    with mock.patch.dict(os.environ, {"DEBUG": "1"}):
        config = AppConfig()

        # Only "true" enables a flag
        assert config.service.debug is False
