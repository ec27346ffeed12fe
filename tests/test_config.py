"""Tests for configuration system."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from iperfcompare.config import (
    AppConfig,
    LoggingConfig,
    ServerConfig,
    UploadConfig,
    load_config,
)


class TestUploadConfig:
    """Tests for UploadConfig."""

    def test_defaults(self) -> None:
        """Test default batch settings."""
        config = UploadConfig()
        assert config.max_files == 6
        assert config.upload_dir == Path("./uploads")
        assert config.delete_after_processing is True

    @pytest.mark.parametrize("max_files", [0, 7])
    def test_max_files_bounds(self, max_files: int) -> None:
        """Test that the batch limit stays within 1..6."""
        with pytest.raises(ValidationError):
            UploadConfig(max_files=max_files)

    def test_frozen(self) -> None:
        """Test that config objects are immutable."""
        config = UploadConfig()
        with pytest.raises(ValidationError):
            config.max_files = 3  # type: ignore[misc]


class TestLoggingConfig:
    """Tests for LoggingConfig."""

    def test_level_normalized(self) -> None:
        """Test that levels are upper-cased."""
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_unknown_level(self) -> None:
        """Test that unknown levels are rejected."""
        with pytest.raises(ValueError, match="Unknown log level"):
            LoggingConfig(level="chatty")


class TestLoadConfig:
    """Tests for YAML loading."""

    def test_no_file_gives_defaults(self) -> None:
        """Test that no config path yields defaults."""
        config = load_config(None)
        assert config == AppConfig()
        assert config.server == ServerConfig()

    def test_load_yaml(self, tmp_path: Path) -> None:
        """Test loading all sections from YAML."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "upload:\n"
            "  max_files: 3\n"
            "  dir: /tmp/iperf-uploads\n"
            "  delete_after_processing: false\n"
            "server:\n"
            "  port: 8080\n"
            "logging:\n"
            "  level: debug\n"
            "  json: true\n",
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.max_files == 3
        assert config.upload.upload_dir == Path("/tmp/iperf-uploads")
        assert config.upload.delete_after_processing is False
        assert config.server.port == 8080
        assert config.server.host == "localhost"
        assert config.logging.level == "DEBUG"
        assert config.logging.json_output is True

    def test_env_interpolation(self, tmp_path: Path, monkeypatch) -> None:
        """Test ${VAR} and ${VAR:default} expansion."""
        monkeypatch.setenv("IPERF_UPLOADS", "/srv/uploads")
        monkeypatch.delenv("IPERF_ORIGIN", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(
            "upload:\n"
            "  dir: ${IPERF_UPLOADS}\n"
            "server:\n"
            "  cors_origin: ${IPERF_ORIGIN:http://localhost:5173}\n",
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.upload.upload_dir == Path("/srv/uploads")
        assert config.server.cors_origin == "http://localhost:5173"

    def test_base_config_merge(self, tmp_path: Path) -> None:
        """Test that base.yaml is merged underneath the main config."""
        (tmp_path / "base.yaml").write_text(
            "server:\n  host: 0.0.0.0\n  port: 9000\n", encoding="utf-8"
        )
        path = tmp_path / "local.yaml"
        path.write_text("server:\n  port: 9001\n", encoding="utf-8")

        config = load_config(path)

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 9001

    def test_invalid_value(self, tmp_path: Path) -> None:
        """Test that out-of-range values fail validation."""
        path = tmp_path / "config.yaml"
        path.write_text("upload:\n  max_files: 10\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_example_config(self, project_root: Path) -> None:
        """Test that the shipped example config loads."""
        config = load_config(project_root / "config" / "example.yaml")
        assert config.max_files == 6
