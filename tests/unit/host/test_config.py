"""Tests for configuration loading."""

from pathlib import Path

from gimport.config import DEFAULT_CONFIG_DIR, ImportConfig


class TestImportConfig:
    def test_defaults(self):
        config = ImportConfig.from_env({})

        assert config.config_dir == DEFAULT_CONFIG_DIR
        assert config.use_make is False
        assert config.compile_poll_seconds == 60.0
        assert config.refresh_timeout_seconds == 1800.0
        assert config.low_memory_mb == 256
        assert config.gradle_executable is None
        assert config.build_process_heap_mb == 3500

    def test_overrides(self, tmp_path):
        config = ImportConfig.from_env(
            {
                "GIMPORT_CONFIG_DIR": str(tmp_path),
                "build_mode_use_make": "true",
                "GIMPORT_COMPILE_POLL_SECONDS": "5",
                "GIMPORT_LOW_MEMORY_MB": "512",
                "GIMPORT_GRADLE": "/opt/gradle/bin/gradle",
            }
        )

        assert config.config_dir == tmp_path
        assert config.use_make is True
        assert config.compile_poll_seconds == 5.0
        assert config.low_memory_mb == 512
        assert config.gradle_executable == "/opt/gradle/bin/gradle"
        assert config.log_file == tmp_path / "logs" / "gimport.log"
        assert config.jdk_table_file == tmp_path / "options" / "jdk.table.json"

    def test_make_flag_must_be_exactly_true(self):
        assert ImportConfig.from_env({"build_mode_use_make": "TRUE"}).use_make is False
        assert ImportConfig.from_env({"build_mode_use_make": "1"}).use_make is False

    def test_invalid_numbers_fall_back(self, caplog):
        config = ImportConfig.from_env({"GIMPORT_COMPILE_POLL_SECONDS": "soon", "GIMPORT_LOW_MEMORY_MB": "-1"})

        assert config.compile_poll_seconds == 60.0
        assert config.low_memory_mb == 256
        assert "GIMPORT_COMPILE_POLL_SECONDS" in caplog.text

    def test_reads_os_environ(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GIMPORT_CONFIG_DIR", str(tmp_path / "cfg"))
        assert ImportConfig.from_env().config_dir == Path(tmp_path / "cfg")
