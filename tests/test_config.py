"""
Tests for environment-driven API settings.
"""

import re

from api.config import Settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("PORT", "CORS_ORIGINS", "MAX_FILE_SIZE_MB", "ATA_REPORT_ENV"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings()
        assert settings.port == 3000
        assert settings.cors_origins == ["*"]
        assert settings.cors_allow_credentials is False
        assert settings.max_file_size == 50 * 1024 * 1024
        assert settings.allowed_extensions == [".xlsx"]
        assert not settings.is_production()

    def test_explicit_cors_origins(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "http://a.local, http://b.local,")
        settings = Settings()
        assert settings.cors_origins == ["http://a.local", "http://b.local"]
        assert settings.cors_allow_credentials is True

    def test_directories_live_under_data_dir(self, app_settings, tmp_path):
        assert app_settings.upload_dir == (tmp_path / "data").resolve() / "uploads"
        assert app_settings.output_dir.is_dir()

    def test_generated_paths(self, app_settings):
        upload = app_settings.new_upload_path()
        assert upload.parent == app_settings.upload_dir
        assert upload.suffix == ".xlsx"
        assert upload != app_settings.new_upload_path()

        output = app_settings.new_output_path()
        assert output.parent == app_settings.output_dir
        assert re.fullmatch(r"filtrado_\d{13}_[0-9a-f]{8}\.xlsx", output.name)

    def test_output_paths_are_distinct_within_one_millisecond(self, app_settings, monkeypatch):
        monkeypatch.setattr("api.config.time.time", lambda: 1792422896.536)
        paths = {app_settings.new_output_path() for _ in range(50)}
        assert len(paths) == 50
