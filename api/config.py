"""
Ata Report Configuration

Settings for the HTTP layer, read once from environment variables.
Domain constants (unit sentinel, numeric columns, keyword lists) live in
the ata_report package instead.
"""

import os
import time
import uuid
from pathlib import Path
from typing import List
from functools import lru_cache


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


class Settings:
    """
    Runtime settings for the Ata Report API.

    Environment variables:
        ATA_REPORT_ENV      development | production
        HOST, PORT          bind address for ``cli.py serve`` / ``python -m api.main``
        DATA_DIR            root for uploads/ and outputs/ (default ./data)
        MAX_FILE_SIZE_MB    upload size limit
        CORS_ORIGINS        comma separated, or "*"
        LOG_LEVEL           DEBUG, INFO, ...
        LOG_FORMAT          "text" or "json"
    """

    def __init__(self):
        self.environment = os.environ.get("ATA_REPORT_ENV", "development")

        self.host = os.environ.get("HOST", "0.0.0.0")
        self.port = _env_int("PORT", 3000)

        # Credentials cannot be combined with a wildcard origin
        origins = os.environ.get("CORS_ORIGINS", "*")
        if origins == "*":
            self.cors_origins: List[str] = ["*"]
            self.cors_allow_credentials = False
        else:
            self.cors_origins = [o.strip() for o in origins.split(",") if o.strip()]
            self.cors_allow_credentials = True

        # Reports are only accepted as OOXML workbooks
        self.allowed_extensions = [".xlsx"]
        self.max_file_size_mb = _env_int("MAX_FILE_SIZE_MB", 50)

        self.data_dir = Path(os.environ.get("DATA_DIR", "data")).resolve()

        self.log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
        self.log_format = os.environ.get("LOG_FORMAT", "text")

    @property
    def max_file_size(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @property
    def upload_dir(self) -> Path:
        return self.data_dir / "uploads"

    @property
    def output_dir(self) -> Path:
        return self.data_dir / "outputs"

    def ensure_directories(self) -> None:
        for directory in (self.upload_dir, self.output_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def new_upload_path(self) -> Path:
        """Unique storage path for an uploaded report"""
        return self.upload_dir / f"{uuid.uuid4().hex}.xlsx"

    def new_output_path(self) -> Path:
        """filtrado_<epoch millis>_<random>.xlsx in the output directory"""
        stamp = int(time.time() * 1000)
        return self.output_dir / f"filtrado_{stamp}_{uuid.uuid4().hex[:8]}.xlsx"

    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """Settings singleton; tests override it through app.dependency_overrides"""
    return Settings()
