"""
Ata Report API
FastAPI backend for filtering Ata (framework-agreement) reports by unit

Endpoints:
- GET  /             - Web interface
- GET  /api/health   - Health check
- POST /upload       - Upload a report, returns the units found in it
- POST /preview      - First rows of the filtered items for a unit
- POST /filtrar      - Formatted Excel export for a unit
"""

import os
import sys
import json
import asyncio
import logging
from typing import Optional
from datetime import datetime
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, UploadFile, File
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse
from pydantic import BaseModel, ConfigDict, Field

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ata_report import (
    ALL_UNITS,
    EmptyResultError,
    ExcelExporter,
    __version__,
    extract,
    list_units,
)
from api.config import Settings, get_settings
from api.middleware import RequestIDMiddleware, get_request_id


# ============== Structured Logging ==============

class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging in production"""

    def format(self, record):
        log_data = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        for key in ("request_id", "method", "endpoint", "status_code", "duration_ms", "upload_filename"):
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data, ensure_ascii=False)


def setup_logging(settings: Optional[Settings] = None):
    """Configure the application logger based on environment"""
    settings = settings or get_settings()

    # Parent of every ata_report.* module logger
    logger = logging.getLogger("ata_report")
    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))

    # Remove existing handlers
    logger.handlers = []

    handler = logging.StreamHandler()

    if settings.log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        ))

    logger.addHandler(handler)
    return logging.getLogger("ata_report.api")


logger = setup_logging()


# ============== File Upload Validation ==============

PREVIEW_SIZE = 5

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# XLSX is a ZIP container
XLSX_SIGNATURE = b"PK\x03\x04"


class FileValidationError(Exception):
    """Exception raised when file validation fails"""
    pass


async def validate_uploaded_file(file: UploadFile, settings: Settings) -> bytes:
    """
    Validate an uploaded report.

    Returns:
        The file content

    Raises:
        FileValidationError: If validation fails
    """
    filename = os.path.basename(file.filename or "")
    ext = Path(filename).suffix.lower()

    if ext not in settings.allowed_extensions:
        raise FileValidationError(
            f"File type '{ext}' is not allowed. Allowed types: {', '.join(settings.allowed_extensions)}"
        )

    content = await file.read()

    if len(content) > settings.max_file_size:
        size_mb = len(content) / (1024 * 1024)
        raise FileValidationError(
            f"File size ({size_mb:.1f} MB) exceeds maximum allowed size ({settings.max_file_size_mb} MB)"
        )

    if len(content) == 0:
        raise FileValidationError("Empty files are not allowed")

    if not content.startswith(XLSX_SIGNATURE):
        raise FileValidationError(
            f"File content does not match expected format for '{ext}' files"
        )

    return content


def resolve_upload_path(file_path: str, settings: Settings) -> Path:
    """Resolve a client-supplied path, which must point inside the upload directory"""
    upload_dir = settings.upload_dir.resolve()
    path = Path(file_path)
    if not path.is_absolute():
        path = upload_dir / path
    path = path.resolve()

    if not path.is_relative_to(upload_dir):
        logger.warning(f"Rejected file path outside upload directory: {file_path}")
        raise HTTPException(status_code=400, detail="Arquivo inválido.")
    return path


# ============== Request Models ==============

class FilterRequest(BaseModel):
    """Body of /preview and /filtrar"""
    model_config = ConfigDict(populate_by_name=True)

    file_path: str = Field(..., alias="filePath")
    unidade: Optional[str] = None

    @property
    def unit(self) -> str:
        return self.unidade or ALL_UNITS


class UploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    unidades: list[str]
    file_path: str = Field(..., alias="filePath")


# ============== App ==============

_settings = get_settings()

app = FastAPI(
    title="Ata Report API",
    description="Filter Ata framework-agreement reports by unit and export formatted spreadsheets.",
    version=__version__,
    docs_url=None if _settings.is_production() else "/docs",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=_settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

exporter = ExcelExporter()


@app.on_event("startup")
async def startup_event():
    _settings.ensure_directories()
    logger.info(f"[Startup] Ata Report v{__version__} starting...")
    logger.info(f"[Startup] Environment: {_settings.environment}")
    logger.info(f"[Startup] Upload directory: {_settings.upload_dir}")
    logger.info(f"[Startup] Output directory: {_settings.output_dir}")


# ============== Root Route (Web UI) ==============

@app.get("/")
async def root():
    """Serve the web interface"""
    index = Path(__file__).parent.parent / "web" / "index.html"
    if index.exists():
        return HTMLResponse(content=index.read_text(encoding="utf-8"), status_code=200)

    # Fallback HTML
    return HTMLResponse(content="""<!DOCTYPE html>
<html><head><title>Ata Report</title></head>
<body style="font-family:sans-serif;padding:40px;text-align:center;">
<h1>Ata Report API</h1>
<p>Web UI files not found. API is running.</p>
<p><a href="/docs">API Documentation</a></p>
</body></html>""", status_code=200)


@app.get("/api/health", tags=["Health"])
async def health_check():
    return {"status": "healthy", "version": __version__}


# ============== Report Endpoints ==============

@app.post("/upload", response_model=UploadResponse, response_model_by_alias=True)
async def upload_report(
    arquivo: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
):
    """Store an uploaded report and list the units it contains"""
    try:
        content = await validate_uploaded_file(arquivo, settings)
    except FileValidationError as e:
        logger.warning(f"Upload rejected: {e}", extra={"upload_filename": arquivo.filename})
        raise HTTPException(status_code=400, detail=str(e))

    settings.ensure_directories()
    stored_path = settings.new_upload_path()
    await asyncio.to_thread(stored_path.write_bytes, content)

    try:
        units = await asyncio.to_thread(list_units, str(stored_path))
    except Exception:
        logger.exception(
            f"Failed to process upload {arquivo.filename}",
            extra={"request_id": get_request_id(), "upload_filename": arquivo.filename},
        )
        stored_path.unlink(missing_ok=True)
        raise HTTPException(status_code=500, detail="Erro ao processar arquivo.")

    logger.info(f"Upload {arquivo.filename}: {len(units)} units found")
    return UploadResponse(unidades=units, file_path=str(stored_path))


@app.post("/preview")
async def preview_report(
    body: FilterRequest,
    settings: Settings = Depends(get_settings),
):
    """First rows of the filtered items plus their column names"""
    path = resolve_upload_path(body.file_path, settings)

    try:
        result = await asyncio.to_thread(extract, str(path), body.unit)
    except Exception:
        logger.exception(
            f"Preview failed for unit '{body.unit}'",
            extra={"request_id": get_request_id()},
        )
        raise HTTPException(status_code=500, detail="Erro ao gerar pré-visualização.")

    return {
        "cabecalho": result.columns,
        "preview": result.preview(PREVIEW_SIZE),
    }


@app.post("/filtrar")
async def filter_report(
    body: FilterRequest,
    settings: Settings = Depends(get_settings),
):
    """Formatted workbook with the items of the selected unit"""
    path = resolve_upload_path(body.file_path, settings)
    settings.ensure_directories()
    output_path = settings.new_output_path()

    try:
        result = await asyncio.to_thread(extract, str(path), body.unit)
        await asyncio.to_thread(exporter.export, result, str(output_path), body.unidade)
    except EmptyResultError:
        logger.info(f"No records for unit '{body.unit}'")
        raise HTTPException(status_code=400, detail="Não foi possível filtrar dados.")
    except Exception:
        logger.exception(
            f"Export failed for unit '{body.unit}'",
            extra={"request_id": get_request_id()},
        )
        raise HTTPException(status_code=500, detail="Erro ao gerar planilha.")

    return FileResponse(
        path=str(output_path),
        filename=output_path.name,
        media_type=XLSX_MEDIA_TYPE,
    )


# ============== Main Entry ==============

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=_settings.host, port=_settings.port)
