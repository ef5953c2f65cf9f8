import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

import aiofiles
from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from autop import models
from autop.config import configure_logging, settings
from autop.database import engine, get_db
from autop.engine.adapter import UnknownEngineError, normalize_engine_name
from autop.options import Options
from autop.renderer import auto_p

configure_logging()
logger = logging.getLogger(__name__)

# Initialize required tables at startup
models.Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="HTML Auto-Paragraph",
    description="Convert newline-formatted text into HTML paragraphs",
    version="1.0.0",
    debug=settings.debug,
)

# Add CORS middleware only when origins are configured
if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

output_dir_path = Path(settings.output_dir)
output_dir_path.mkdir(exist_ok=True)

ALLOWED_UPLOAD_EXTS = {".txt", ".html", ".htm"}


def _resolve_options(
    br: Optional[bool],
    esc_pre: Optional[bool],
    remove_useless_newlines_in_pre: Optional[bool],
) -> Options:
    # Unset request fields fall back to the configured defaults
    defaults = Options.from_settings()
    changes = {
        name: value
        for name, value in (
            ("br", br),
            ("esc_pre", esc_pre),
            ("remove_useless_newlines_in_pre", remove_useless_newlines_in_pre),
        )
        if value is not None
    }
    return defaults.replace(**changes)


def _resolve_engine(engine_name: Optional[str]) -> str:
    try:
        return normalize_engine_name(engine_name if engine_name is not None else settings.regex_engine)
    except UnknownEngineError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _validate_text(text: str) -> None:
    if not text.strip():
        raise HTTPException(status_code=400, detail="Text content is required")
    if len(text.encode("utf-8")) > settings.max_file_size:
        raise HTTPException(status_code=413, detail="Text content too large")


def _record_failure(db: Session, record: models.ConversionHistory, error: Exception) -> None:
    if not settings.record_history:
        return
    file_id = record.file_id
    db.rollback()
    record.status = "failed"
    record.error_message = str(error)
    db.add(record)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not record failed conversion %s", file_id)


async def _convert_and_store(
    db: Session,
    text: str,
    options: Options,
    engine_name: str,
    filename: Optional[str],
    original_filename: Optional[str] = None,
) -> dict:
    file_id = str(uuid.uuid4())
    output_filename = filename or f"autop_{datetime.now().strftime('%Y%m%d_%H%M%S')}.html"
    if not output_filename.endswith(".html"):
        output_filename += ".html"

    # Prefix filename with UUID to avoid collisions
    output_path = output_dir_path / f"{file_id}_{output_filename}"
    record = models.ConversionHistory(
        file_id=file_id,
        original_filename=original_filename,
        output_filename=output_filename,
        input_size=len(text),
        br=options.br,
        esc_pre=options.esc_pre,
        remove_useless_newlines_in_pre=options.remove_useless_newlines_in_pre,
        engine=engine_name,
        status="completed",
    )

    try:
        html_content = auto_p(text, options, engine=engine_name)
        record.output_size = len(html_content)
        if settings.record_history:
            db.add(record)
            db.commit()

        # The file is only written once its history row is stored
        output_dir_path.mkdir(exist_ok=True)
        async with aiofiles.open(output_path, "w", encoding="utf-8") as out:
            await out.write(html_content)
    except Exception as e:
        output_path.unlink(missing_ok=True)
        _record_failure(db, record, e)
        raise

    logger.info("Converted %d characters into %s", len(text), output_path.name)
    return {
        "success": True,
        "message": "HTML generated successfully",
        "file_id": file_id,
        "filename": output_filename,
        "download_url": f"/download/{file_id}_{output_filename}",
    }


@app.get("/")
async def root():
    return {"message": "HTML Auto-Paragraph API", "version": "1.0.0"}


@app.post("/preview")
async def preview(
    text: str = Form(""),
    br: Optional[bool] = Form(None),
    esc_pre: Optional[bool] = Form(None),
    remove_useless_newlines_in_pre: Optional[bool] = Form(None),
    engine: Optional[str] = Form(None),
):
    """Return the auto-paragraphed fragment as HTML."""
    try:
        _validate_text(text)
        options = _resolve_options(br, esc_pre, remove_useless_newlines_in_pre)
        engine_name = _resolve_engine(engine)
        html_content = auto_p(text, options, engine=engine_name)
        return Response(content=html_content, media_type="text/html")
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Preview failed")
        raise HTTPException(status_code=500, detail=f"Error rendering preview: {str(e)}")


@app.post("/convert")
async def convert(
    text: str = Form(""),
    filename: Optional[str] = Form(None),
    br: Optional[bool] = Form(None),
    esc_pre: Optional[bool] = Form(None),
    remove_useless_newlines_in_pre: Optional[bool] = Form(None),
    engine: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    try:
        _validate_text(text)
        options = _resolve_options(br, esc_pre, remove_useless_newlines_in_pre)
        engine_name = _resolve_engine(engine)
        # Only keep the basename of a client-supplied name
        safe_name = Path(filename).name if filename else None
        return await _convert_and_store(db, text, options, engine_name, safe_name)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Conversion failed")
        raise HTTPException(status_code=500, detail=f"Error generating HTML: {str(e)}")


@app.post("/upload-convert")
async def upload_and_convert_file(
    file: UploadFile = File(...),
    br: Optional[bool] = Form(None),
    esc_pre: Optional[bool] = Form(None),
    remove_useless_newlines_in_pre: Optional[bool] = Form(None),
    engine: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    try:
        if Path(file.filename or "").suffix.lower() not in ALLOWED_UPLOAD_EXTS:
            raise HTTPException(status_code=400, detail="Only .txt and .html files are supported")

        content = await file.read()
        text = content.decode("utf-8")
        _validate_text(text)
        options = _resolve_options(br, esc_pre, remove_useless_newlines_in_pre)
        engine_name = _resolve_engine(engine)

        # Ignore client-supplied names so the server assigns unique filenames
        return await _convert_and_store(
            db, text, options, engine_name, None, original_filename=file.filename
        )
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be UTF-8 encoded")
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Upload conversion failed")
        raise HTTPException(status_code=500, detail=f"Error processing file: {str(e)}")


@app.get("/download/{filename}")
async def download_html(filename: str):
    output_path = output_dir_path / filename
    # Return 404 when the file does not exist
    if Path(filename).name != filename or not output_path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(
        path=str(output_path),
        filename=filename,
        media_type="text/html",
    )


@app.get("/history")
async def history(limit: int = Query(20, ge=1, le=200), db: Session = Depends(get_db)):
    rows = (
        db.query(models.ConversionHistory)
        .order_by(models.ConversionHistory.id.desc())
        .limit(limit)
        .all()
    )
    return {"items": [row.to_dict() for row in rows]}


@app.get("/health")
async def health_check():
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}
