import logging
import time
from pathlib import Path
from typing import Tuple

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from app.core.config import settings

logger = logging.getLogger(__name__)

# Public path the upload directory is mounted on
UPLOADS_URL_PREFIX = "/uploads"


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def stored_filename(original_name: str) -> str:
    """Prefix the client's file name with the epoch milliseconds."""
    # Drop any directory components the client may have sent
    safe_name = Path(original_name).name or "file"
    return f"{int(time.time() * 1000)}-{safe_name}"


async def store_upload(file: UploadFile) -> Tuple[str, str, str]:
    """
    Persist an uploaded file to the upload directory.

    No content-type or size checks are applied.

    Returns:
        (file_url, original file name, content type)
    """
    filename = stored_filename(file.filename)
    destination = upload_dir() / filename
    content = await file.read()
    await run_in_threadpool(destination.write_bytes, content)
    logger.info(f"Stored upload {file.filename} as {destination} ({len(content)} bytes)")
    return f"{UPLOADS_URL_PREFIX}/{filename}", file.filename, file.content_type or "application/octet-stream"
