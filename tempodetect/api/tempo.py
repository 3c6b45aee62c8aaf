"""Tempo estimation endpoints."""

from fastapi import APIRouter, Body, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from tempodetect.api.worker import handle_file, handle_message
from tempodetect.config import settings

router = APIRouter()

ALLOWED_EXTENSIONS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".aac", ".wma", ".aiff", ".opus"}


@router.post("/tempo")
async def estimate_tempo(message: dict = Body(...)):
    """Estimate tempo from already-decoded samples.

    The body is validated inside the worker so a malformed request still
    gets a tempo response (with ``error`` set) rather than a 422.
    """
    return await run_in_threadpool(handle_message, message)


@router.post("/tempo/file")
async def estimate_tempo_file(
    file: UploadFile = File(...),
    method: str = Form("autocorrelation"),
):
    """Decode an uploaded audio file and estimate its tempo."""
    if file.filename and "." in file.filename:
        ext = "." + file.filename.rsplit(".", 1)[-1].lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise HTTPException(400, f"Unsupported format. Use: {', '.join(sorted(ALLOWED_EXTENSIONS))}")

    content = await file.read()
    if len(content) > settings.max_upload_mb * 1024 * 1024:
        raise HTTPException(400, f"File too large (max {settings.max_upload_mb} MB)")

    return await run_in_threadpool(handle_file, content, method, file.filename)
