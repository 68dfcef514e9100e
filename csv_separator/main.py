import logging
import os
import tempfile
from pathlib import Path
from typing import List

from fastapi import FastAPI, UploadFile, File, HTTPException, Query
from .detect import analyze
from .errors import SeparatorError
from .models import DetectOptions, DetectResponse, HealthResponse
from .rules import ACCEPTED_SUFFIXES

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="csv-separator",
    description="Field separator detection for delimited text files",
    version="0.1.0",
)

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.post("/separator", response_model=DetectResponse)
async def detect_separator(
    file: UploadFile = File(...),
    exclude: List[str] = Query(default=[]),
    include: List[str] = Query(default=[]),
    lucky: bool = False,
):
    suffix = Path(file.filename or "").suffix.lower()
    if suffix not in ACCEPTED_SUFFIXES:
        raise HTTPException(status_code=422, detail="Only delimited text files are supported")

    raw = await file.read()

    tmp = tempfile.NamedTemporaryFile(suffix=suffix, delete=False)
    try:
        tmp.write(raw)
        tmp.close()
        options = DetectOptions(exclude=exclude, include=include, lucky=lucky)
        result = analyze(tmp.name, options)
    except SeparatorError as exc:
        logger.info("Detection failed for %s: %s", file.filename, exc.cause)
        raise HTTPException(status_code=422, detail={"issue": exc.kind, "message": exc.cause})
    finally:
        os.unlink(tmp.name)

    return DetectResponse(filename=file.filename, separator=result.separators[0], result=result)
