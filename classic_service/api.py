"""
FastAPI layer exposing the classic background remover.

Endpoints:
 - GET /health
 - GET /remove-bg?url=...&tol=...
 - POST /remove-bg
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from fastapi import FastAPI, HTTPException, Query, Response
from pydantic import BaseModel, HttpUrl, TypeAdapter, ValidationError
import requests

from . import config
from .errors import InvalidParameter
from .params import MattingParams
from .pipeline import process_image_bytes

settings = config.get_settings()
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(title="Classic Background Removal Service", version="0.1.0")

Number = Union[float, str]


class RemoveBgRequest(BaseModel):
    url: HttpUrl
    maxSize: Optional[Number] = None
    tol: Optional[Number] = None
    hard: Optional[Number] = None
    feather: Optional[Number] = None
    despeckle: Optional[Number] = None
    matte: Optional[str] = None  # "#RRGGBB"


class ImageTooLarge(Exception):
    pass


_HTTP_URL = TypeAdapter(HttpUrl)


def _validate_url(url: Union[str, HttpUrl, None]) -> str:
    if not url:
        raise InvalidParameter("Missing url")
    try:
        return str(_HTTP_URL.validate_python(str(url).strip()))
    except ValidationError as exc:
        raise InvalidParameter("Invalid URL") from exc


def _download_image(url: str) -> bytes:
    limit = settings.max_download_bytes
    headers = {"User-Agent": settings.user_agent, "Accept": "image/*,*/*"}
    with requests.get(
        url,
        headers=headers,
        timeout=(5, settings.request_timeout_seconds),
        stream=True,
    ) as resp:
        resp.raise_for_status()
        declared = resp.headers.get("Content-Length")
        if declared and declared.isdigit() and int(declared) > limit:
            raise ImageTooLarge(f"declared size {declared} exceeds {limit}")
        chunks = []
        received = 0
        for chunk in resp.iter_content(chunk_size=64 * 1024):
            received += len(chunk)
            if received > limit:
                raise ImageTooLarge(f"body exceeds {limit} bytes")
            chunks.append(chunk)
    return b"".join(chunks)


def _remove_bg(
    url: Union[str, HttpUrl, None],
    max_size: Optional[Number],
    tol: Optional[Number],
    hard: Optional[Number],
    feather: Optional[Number],
    despeckle: Optional[Number],
    matte: Optional[str],
) -> Response:
    try:
        image_url = _validate_url(url)
        params = MattingParams.from_raw(
            max_size=max_size,
            tol=tol,
            hard=hard,
            feather=feather,
            despeckle=despeckle,
            matte=matte,
            default_max_size=settings.default_max_size,
        )
    except InvalidParameter as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        image_bytes = _download_image(image_url)
    except ImageTooLarge as exc:
        logger.warning("Rejected oversized image from %s: %s", image_url, exc)
        raise HTTPException(status_code=413, detail="Image too large") from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Failed to download image: %s", exc)
        raise HTTPException(status_code=400, detail="Could not download image") from exc

    try:
        png_bytes = process_image_bytes(image_bytes, params)
    except InvalidParameter as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Background removal failed: %s", exc)
        raise HTTPException(status_code=500, detail="Background removal failed") from exc

    return Response(content=png_bytes, media_type="image/png")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/remove-bg")
def remove_bg_query(
    url: Optional[str] = None,
    max_size: Optional[str] = Query(None, alias="maxSize"),
    tol: Optional[str] = None,
    hard: Optional[str] = None,
    feather: Optional[str] = None,
    despeckle: Optional[str] = None,
    matte: Optional[str] = None,
):
    return _remove_bg(url, max_size, tol, hard, feather, despeckle, matte)


@app.post("/remove-bg")
def remove_bg(body: RemoveBgRequest):
    return _remove_bg(
        body.url,
        body.maxSize,
        body.tol,
        body.hard,
        body.feather,
        body.despeckle,
        body.matte,
    )
