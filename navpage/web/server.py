"""FastAPI icon upload proxy for the navigation page."""
import logging
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from navpage.app.config import Settings, get_settings
from navpage.app.logging import setup_logging
from navpage.upload.blob import BlobStore, get_blob_store
from navpage.upload.errors import BadRequest, UploadError
from navpage.upload.proxy import handle_delete, handle_upload, require_store

logger = logging.getLogger("navpage.web")

app = FastAPI(title="navpage upload proxy")


def settings_dependency() -> Settings:
    return get_settings()


def blob_store_dependency(
    settings: Settings = Depends(settings_dependency),
) -> Optional[BlobStore]:
    return get_blob_store(settings)


@app.on_event("startup")
async def startup():
    setup_logging()


@app.exception_handler(UploadError)
async def upload_error_handler(request: Request, exc: UploadError):
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


@app.get("/health")
async def health(settings: Settings = Depends(settings_dependency)):
    return {"status": "ok", "upload_configured": settings.upload_configured}


@app.post("/api/upload")
async def upload_icon(
    request: Request,
    settings: Settings = Depends(settings_dependency),
    store: Optional[BlobStore] = Depends(blob_store_dependency),
):
    require_store(store)

    try:
        form = await request.form()
    except (HTTPException, MultiPartException) as e:
        detail = getattr(e, "detail", None) or getattr(e, "message", None) or str(e)
        raise BadRequest(f"Malformed upload: {detail}") from e
    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        file_bytes, mime_type, size, filename = None, None, None, None
    else:
        file_bytes = await upload.read()
        mime_type = upload.content_type
        size = upload.size if upload.size is not None else len(file_bytes)
        filename = upload.filename

    url = await handle_upload(
        store,
        file_bytes,
        mime_type,
        size,
        filename,
        max_size=settings.upload_max_size,
        prefix=settings.upload_prefix,
    )
    return {"url": url}


@app.delete("/api/upload")
async def delete_icon(
    request: Request,
    store: Optional[BlobStore] = Depends(blob_store_dependency),
):
    require_store(store)

    try:
        body = await request.json()
    except ValueError:
        body = None
    url = body.get("url") if isinstance(body, dict) else None
    if not isinstance(url, str):
        url = None

    await handle_delete(store, url)
    return {"ok": True}
