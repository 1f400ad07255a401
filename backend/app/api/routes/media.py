import asyncio
import logging
from typing import Annotated, Any, Literal

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from app.api.deps import get_current_active_superuser
from app.core.config import settings
from app.models import Message
from app.services import storage
from app.services.pexels import PexelsSearchResult, search_photos

router = APIRouter(
    prefix="/media",
    tags=["media"],
    dependencies=[Depends(get_current_active_superuser)],
)
logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


@router.post("/upload")
async def upload_image(
    file: Annotated[UploadFile, File()],
    bucket: Annotated[Literal["blogs", "countries"], Form()] = "blogs",
) -> dict[str, str]:
    extension = IMAGE_EXTENSIONS.get(file.content_type or "")
    if extension is None:
        raise HTTPException(
            status_code=400,
            detail="Only JPEG, PNG, WebP and GIF images are allowed",
        )
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File is larger than 5 MB")
    stored = await asyncio.to_thread(
        storage.save_bytes, data, folder=bucket, extension=extension
    )
    logger.info("Uploaded %s (%s bytes) to %s", file.filename, len(data), stored["path"])
    return stored


@router.delete("/{path:path}")
def delete_media(path: str) -> Message:
    try:
        removed = storage.delete_file(path)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not removed:
        raise HTTPException(status_code=404, detail="File not found")
    return Message(message="File deleted successfully")


@router.get("/pexels/search", response_model=PexelsSearchResult)
async def pexels_search(
    query: Annotated[str, Query(min_length=1)],
    per_page: Annotated[int, Query(ge=1, le=80)] = 15,
    page: Annotated[int, Query(ge=1)] = 1,
    orientation: Literal["landscape", "portrait", "square"] = "landscape",
) -> Any:
    result = await search_photos(query, per_page=per_page, page=page, orientation=orientation)
    if result is None:
        raise HTTPException(status_code=503, detail="Photo search is unavailable")
    return result
