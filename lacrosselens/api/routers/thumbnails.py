"""Serves generated video thumbnails."""
from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from lacrosselens.config.settings import get_settings

router = APIRouter(prefix="/thumbnails", tags=["thumbnails"])


@router.get("/{filename}")
def get_thumbnail(filename: str):
    if Path(filename).name != filename or not filename.endswith(".jpg"):
        raise HTTPException(status_code=404, detail="Thumbnail not found")

    path = Path(get_settings().thumbnail_dir) / filename
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Thumbnail not found")

    return FileResponse(path, media_type="image/jpeg")
